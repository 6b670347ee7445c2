"""Pipeline engine.

Composes an ordered list of phase definitions into one async transform over
a context value. Three kinds of definition exist:

- Plain(phase): always runs
- Guarded(condition, phase): runs when condition(context) is true
- GuardedGroup(condition, phases): runs every phase in order when true

Conditions are pure synchronous predicates evaluated exactly once, against
the context as left by every phase that ran before. Phases never run
concurrently with each other. An exception raised by a phase aborts the run
and propagates unchanged; the engine neither retries nor rolls back.

Progress is reported to an injected PipelineObserver instead of a global
logger, and each executed phase runs inside a tracing span.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import functools
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol, Sequence, Tuple, TypeVar, Union

from loguru import logger

from editflow.tracing import init_tracing, safe_set_span_attributes

T = TypeVar("T")

Phase = Callable[[T], Awaitable[T]]
Condition = Callable[[T], bool]


@dataclass(frozen=True)
class Plain:
    phase: Phase


@dataclass(frozen=True)
class Guarded:
    condition: Condition
    phase: Phase


@dataclass(frozen=True)
class GuardedGroup:
    condition: Condition
    phases: Sequence[Phase]

    def __post_init__(self) -> None:
        object.__setattr__(self, "phases", tuple(self.phases))


PhaseDefinition = Union[Plain, Guarded, GuardedGroup]


def phase_name(phase: Callable) -> str:
    """Display name for functions, bound methods and partials."""
    if isinstance(phase, functools.partial):
        return phase_name(phase.func)
    name = getattr(phase, "__name__", None)
    if name:
        return name
    return type(phase).__name__


class PipelineObserver(Protocol):
    """Receives phase progress events."""

    def phase_started(self, name: str) -> None: ...

    def phase_finished(self, name: str, seconds: float) -> None: ...

    def phase_skipped(self, name: str) -> None: ...

    def group_started(self, names: Sequence[str]) -> None: ...

    def group_skipped(self, names: Sequence[str]) -> None: ...


class LoguruObserver:
    """Default observer: reports progress through loguru."""

    def phase_started(self, name: str) -> None:
        logger.info(f"Executing phase: {name}")

    def phase_finished(self, name: str, seconds: float) -> None:
        logger.debug(f"Finished phase: {name} ({seconds:.2f}s)")

    def phase_skipped(self, name: str) -> None:
        logger.info(f"Skipping conditional phase: {name}")

    def group_started(self, names: Sequence[str]) -> None:
        logger.info(f"Executing phase group ({len(names)} phases): {', '.join(names)}")

    def group_skipped(self, names: Sequence[str]) -> None:
        logger.info(f"Skipping phase group ({len(names)} phases): {', '.join(names)}")


class NullObserver:
    """Observer that ignores every event."""

    def phase_started(self, name: str) -> None:
        pass

    def phase_finished(self, name: str, seconds: float) -> None:
        pass

    def phase_skipped(self, name: str) -> None:
        pass

    def group_started(self, names: Sequence[str]) -> None:
        pass

    def group_skipped(self, names: Sequence[str]) -> None:
        pass


def _validate(definitions: Sequence[object]) -> Tuple[PhaseDefinition, ...]:
    for definition in definitions:
        if not isinstance(definition, (Plain, Guarded, GuardedGroup)):
            raise TypeError(
                f"Unsupported phase definition: {definition!r}; "
                "use Plain, Guarded or GuardedGroup"
            )
    return tuple(definitions)  # type: ignore[arg-type]


def pipeline(
    *definitions: PhaseDefinition,
    observer: Optional[PipelineObserver] = None,
) -> Callable[[T], Awaitable[T]]:
    """Build an async function that runs the definitions in declaration order.

    Raises:
        TypeError: At construction, when a definition is not Plain, Guarded or GuardedGroup.
    """
    steps = _validate(definitions)
    obs: PipelineObserver = observer if observer is not None else LoguruObserver()

    async def _run_phase(phase: Phase, context: T) -> T:
        name = phase_name(phase)
        tracer = init_tracing()
        obs.phase_started(name)
        started = time.monotonic()
        with tracer.start_as_current_span(f"pipeline.{name}") as span:
            safe_set_span_attributes(span, {"pipeline.phase": name})
            result = await phase(context)
        obs.phase_finished(name, time.monotonic() - started)
        return result

    async def run(context: T) -> T:
        current = context

        for step in steps:
            if isinstance(step, Plain):
                current = await _run_phase(step.phase, current)

            elif isinstance(step, Guarded):
                if step.condition(current):
                    current = await _run_phase(step.phase, current)
                else:
                    obs.phase_skipped(phase_name(step.phase))

            elif isinstance(step, GuardedGroup):
                names = [phase_name(p) for p in step.phases]
                if step.condition(current):
                    obs.group_started(names)
                    for phase in step.phases:
                        current = await _run_phase(phase, current)
                else:
                    obs.group_skipped(names)

        return current

    return run
