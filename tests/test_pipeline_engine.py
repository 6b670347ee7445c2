"""
Tests for the Pipeline Engine
=============================

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from functools import partial
from unittest.mock import MagicMock

import pytest

from editflow.pipeline.engine import (
    Guarded,
    GuardedGroup,
    LoguruObserver,
    NullObserver,
    Plain,
    phase_name,
    pipeline,
)


def _recorder(name):
    async def phase(ctx):
        ctx["trace"].append(name)
        return ctx

    phase.__name__ = name
    return phase


def _ctx():
    return {"trace": [], "flag": False}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_plain_phases_run_in_declaration_order():
    run = pipeline(Plain(_recorder("a")), Plain(_recorder("b")), Plain(_recorder("c")), observer=NullObserver())

    ctx = await run(_ctx())

    assert ctx["trace"] == ["a", "b", "c"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_guarded_phase_skipped_when_condition_false():
    run = pipeline(
        Plain(_recorder("a")),
        Guarded(lambda ctx: ctx["flag"], _recorder("guarded")),
        Plain(_recorder("c")),
        observer=NullObserver(),
    )

    ctx = await run(_ctx())

    assert ctx["trace"] == ["a", "c"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_condition_sees_effects_of_previous_phases():
    async def set_flag(ctx):
        ctx["flag"] = True
        return ctx

    run = pipeline(
        Plain(set_flag),
        Guarded(lambda ctx: ctx["flag"], _recorder("guarded")),
        observer=NullObserver(),
    )

    ctx = await run(_ctx())

    assert ctx["trace"] == ["guarded"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_group_condition_evaluated_once_per_run():
    calls = []

    def condition(ctx):
        calls.append(list(ctx["trace"]))
        return True

    async def clear_flag_and_record(ctx):
        ctx["trace"].append("first")
        ctx["flag"] = False
        return ctx

    run = pipeline(
        GuardedGroup(condition, [clear_flag_and_record, _recorder("second"), _recorder("third")]),
        observer=NullObserver(),
    )

    ctx = await run(_ctx())

    assert ctx["trace"] == ["first", "second", "third"]
    assert calls == [[]]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_group_skipped_entirely_when_condition_false():
    run = pipeline(
        GuardedGroup(lambda ctx: False, [_recorder("x"), _recorder("y")]),
        Plain(_recorder("z")),
        observer=NullObserver(),
    )

    ctx = await run(_ctx())

    assert ctx["trace"] == ["z"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_phase_result_replaces_working_context():
    async def swap(ctx):
        return {"trace": ["swapped"], "flag": True}

    run = pipeline(Plain(swap), Plain(_recorder("after")), observer=NullObserver())

    ctx = await run(_ctx())

    assert ctx["trace"] == ["swapped", "after"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_exception_aborts_run_and_propagates():
    async def boom(ctx):
        raise RuntimeError("phase failed")

    later = _recorder("later")
    run = pipeline(Plain(_recorder("a")), Plain(boom), Plain(later), observer=NullObserver())
    ctx = _ctx()

    with pytest.raises(RuntimeError, match="phase failed"):
        await run(ctx)

    assert ctx["trace"] == ["a"]


@pytest.mark.unit
def test_unsupported_definition_rejected_at_construction():
    with pytest.raises(TypeError, match="Unsupported phase definition"):
        pipeline(Plain(_recorder("a")), _recorder("bare"))


@pytest.mark.unit
def test_group_phases_stored_as_tuple():
    group = GuardedGroup(lambda ctx: True, [_recorder("a")])
    assert isinstance(group.phases, tuple)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_observer_receives_progress_events():
    observer = MagicMock()
    run = pipeline(
        Plain(_recorder("a")),
        Guarded(lambda ctx: False, _recorder("skipped")),
        GuardedGroup(lambda ctx: True, [_recorder("g1"), _recorder("g2")]),
        GuardedGroup(lambda ctx: False, [_recorder("n1")]),
        observer=observer,
    )

    await run(_ctx())

    started = [c.args[0] for c in observer.phase_started.call_args_list]
    assert started == ["a", "g1", "g2"]
    observer.phase_skipped.assert_called_once_with("skipped")
    observer.group_started.assert_called_once_with(["g1", "g2"])
    observer.group_skipped.assert_called_once_with(["n1"])
    assert observer.phase_finished.call_count == 3


@pytest.mark.unit
@pytest.mark.asyncio
async def test_default_observer_is_loguru(monkeypatch):
    events = []
    monkeypatch.setattr(LoguruObserver, "phase_started", lambda self, name: events.append(name))

    run = pipeline(Plain(_recorder("a")))
    await run(_ctx())

    assert events == ["a"]


@pytest.mark.unit
def test_phase_name_handles_partials_and_bound_methods():
    class Phases:
        async def read_files(self, ctx):
            return ctx

    async def tagged(ctx, tag):
        return ctx

    assert phase_name(Phases().read_files) == "read_files"
    assert phase_name(partial(tagged, tag="x")) == "tagged"
