"""
Search Term Extraction
======================
Reduces free-text discovery hints to keyword-like tokens suitable for a
whole-word code search.

- Quoted substrings ("...", `...`, and '...' when the quotes are not part
  of a word such as user's or doesn't) pass through verbatim.
- Possessive and contraction tails are dropped before tokenising.
- Remaining text is split into identifier-like tokens.
- Short tokens and generic "broad" words are dropped.

The extractor is pluggable: any callable mapping a hint to a list of tokens
can replace extract_terms.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, List

TermExtractor = Callable[[str], List[str]]

MIN_TERM_LENGTH = 3

BROAD_TERMS = frozenset({
    # articles, pronouns, conjunctions, prepositions
    "the", "and", "for", "with", "from", "into", "onto", "this", "that", "these",
    "those", "there", "their", "them", "they", "then", "than", "when", "where",
    "which", "what", "while", "who", "whom", "why", "how", "its", "our", "your",
    "you", "are", "was", "were", "been", "being", "but", "not", "all", "any",
    "each", "every", "some", "more", "most", "other", "such", "only", "also",
    "about", "after", "before", "over", "under", "between", "within", "without",
    "via", "per", "out", "off", "too", "very", "just",
    # contraction stems left once the apostrophe tail is dropped
    "doesn", "don", "didn", "isn", "aren", "wasn", "weren", "won", "hasn",
    "haven", "hadn", "shouldn", "couldn", "wouldn", "mustn",
    # request verbs
    "add", "adds", "added", "adding", "make", "makes", "create", "creates",
    "update", "updates", "change", "changes", "modify", "fix", "fixes", "remove",
    "removes", "delete", "use", "uses", "using", "used", "need", "needs", "want",
    "should", "must", "can", "could", "would", "will", "have", "has", "had",
    "does", "did", "get", "gets", "set", "sets", "implement", "implements",
    "handle", "handles", "ensure", "allow", "allows", "support", "supports",
    "improve", "refactor", "explain", "show", "find", "check", "new", "existing",
    # generic code vocabulary
    "file", "files", "code", "codes", "system", "component", "components",
    "function", "functions", "method", "methods", "class", "classes", "module",
    "modules", "variable", "variables", "value", "values", "logic", "feature",
    "features", "project", "application", "app", "program", "script", "source",
    "implementation", "comment", "comments", "line", "lines", "block", "blocks",
    "type", "types", "data", "object", "objects", "string", "number", "list",
    "error", "errors", "test", "tests", "simple", "top", "bottom", "current",
})

_QUOTED_RE = re.compile(r"\"([^\"]+)\"|(?<![\w'])'([^'\n]+)'(?![\w'])|`([^`]+)`")
# possessive and contraction tails: user's, doesn't
_APOSTROPHE_TAIL_RE = re.compile(r"(?<=\w)'\w*")
_TOKEN_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*(?:[.-][A-Za-z0-9_$]+)*")


def extract_terms(hint: str) -> List[str]:
    """Extract keyword-like tokens from one hint, in order of appearance."""
    if not hint or not hint.strip():
        return []

    terms: List[str] = []

    for match in _QUOTED_RE.finditer(hint):
        quoted = next(g for g in match.groups() if g is not None).strip()
        if quoted:
            terms.append(quoted)

    remainder = _APOSTROPHE_TAIL_RE.sub("", _QUOTED_RE.sub(" ", hint))
    for token in _TOKEN_RE.findall(remainder):
        if len(token) < MIN_TERM_LENGTH:
            continue
        if token.lower() in BROAD_TERMS:
            continue
        terms.append(token)

    return list(dict.fromkeys(terms))


def reduce_terms(hints: Iterable[str], extractor: TermExtractor = extract_terms) -> List[str]:
    """Apply the extractor to every hint and deduplicate across hints."""
    reduced: List[str] = []
    for hint in hints:
        if not isinstance(hint, str):
            continue
        reduced.extend(extractor(hint))
    return list(dict.fromkeys(reduced))
