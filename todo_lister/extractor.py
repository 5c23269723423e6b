"""TODO extraction from free-form document text.

Each line is tried against an ordered list of rules; the first rule whose
trimmed capture is non-empty wins and the remaining rules are not tried:

- ``labeled``   ``... TODO: text``  captures the text after the colon
- ``trailing``  ``text TODO``       captures the text before the marker
- ``embedded``  ``a (TODO) b``      captures the whole line

A line that is exactly ``TODO`` and matched nothing borrows its item from the
previous line, or, when the previous line is blank (or missing), from the run of
non-empty lines that follows it.
"""

from __future__ import annotations

import dataclasses
import re
from typing import Callable, List, Optional, Sequence, Union

from .plaintext import strip_markdown

MARKER = "TODO"

_LINK = re.compile(r"\[\[([^\]]+)\]\]")
_LINE_BREAK = re.compile(r"\r?\n")


@dataclasses.dataclass(frozen=True, slots=True)
class Matched:
    text: str


@dataclasses.dataclass(frozen=True, slots=True)
class NoMatch:
    pass


NO_MATCH = NoMatch()
RuleResult = Union[Matched, NoMatch]


@dataclasses.dataclass(frozen=True, slots=True)
class Rule:
    """A recognition rule; group 1 of ``pattern`` is the capture."""

    name: str
    pattern: re.Pattern

    def apply(self, line: str) -> RuleResult:
        m = self.pattern.match(line)
        if not m:
            return NO_MATCH
        text = (m.group(1) or "").strip()
        return Matched(text) if text else NO_MATCH


def build_rules(marker: str = MARKER) -> List[Rule]:
    mk = re.escape(marker)
    return [
        Rule("labeled", re.compile(rf"^.*{mk}\s*:\s*(.+?)$")),
        Rule("trailing", re.compile(rf"^(.+?)\s+{mk}\s*$")),
        Rule("embedded", re.compile(rf"^(.+?[\s(]{mk}[)\s].+?)$")),
    ]


DEFAULT_RULES = tuple(build_rules())


def strip_links(text: str) -> str:
    return _LINK.sub(r"\1", text)


def split_lines(text: str) -> List[str]:
    return [line.strip() for line in _LINE_BREAK.split(text)]


def match_line(line: str, rules: Sequence[Rule] = DEFAULT_RULES) -> Optional[str]:
    for rule in rules:
        result = rule.apply(line)
        if isinstance(result, Matched):
            return result.text
    return None


def _bare_marker_items(lines: List[str], idx: int) -> List[str]:
    if idx > 0 and lines[idx - 1]:
        return [lines[idx - 1]]
    items = []
    for following in lines[idx + 1:]:
        if not following:
            break
        items.append(following)
    return items


def extract(
    raw_text: str,
    normalize: Callable[[str], str] = strip_markdown,
    rules: Sequence[Rule] = DEFAULT_RULES,
    marker: str = MARKER,
) -> List[str]:
    """Return the TODO items of ``raw_text`` in the order they appear."""
    if not raw_text:
        return []
    # byte order mark would otherwise hide a bare marker on the first line
    lines = split_lines(normalize(strip_links(raw_text.lstrip("\ufeff"))))
    items: List[str] = []
    for idx, line in enumerate(lines):
        found = match_line(line, rules)
        if found is not None:
            items.append(found)
        elif line == marker:
            items.extend(_bare_marker_items(lines, idx))
    return items
