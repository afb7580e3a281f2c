"""Translate the selector subset produced by the synthesizer into XPath 1.0.

Supported input: tag names or ``*``, ``#id``, ``.class``, ``:nth-child(b)``,
``:nth-child(an+b)`` and ``:nth-child(-an+b)`` (several are ANDed), joined by
`` > `` and `` + `` combinators and `` , `` alternation. Anything else raises
:class:`UnsupportedSelectorError`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

_IDENT = r"(?:\\[0-9a-fA-F]{1,6}\s?|\\[^\r\n\f0-9a-fA-F]|[A-Za-z0-9_\-\u00a0-\U0010ffff])+"
_TAG_RE = re.compile(r"\*|[A-Za-z][A-Za-z0-9-]*")
_TOKEN_RE = re.compile(rf"#(?P<id>{_IDENT})|\.(?P<cls>{_IDENT})|:nth-child\((?P<nth>[^)]*)\)")
_NTH_RE = re.compile(r"^(?:(?P<index>\d+)|(?P<neg>-)?(?P<a>\d*)n\+(?P<b>\d+))$")
_ESCAPE_RE = re.compile(r"\\(?:([0-9a-fA-F]{1,6})\s?|(.))", re.DOTALL)

_CHILD_POSITION = "position()"
_SIBLING_POSITION = "(count(preceding-sibling::*) + 1)"


class UnsupportedSelectorError(ValueError):
    """Raised for selector text outside the translatable subset."""


@dataclass
class _Compound:
    tag: Optional[str] = None
    id: Optional[str] = None
    classes: List[str] = field(default_factory=list)
    nth: List[str] = field(default_factory=list)


def _unescape(value: str) -> str:
    def _replace(match: "re.Match[str]") -> str:
        if match.group(1):
            return chr(int(match.group(1), 16))
        return match.group(2)

    return _ESCAPE_RE.sub(_replace, value)


def _literal(value: str) -> str:
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    pieces = ", '\"', ".join(f'"{piece}"' for piece in value.split('"'))
    return f"concat({pieces})"


def _parse_compound(part: str) -> _Compound:
    compound = _Compound()
    position = 0
    tag = _TAG_RE.match(part)
    if tag:
        compound.tag = tag.group(0).lower()
        position = tag.end()
    while position < len(part):
        token = _TOKEN_RE.match(part, position)
        if not token:
            raise UnsupportedSelectorError(f"Unsupported selector fragment: {part!r}")
        if token.group("id") is not None:
            if compound.id is not None:
                raise UnsupportedSelectorError(f"Multiple ids in fragment: {part!r}")
            compound.id = _unescape(token.group("id"))
        elif token.group("cls") is not None:
            compound.classes.append(_unescape(token.group("cls")))
        else:
            compound.nth.append(token.group("nth"))
        position = token.end()
    if position == 0:
        raise UnsupportedSelectorError(f"Empty selector fragment in {part!r}")
    return compound


def _nth_condition(expression: str, position: str) -> str:
    match = _NTH_RE.match(expression)
    if not match:
        raise UnsupportedSelectorError(f"Unsupported :nth-child expression: {expression!r}")
    if match.group("index") is not None:
        return f"{position} = {int(match.group('index'))}"
    step = int(match.group("a")) if match.group("a") else 1
    offset = int(match.group("b"))
    if step == 0:
        return f"{position} = {offset}"
    if match.group("neg"):
        condition = f"{position} <= {offset}"
        if step > 1:
            condition += f" and ({offset} - {position}) mod {step} = 0"
    else:
        condition = f"{position} >= {offset}"
        if step > 1:
            condition += f" and ({position} - {offset}) mod {step} = 0"
    return condition


def _step(compound: _Compound, sibling: bool) -> str:
    position = _SIBLING_POSITION if sibling else _CHILD_POSITION
    tag = compound.tag if compound.tag not in (None, "*") else None
    predicates: List[str] = []
    if sibling:
        base = "following-sibling::*[1]"
    elif compound.nth:
        base = "*"
    else:
        base = tag or "*"
        tag = None

    if compound.nth:
        conditions = " and ".join(_nth_condition(expression, position) for expression in compound.nth)
        predicates.append(f"[{conditions}]")
    if tag:
        predicates.append(f"[self::{tag}]")
    if compound.id is not None:
        predicates.append(f"[@id={_literal(compound.id)}]")
    for class_name in compound.classes:
        predicates.append(f'[contains(concat(" ", normalize-space(@class), " "), {_literal(" " + class_name + " ")})]')
    return base + "".join(predicates)


def css_to_xpath(selector: str) -> str:
    """Translate ``selector`` to an XPath 1.0 union expression."""
    if not selector or not selector.strip():
        raise UnsupportedSelectorError("Empty selector")
    alternates = []
    for alternate in selector.split(", "):
        steps = []
        for child_part in alternate.split(" > "):
            sibling_parts = child_part.split(" + ")
            segment = [_step(_parse_compound(sibling_parts[0]), sibling=False)]
            segment.extend(_step(_parse_compound(part), sibling=True) for part in sibling_parts[1:])
            steps.append("/".join(segment))
        alternates.append("//" + "/".join(steps))
    return " | ".join(alternates)
