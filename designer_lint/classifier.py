"""
designer_lint/classifier.py
═══════════════════════════

Recognizes the two statement shapes the tab-order pass cares about:

  container attach    ``<container>.Controls.Add(<control>);``
  order assignment    ``<control>.TabIndex = <value>;``

:func:`classify` returns one of :class:`AttachOp`, :class:`OrderAssignOp`,
:class:`InvalidOrderAssignOp`, or ``None`` for everything else.  The pass
is best-effort: shapes it cannot make sense of are ignored, never raised.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

from designer_lint.identifiers import (
    ContainerKey,
    ControlKey,
    extract_container_key,
    extract_control_key,
)
from designer_lint.syntax import (
    AssignmentStatement,
    ExpressionStatement,
    Invocation,
    Literal,
    LiteralKind,
    MemberAccess,
    SourceLocation,
    Statement,
)

logger = logging.getLogger(__name__)

#: Callee suffix of a container attach call.
ATTACH_SUFFIX = ".Controls.Add"

#: Property holding the declared keyboard traversal order.
ORDER_PROPERTY = "TabIndex"

_INTEGER_SUFFIX = re.compile(r"(?:[uU][lL]?|[lL][uU]?)$")
_REAL_MARKERS = re.compile(r"[.eE]|[fFdDmM]$")


@dataclass(frozen=True, slots=True)
class AttachOp:
    """``container.Add(control)`` observed at ``loc``."""

    container: ContainerKey
    control: ControlKey
    loc: SourceLocation


@dataclass(frozen=True, slots=True)
class OrderAssignOp:
    """``control.TabIndex = value`` with an integer literal value."""

    control: ControlKey
    value: int
    value_loc: SourceLocation


@dataclass(frozen=True, slots=True)
class InvalidOrderAssignOp:
    """``control.TabIndex = <anything but an integer literal>``."""

    control: ControlKey
    value_text: str
    value_loc: SourceLocation


ClassifiedOp = Union[AttachOp, OrderAssignOp, InvalidOrderAssignOp]


def parse_integer_literal(text: str) -> Optional[int]:
    """Integer value of a C# numeric literal, or ``None`` for reals.

    >>> parse_integer_literal("0x1F")
    31
    >>> parse_integer_literal("1_000u")
    1000
    >>> parse_integer_literal("2F") is None
    True
    """
    body = text.replace("_", "")
    lowered = body.lower()
    if lowered.startswith(("0x", "0b")):
        body = _INTEGER_SUFFIX.sub("", body)
        try:
            return int(body, 16 if lowered.startswith("0x") else 2)
        except ValueError:
            return None
    body = _INTEGER_SUFFIX.sub("", body)
    if not body or _REAL_MARKERS.search(body):
        return None
    try:
        return int(body, 10)
    except ValueError:
        return None


def classify(statement: Statement) -> Optional[ClassifiedOp]:
    """Classify one top-level statement of an initialization routine."""
    if isinstance(statement, ExpressionStatement):
        return _classify_attach(statement)
    if isinstance(statement, AssignmentStatement):
        return _classify_order_assignment(statement)
    return None


def _classify_attach(statement: ExpressionStatement) -> Optional[AttachOp]:
    call = statement.expression
    if not isinstance(call, Invocation) or not isinstance(call.callee, MemberAccess):
        return None
    if not call.callee.render().endswith(ATTACH_SUFFIX):
        return None
    if not call.arguments:
        logger.debug("%s: attach call without arguments ignored", statement.loc)
        return None

    # this.Controls.Add(this.button2): container "this.Controls", control "this.button2"
    container = extract_container_key(call.callee.receiver)
    control = extract_control_key(call.arguments[0])
    if container is None or control is None:
        logger.debug("%s: attach call with unrecognized operands ignored", statement.loc)
        return None
    return AttachOp(container=container, control=control, loc=statement.loc)


def _classify_order_assignment(statement: AssignmentStatement) -> Optional[ClassifiedOp]:
    target = statement.target
    if not statement.is_simple or not isinstance(target, MemberAccess):
        return None
    if target.name != ORDER_PROPERTY:
        return None

    control = extract_control_key(target.receiver)
    if control is None:
        # The property shape matched but the receiver has no usable key.
        logger.warning(
            "%s: cannot identify the control in %r; assignment skipped",
            statement.loc, target.render(),
        )
        return None

    value = statement.value
    if isinstance(value, Literal) and value.kind is LiteralKind.NUMERIC:
        number = parse_integer_literal(value.text)
        if number is not None:
            return OrderAssignOp(control=control, value=number, value_loc=value.loc)
    return InvalidOrderAssignOp(
        control=control, value_text=value.render(), value_loc=value.loc,
    )


__all__ = [
    "ATTACH_SUFFIX", "ORDER_PROPERTY",
    "AttachOp", "OrderAssignOp", "InvalidOrderAssignOp", "ClassifiedOp",
    "classify", "parse_integer_literal",
]
