"""Derive textual keys for control and container references.

Identity is approximated by rendered text: ``this.button1`` and ``button1``
are two different controls even when they denote the same object at run
time.  There is no symbol resolution.
"""

from __future__ import annotations

from typing import Optional

from designer_lint.syntax import Expression, MemberAccess, Name

#: Textual key of a control reference, e.g. ``button3`` or ``this.button1``.
ControlKey = str

#: Textual key of a container's child collection, e.g. ``this.Controls``.
ContainerKey = str


def extract_control_key(expr: Expression) -> Optional[ControlKey]:
    """Return the key for *expr*, or ``None`` for unrecognized shapes.

    - local variable: ``button3``        -> ``"button3"``
    - field / chain:  ``this.button1``   -> ``"this.button1"``
    """
    if isinstance(expr, Name):
        return expr.identifier or None
    if isinstance(expr, MemberAccess):
        return expr.render() or None
    return None


def extract_container_key(expr: Expression) -> Optional[ContainerKey]:
    """Key for the receiver of an attach call (``panel1.Controls``)."""
    return extract_control_key(expr)


__all__ = ["ControlKey", "ContainerKey", "extract_control_key", "extract_container_key"]
