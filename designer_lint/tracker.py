"""Per-scope accumulation of attach order and declared tab order."""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from designer_lint.classifier import (
    AttachOp,
    ClassifiedOp,
    InvalidOrderAssignOp,
    OrderAssignOp,
)
from designer_lint.identifiers import ContainerKey, ControlKey
from designer_lint.syntax import SourceLocation

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Attachment:
    control: ControlKey
    loc: SourceLocation


@dataclass(frozen=True, slots=True)
class DeclaredOrder:
    value: int
    loc: SourceLocation


#: container -> children in attach-call order (duplicates kept)
AttachSequence = Dict[ContainerKey, List[Attachment]]

#: control -> last declared order value
DeclaredOrders = Dict[ControlKey, DeclaredOrder]


class OrderingTracker:
    """
    Mutable state for exactly one scope.

    Create one tracker per analysed routine and drop it once the
    consistency check has run; trackers are never shared between scopes
    or threads.

    No validation happens here.  Attach calls and order assignments may
    arrive in any relative order.  A control whose order assignment was
    invalid has no declared order for the rest of the scope, even if a
    later statement assigns it a literal.
    """

    def __init__(self) -> None:
        self.attach_sequence: AttachSequence = OrderedDict()
        self.declared_order: DeclaredOrders = {}
        self.invalid_controls: Set[ControlKey] = set()
        self.observed = 0

    def observe(self, op: Optional[ClassifiedOp]) -> None:
        if op is None:
            return
        self.observed += 1
        if isinstance(op, AttachOp):
            self.attach_sequence.setdefault(op.container, []).append(
                Attachment(op.control, op.loc)
            )
        elif isinstance(op, OrderAssignOp):
            if op.control in self.invalid_controls:
                logger.debug(
                    "%s: order of %s ignored after an invalid assignment",
                    op.value_loc, op.control,
                )
                return
            self.declared_order[op.control] = DeclaredOrder(op.value, op.value_loc)
        elif isinstance(op, InvalidOrderAssignOp):
            self.invalid_controls.add(op.control)
            self.declared_order.pop(op.control, None)
        else:
            raise TypeError(f"Unexpected operation {op!r}")

    def children(self, container: ContainerKey) -> List[ControlKey]:
        return [a.control for a in self.attach_sequence.get(container, [])]

    def __repr__(self) -> str:
        return (
            f"<OrderingTracker containers={len(self.attach_sequence)} "
            f"declared={len(self.declared_order)}>"
        )


__all__ = [
    "Attachment", "DeclaredOrder", "AttachSequence", "DeclaredOrders",
    "OrderingTracker",
]
