"""Structured defect records produced by the tab-order pass."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from designer_lint.identifiers import ContainerKey, ControlKey
from designer_lint.syntax import SourceLocation


class FindingKind(enum.Enum):
    NON_NUMERIC_ORDER_VALUE = "NonNumericOrderValue"
    INCONSISTENT_ORDER = "InconsistentOrder"


@dataclass(frozen=True, slots=True)
class Finding:
    """
    One finding, before it is rendered as a diagnostic.

    ``container``, ``position`` and ``declared`` are set for
    ``INCONSISTENT_ORDER``; ``value_text`` for ``NON_NUMERIC_ORDER_VALUE``.
    """

    kind: FindingKind
    control: ControlKey
    location: SourceLocation
    container: Optional[ContainerKey] = None
    position: Optional[int] = None
    declared: Optional[int] = None
    value_text: Optional[str] = None

    @classmethod
    def non_numeric(cls, control: ControlKey, location: SourceLocation,
                    value_text: str = "") -> "Finding":
        return cls(FindingKind.NON_NUMERIC_ORDER_VALUE, control, location,
                   value_text=value_text)

    @classmethod
    def inconsistent(cls, control: ControlKey, location: SourceLocation,
                     container: ContainerKey, position: int,
                     declared: int) -> "Finding":
        return cls(FindingKind.INCONSISTENT_ORDER, control, location,
                   container=container, position=position, declared=declared)


__all__ = ["FindingKind", "Finding"]
