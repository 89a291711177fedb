"""Compare attach positions against declared tab order."""

from __future__ import annotations

from typing import List

from designer_lint.findings import Finding
from designer_lint.tracker import AttachSequence, DeclaredOrders


def check_consistency(
    attach_sequence: AttachSequence,
    declared_order: DeclaredOrders,
) -> List[Finding]:
    """
    Return one ``InconsistentOrder`` finding per mismatching
    (container, position).

    Each container is checked on its own, with zero-based positions.
    Controls without a declared order are never flagged.  A control that
    appears under several containers, or twice under one, is checked at
    every position.  The inputs are not modified, so repeated calls yield
    the same findings.
    """
    findings: List[Finding] = []
    for container, children in attach_sequence.items():
        for position, attachment in enumerate(children):
            declared = declared_order.get(attachment.control)
            if declared is None or declared.value == position:
                continue
            findings.append(Finding.inconsistent(
                control=attachment.control,
                location=declared.loc,
                container=container,
                position=position,
                declared=declared.value,
            ))
    return findings


__all__ = ["check_consistency"]
