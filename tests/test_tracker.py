# tests/test_tracker.py
"""Tests for per-scope ordering state."""

import pytest

from tests.conftest import loc
from designer_lint.classifier import AttachOp, InvalidOrderAssignOp, OrderAssignOp
from designer_lint.tracker import Attachment, DeclaredOrder, OrderingTracker


def _attach(container, control, line=1):
    return AttachOp(container, control, loc(line))


def _order(control, value, line=1):
    return OrderAssignOp(control, value, loc(line, 20))


def _invalid(control, text="x", line=1):
    return InvalidOrderAssignOp(control, text, loc(line, 20))


class TestAttachSequence:

    def test_attach_order_is_preserved(self):
        t = OrderingTracker()
        for name in ("b", "a", "c"):
            t.observe(_attach("this.Controls", name))
        assert t.children("this.Controls") == ["b", "a", "c"]

    def test_containers_are_independent(self):
        t = OrderingTracker()
        t.observe(_attach("panelA.Controls", "x"))
        t.observe(_attach("panelB.Controls", "y"))
        t.observe(_attach("panelA.Controls", "z"))
        assert t.children("panelA.Controls") == ["x", "z"]
        assert t.children("panelB.Controls") == ["y"]
        assert list(t.attach_sequence) == ["panelA.Controls", "panelB.Controls"]

    def test_duplicates_are_kept(self):
        t = OrderingTracker()
        t.observe(_attach("this.Controls", "a", line=1))
        t.observe(_attach("this.Controls", "a", line=2))
        assert t.attach_sequence["this.Controls"] == [
            Attachment("a", loc(1)), Attachment("a", loc(2)),
        ]

    def test_unknown_container(self):
        assert OrderingTracker().children("nowhere.Controls") == []


class TestDeclaredOrder:

    def test_last_assignment_wins(self):
        t = OrderingTracker()
        t.observe(_order("a", 3, line=1))
        t.observe(_order("a", 1, line=2))
        assert t.declared_order["a"] == DeclaredOrder(1, loc(2, 20))

    def test_order_before_attach_is_recorded(self):
        t = OrderingTracker()
        t.observe(_order("a", 0))
        t.observe(_attach("this.Controls", "a"))
        assert t.declared_order["a"].value == 0
        assert t.children("this.Controls") == ["a"]

    def test_invalid_assignment_blocks_later_literals(self):
        t = OrderingTracker()
        t.observe(_invalid("a"))
        t.observe(_order("a", 0))
        assert "a" not in t.declared_order
        assert "a" in t.invalid_controls

    def test_invalid_assignment_discards_earlier_literal(self):
        t = OrderingTracker()
        t.observe(_order("a", 0))
        t.observe(_invalid("a"))
        assert "a" not in t.declared_order

    def test_invalid_assignment_does_not_affect_others(self):
        t = OrderingTracker()
        t.observe(_invalid("a"))
        t.observe(_order("b", 2))
        assert t.declared_order["b"].value == 2


class TestObserve:

    def test_none_is_ignored(self):
        t = OrderingTracker()
        t.observe(None)
        assert t.observed == 0

    def test_observed_count(self):
        t = OrderingTracker()
        t.observe(_attach("this.Controls", "a"))
        t.observe(_order("a", 0))
        assert t.observed == 2

    def test_unexpected_operation(self):
        with pytest.raises(TypeError):
            OrderingTracker().observe("this.Controls.Add(a)")

    def test_repr(self):
        t = OrderingTracker()
        t.observe(_attach("this.Controls", "a"))
        assert repr(t) == "<OrderingTracker containers=1 declared=0>"
