# tests/test_consistency.py
"""Tests for attach position vs. declared order comparison."""

from tests.conftest import loc
from designer_lint.consistency import check_consistency
from designer_lint.findings import Finding, FindingKind
from designer_lint.tracker import Attachment, DeclaredOrder


def _seq(**containers):
    return {
        name.replace("_", "."): [Attachment(c, loc(i + 1)) for i, c in enumerate(children)]
        for name, children in containers.items()
    }


def _declared(**orders):
    return {name: DeclaredOrder(value, loc(100 + value, 30)) for name, value in orders.items()}


class TestCheckConsistency:

    def test_matching_positions(self):
        assert check_consistency(_seq(this_Controls=["btn1", "btn2"]),
                                 _declared(btn1=0, btn2=1)) == []

    def test_single_mismatch(self):
        findings = check_consistency(_seq(this_Controls=["btn1", "btn2"]),
                                     _declared(btn1=0, btn2=5))
        assert findings == [Finding.inconsistent(
            control="btn2", location=loc(105, 30),
            container="this.Controls", position=1, declared=5,
        )]

    def test_finding_is_at_declared_value(self):
        [finding] = check_consistency(_seq(this_Controls=["a"]), _declared(a=2))
        assert finding.kind is FindingKind.INCONSISTENT_ORDER
        assert finding.location == loc(102, 30)

    def test_undeclared_controls_are_skipped(self):
        assert check_consistency(_seq(this_Controls=["a", "b", "c"]), _declared(c=2)) == []

    def test_declared_but_never_attached(self):
        assert check_consistency(_seq(this_Controls=["a"]), _declared(a=0, ghost=7)) == []

    def test_containers_use_their_own_positions(self):
        seq = _seq(panelA_Controls=["x"], panelB_Controls=["y"])
        assert check_consistency(seq, _declared(x=0, y=0)) == []

    def test_duplicate_attach_checked_at_each_position(self):
        findings = check_consistency(_seq(this_Controls=["a", "a"]), _declared(a=0))
        assert [(f.control, f.position) for f in findings] == [("a", 1)]

    def test_control_in_two_containers(self):
        seq = _seq(panelA_Controls=["a"], panelB_Controls=["b", "a"])
        findings = check_consistency(seq, _declared(a=0, b=0))
        assert [(f.container, f.position) for f in findings] == [("panelB.Controls", 1)]

    def test_order_follows_containers_then_positions(self):
        seq = _seq(panelA_Controls=["a", "b"], panelB_Controls=["c"])
        findings = check_consistency(seq, _declared(a=9, b=9, c=9))
        assert [f.control for f in findings] == ["a", "b", "c"]

    def test_empty_inputs(self):
        assert check_consistency({}, {}) == []

    def test_repeatable_and_pure(self):
        seq = _seq(this_Controls=["a", "b"])
        declared = _declared(a=1, b=0)
        seq_before = {k: list(v) for k, v in seq.items()}
        declared_before = dict(declared)
        first = check_consistency(seq, declared)
        second = check_consistency(seq, declared)
        assert first == second
        assert len(first) == 2
        assert seq == seq_before
        assert declared == declared_before

    def test_findings_never_exceed_attach_count(self):
        seq = _seq(p1_Controls=["a", "b", "c"], p2_Controls=["a", "d"])
        findings = check_consistency(seq, _declared(a=4, b=4, c=4, d=4))
        assert len(findings) <= sum(len(v) for v in seq.values())
