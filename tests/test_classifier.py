# tests/test_classifier.py
"""Tests for attach-call and TabIndex assignment recognition."""

import logging

import pytest

from tests.conftest import attach, loc, order, ref
from designer_lint.classifier import (
    AttachOp,
    InvalidOrderAssignOp,
    OrderAssignOp,
    classify,
    parse_integer_literal,
)
from designer_lint.syntax import (
    AssignmentStatement,
    ExpressionStatement,
    Invocation,
    Literal,
    LiteralKind,
    MemberAccess,
    Name,
    Opaque,
    Unary,
    UnparsedStatement,
)


class TestParseIntegerLiteral:

    @pytest.mark.parametrize("text,expected", [
        ("0", 0),
        ("7", 7),
        ("42", 42),
        ("1_000", 1000),
        ("0x1F", 31),
        ("0X10", 16),
        ("0b101", 5),
        ("3u", 3),
        ("3L", 3),
        ("3UL", 3),
        ("0xFFu", 255),
    ])
    def test_integers(self, text, expected):
        assert parse_integer_literal(text) == expected

    @pytest.mark.parametrize("text", ["1.5", "2F", "2d", "1e3", "3m", ""])
    def test_reals_are_rejected(self, text):
        assert parse_integer_literal(text) is None


class TestAttachClassification:

    def test_form_attach(self):
        op = classify(attach("this.Controls", "this.button1", line=30))
        assert op == AttachOp("this.Controls", "this.button1", loc(30))

    def test_panel_attach(self):
        op = classify(attach("this.panel1.Controls", "button3"))
        assert isinstance(op, AttachOp)
        assert op.container == "this.panel1.Controls"
        assert op.control == "button3"

    def test_other_collection_is_ignored(self):
        call = Invocation(MemberAccess(ref("this.Items"), "Add"), (ref("this.button1"),))
        assert classify(ExpressionStatement(call)) is None

    def test_non_add_method_is_ignored(self):
        call = Invocation(MemberAccess(ref("this.Controls"), "Remove"), (ref("this.button1"),))
        assert classify(ExpressionStatement(call)) is None

    def test_add_range_is_ignored(self):
        call = Invocation(MemberAccess(ref("this.Controls"), "AddRange"), (Opaque("new Control[] { a }"),))
        assert classify(ExpressionStatement(call)) is None

    def test_missing_argument_is_ignored(self):
        call = Invocation(MemberAccess(ref("this.Controls"), "Add"), ())
        assert classify(ExpressionStatement(call)) is None

    def test_unrecognized_argument_is_ignored(self):
        call = Invocation(MemberAccess(ref("this.Controls"), "Add"), (Opaque("new Button()"),))
        assert classify(ExpressionStatement(call)) is None

    def test_plain_call_is_ignored(self):
        call = Invocation(MemberAccess(Name("this"), "SuspendLayout"))
        assert classify(ExpressionStatement(call)) is None

    def test_non_call_expression_is_ignored(self):
        assert classify(ExpressionStatement(ref("this.button1"))) is None


class TestOrderAssignmentClassification:

    def test_integer_literal(self):
        op = classify(order("this.button1", 3, line=12, column=37))
        assert op == OrderAssignOp("this.button1", 3, loc(12, 37))

    def test_local_variable_receiver(self):
        op = classify(order("button3", 0))
        assert isinstance(op, OrderAssignOp)
        assert op.control == "button3"

    def test_hex_literal(self):
        op = classify(order("this.button1", "0x2"))
        assert isinstance(op, OrderAssignOp)
        assert op.value == 2

    def test_variable_value_is_invalid(self):
        op = classify(order("this.button1", Name("someVariable", loc(5, 30)), line=5))
        assert op == InvalidOrderAssignOp("this.button1", "someVariable", loc(5, 30))

    def test_real_literal_is_invalid(self):
        op = classify(order("this.button1", "1.5"))
        assert isinstance(op, InvalidOrderAssignOp)
        assert op.value_text == "1.5"

    def test_negative_literal_is_invalid(self):
        value = Unary("-", Literal(LiteralKind.NUMERIC, "1"))
        op = classify(order("this.button1", value))
        assert isinstance(op, InvalidOrderAssignOp)
        assert op.value_text == "-1"

    def test_string_literal_is_invalid(self):
        op = classify(order("this.button1", Literal(LiteralKind.STRING, '"1"')))
        assert isinstance(op, InvalidOrderAssignOp)

    def test_opaque_value_is_invalid(self):
        op = classify(order("this.button1", Opaque("x  +  1")))
        assert isinstance(op, InvalidOrderAssignOp)
        assert op.value_text == "x + 1"

    def test_compound_assignment_is_ignored(self):
        stmt = AssignmentStatement(
            MemberAccess(ref("this.button1"), "TabIndex"), "+=",
            Literal(LiteralKind.NUMERIC, "1"),
        )
        assert classify(stmt) is None

    def test_other_property_is_ignored(self):
        stmt = AssignmentStatement(
            MemberAccess(ref("this.button1"), "Text"), "=",
            Literal(LiteralKind.STRING, '"OK"'),
        )
        assert classify(stmt) is None

    def test_bare_name_target_is_ignored(self):
        stmt = AssignmentStatement(Name("TabIndex"), "=", Literal(LiteralKind.NUMERIC, "0"))
        assert classify(stmt) is None

    def test_unusable_receiver_is_skipped_with_warning(self, caplog):
        target = MemberAccess(Invocation(Name("GetButton")), "TabIndex")
        stmt = AssignmentStatement(target, "=", Literal(LiteralKind.NUMERIC, "0"))
        with caplog.at_level(logging.WARNING, logger="designer_lint"):
            assert classify(stmt) is None
        assert "cannot identify the control" in caplog.text


class TestOtherStatements:

    def test_unparsed_statement_is_ignored(self):
        assert classify(UnparsedStatement("if (x) { y(); }")) is None

    def test_field_creation_is_ignored(self):
        stmt = AssignmentStatement(ref("this.button1"), "=", Opaque("new System.Windows.Forms.Button()"))
        assert classify(stmt) is None
