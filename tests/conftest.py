# tests/conftest.py
"""
Shared fixtures and builders for designer-lint tests.

Statement builders construct syntax nodes directly so the analysis core
can be tested without going through the parser.
"""

import os
import sys
import textwrap
from typing import Union

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from designer_lint.syntax import (
    AssignmentStatement,
    Expression,
    ExpressionStatement,
    Invocation,
    Literal,
    LiteralKind,
    MemberAccess,
    Name,
    SourceLocation,
)

DESIGNER_FILE = "Form1.Designer.cs"


def loc(line: int, column: int = 1, file: str = DESIGNER_FILE) -> SourceLocation:
    return SourceLocation(file=file, line=line, column=column)


def ref(text: str, line: int = 1) -> Expression:
    """``"this.panel1.Controls"`` -> nested MemberAccess over a Name."""
    head, *rest = text.split(".")
    expr: Expression = Name(head, loc(line))
    for part in rest:
        expr = MemberAccess(expr, part, loc(line))
    return expr


def attach(container: str, control: str, line: int = 1) -> ExpressionStatement:
    """``<container>.Add(<control>);`` where *container* ends in ``Controls``."""
    call = Invocation(
        callee=MemberAccess(ref(container, line), "Add", loc(line)),
        arguments=(ref(control, line),),
        loc=loc(line),
    )
    return ExpressionStatement(call, loc(line))


def order(control: str, value: Union[int, str, Expression], line: int = 1,
          column: int = 20) -> AssignmentStatement:
    """``<control>.TabIndex = <value>;``

    An ``int`` or numeric string becomes a numeric literal; anything else
    must already be an expression.
    """
    if isinstance(value, int):
        value = str(value)
    if isinstance(value, str):
        value = Literal(LiteralKind.NUMERIC, value, loc(line, column))
    return AssignmentStatement(
        target=MemberAccess(ref(control, line), "TabIndex", loc(line)),
        operator="=",
        value=value,
        loc=loc(line),
    )


def designer_source(body: str, class_name: str = "Form1") -> str:
    """Wrap *body* in a typical designer partial class."""
    body = textwrap.indent(textwrap.dedent(body).strip("\n"), " " * 12)
    return (
        "namespace WindowsFormsApp1\n"
        "{\n"
        f"    partial class {class_name}\n"
        "    {\n"
        "        private System.ComponentModel.IContainer components = null;\n"
        "\n"
        "        private void InitializeComponent()\n"
        "        {\n"
        f"{body}\n"
        "        }\n"
        "\n"
        "        private System.Windows.Forms.Button button1;\n"
        "    }\n"
        "}\n"
    )


# Line 9 of designer_source() output holds the first body line.
FIRST_BODY_LINE = 9


CONSISTENT_FORM = designer_source('''
    this.button1 = new System.Windows.Forms.Button();
    this.button2 = new System.Windows.Forms.Button();
    this.SuspendLayout();
    //
    // button1
    //
    this.button1.Location = new System.Drawing.Point(12, 12);
    this.button1.Name = "button1";
    this.button1.Size = new System.Drawing.Size(75, 23);
    this.button1.TabIndex = 0;
    this.button1.Text = "OK";
    this.button1.UseVisualStyleBackColor = true;
    //
    // button2
    //
    this.button2.Location = new System.Drawing.Point(93, 12);
    this.button2.TabIndex = 1;
    this.button2.Click += new System.EventHandler(this.button2_Click);
    //
    // Form1
    //
    this.AutoScaleDimensions = new System.Drawing.SizeF(6F, 13F);
    this.ClientSize = new System.Drawing.Size(284, 261);
    this.Controls.Add(this.button1);
    this.Controls.Add(this.button2);
    this.Name = "Form1";
    this.ResumeLayout(false);
''')


SWAPPED_FORM = designer_source('''
    this.button1.TabIndex = 1;
    this.button2.TabIndex = 0;
    this.Controls.Add(this.button1);
    this.Controls.Add(this.button2);
''')


NON_NUMERIC_FORM = designer_source('''
    this.button1.TabIndex = someVariable;
    this.button1.TabIndex = 0;
    this.Controls.Add(this.button1);
''')


@pytest.fixture
def designer_file(tmp_path):
    """Factory writing designer source into ``tmp_path``."""
    def _write(text: str, name: str = DESIGNER_FILE):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path
    return _write
