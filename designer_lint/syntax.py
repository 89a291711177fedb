"""
designer_lint/syntax.py
═══════════════════════

Typed syntax model for designer-generated initialization code.

The front-end (:mod:`designer_lint.parser`) produces these nodes; the
analysis core only ever looks at them through :mod:`designer_lint.identifiers`
and :mod:`designer_lint.classifier`.  Nodes are frozen, slotted dataclasses
carrying the :class:`SourceLocation` of their first character.

Every node renders back to canonical source text with ``render()``.  The
rendering drops whitespace and comments, so two spellings that differ only
in layout render identically::

    this . button1   ->  this.button1

Node overview
─────────────

  Expressions                      Statements
  ───────────                      ──────────
  Name            button1          ExpressionStatement   this.SuspendLayout();
  MemberAccess    this.button1     AssignmentStatement   x.TabIndex = 0;
  Invocation      a.Add(b)         UnparsedStatement     if (x) { ... }
  ElementAccess   items[0]
  Literal         0, "text", 'c', true
  Unary           -1, !flag
  Cast            (byte)(0)
  Parenthesized   (this.panel1)
  Opaque          new Point(3, 4), typeof(Form1), lambdas
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, List, Tuple, Union

import sexpdata
from sexpdata import Symbol


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """A specific point in source code (1-based line and column)."""

    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


#: Location for synthesised nodes.
NO_LOCATION = SourceLocation()


class LiteralKind(enum.Enum):
    NUMERIC = "numeric"
    STRING = "string"
    CHAR = "char"
    KEYWORD = "keyword"      # true / false / null


# ═══════════════════════════════════════════════════════════════════════
#  Expressions
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class Name:
    identifier: str
    loc: SourceLocation = NO_LOCATION

    def render(self) -> str:
        return self.identifier


@dataclass(frozen=True, slots=True)
class MemberAccess:
    """``receiver.name``"""

    receiver: "Expression"
    name: str
    loc: SourceLocation = NO_LOCATION

    def render(self) -> str:
        return f"{self.receiver.render()}.{self.name}"


@dataclass(frozen=True, slots=True)
class Invocation:
    callee: "Expression"
    arguments: Tuple["Expression", ...] = ()
    loc: SourceLocation = NO_LOCATION

    def render(self) -> str:
        args = ", ".join(a.render() for a in self.arguments)
        return f"{self.callee.render()}({args})"


@dataclass(frozen=True, slots=True)
class ElementAccess:
    target: "Expression"
    arguments: Tuple["Expression", ...] = ()
    loc: SourceLocation = NO_LOCATION

    def render(self) -> str:
        args = ", ".join(a.render() for a in self.arguments)
        return f"{self.target.render()}[{args}]"


@dataclass(frozen=True, slots=True)
class Literal:
    kind: LiteralKind
    text: str
    loc: SourceLocation = NO_LOCATION

    def render(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class Unary:
    operator: str
    operand: "Expression"
    loc: SourceLocation = NO_LOCATION

    def render(self) -> str:
        return f"{self.operator}{self.operand.render()}"


@dataclass(frozen=True, slots=True)
class Cast:
    type_name: str
    operand: "Expression"
    loc: SourceLocation = NO_LOCATION

    def render(self) -> str:
        return f"({self.type_name}){self.operand.render()}"


@dataclass(frozen=True, slots=True)
class Parenthesized:
    inner: "Expression"
    loc: SourceLocation = NO_LOCATION

    def render(self) -> str:
        return f"({self.inner.render()})"


@dataclass(frozen=True, slots=True)
class Opaque:
    """An expression the front-end keeps as text only."""

    text: str
    loc: SourceLocation = NO_LOCATION

    def render(self) -> str:
        return " ".join(self.text.split())


Expression = Union[
    Name, MemberAccess, Invocation, ElementAccess, Literal,
    Unary, Cast, Parenthesized, Opaque,
]


# ═══════════════════════════════════════════════════════════════════════
#  Statements
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class ExpressionStatement:
    expression: Expression
    loc: SourceLocation = NO_LOCATION

    def render(self) -> str:
        return f"{self.expression.render()};"


@dataclass(frozen=True, slots=True)
class AssignmentStatement:
    target: Expression
    operator: str
    value: Expression
    loc: SourceLocation = NO_LOCATION

    @property
    def is_simple(self) -> bool:
        return self.operator == "="

    def render(self) -> str:
        return f"{self.target.render()} {self.operator} {self.value.render()};"


@dataclass(frozen=True, slots=True)
class UnparsedStatement:
    """A statement the front-end could not (or chose not to) model."""

    text: str
    loc: SourceLocation = NO_LOCATION

    def render(self) -> str:
        return " ".join(self.text.split())


Statement = Union[ExpressionStatement, AssignmentStatement, UnparsedStatement]


@dataclass(slots=True)
class Scope:
    """One unit of analysis: the top-level statements of one routine."""

    name: str
    file: str = ""
    statements: List[Statement] = field(default_factory=list)
    loc: SourceLocation = NO_LOCATION

    def __len__(self) -> int:
        return len(self.statements)


# ═══════════════════════════════════════════════════════════════════════
#  S-expression dump
# ═══════════════════════════════════════════════════════════════════════

def to_sexp(node: Any) -> Any:
    """Convert a node (or scope) to nested ``sexpdata`` forms."""
    if isinstance(node, Scope):
        return [Symbol("scope"), node.name, node.file,
                *[to_sexp(s) for s in node.statements]]
    if isinstance(node, ExpressionStatement):
        return [Symbol("expr-stmt"), node.loc.line, to_sexp(node.expression)]
    if isinstance(node, AssignmentStatement):
        return [Symbol("assign"), node.loc.line, node.operator,
                to_sexp(node.target), to_sexp(node.value)]
    if isinstance(node, UnparsedStatement):
        return [Symbol("unparsed"), node.loc.line, node.render()]
    if isinstance(node, Name):
        return [Symbol("name"), Symbol(node.identifier)]
    if isinstance(node, MemberAccess):
        return [Symbol("member"), to_sexp(node.receiver), Symbol(node.name)]
    if isinstance(node, Invocation):
        return [Symbol("call"), to_sexp(node.callee),
                *[to_sexp(a) for a in node.arguments]]
    if isinstance(node, ElementAccess):
        return [Symbol("index"), to_sexp(node.target),
                *[to_sexp(a) for a in node.arguments]]
    if isinstance(node, Literal):
        return [Symbol(node.kind.value), node.text]
    if isinstance(node, Unary):
        return [Symbol("unary"), node.operator, to_sexp(node.operand)]
    if isinstance(node, Cast):
        return [Symbol("cast"), node.type_name, to_sexp(node.operand)]
    if isinstance(node, Parenthesized):
        return [Symbol("paren"), to_sexp(node.inner)]
    if isinstance(node, Opaque):
        return [Symbol("opaque"), node.render()]
    raise TypeError(f"Cannot convert {type(node).__name__} to an S-expression")


def dumps_sexp(node: Any) -> str:
    return sexpdata.dumps(to_sexp(node))


__all__ = [
    "SourceLocation", "NO_LOCATION", "LiteralKind",
    "Name", "MemberAccess", "Invocation", "ElementAccess", "Literal",
    "Unary", "Cast", "Parenthesized", "Opaque", "Expression",
    "ExpressionStatement", "AssignmentStatement", "UnparsedStatement",
    "Statement", "Scope", "to_sexp", "dumps_sexp",
]
