"""
designer_lint/parser.py
═══════════════════════

Best-effort front-end for C# Windows Forms designer files.

It does not parse C#.  It finds each ``InitializeComponent()`` method,
splits the method body into top-level statements, and parses every
statement with a small PEG grammar that covers what the Forms designer
generates::

    this.button1 = new System.Windows.Forms.Button();
    this.SuspendLayout();
    this.button1.Location = new System.Drawing.Point(12, 12);
    this.button1.TabIndex = 0;
    this.button1.Click += new System.EventHandler(this.button1_Click);
    this.Controls.Add(this.button1);

Pipeline
────────

  source text
      │  blank_comments()      comments / preprocessor lines -> spaces,
      │                        inline suppressions collected
      ▼
  method bodies                one per InitializeComponent()
      │  split_statements()    top-level ``;`` / block boundaries
      ▼
  statement text
      │  DESIGNER_GRAMMAR      parsimonious PEG
      │  StatementBuilder      parse tree -> designer_lint.syntax nodes
      ▼
  Scope(statements)

A statement the grammar rejects falls back to an assignment split (the
target is parsed, the value kept as :class:`~designer_lint.syntax.Opaque`)
and, failing that, to :class:`~designer_lint.syntax.UnparsedStatement`.
Nothing in statement content makes the parser raise.
"""

from __future__ import annotations

import bisect
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from parsimonious.exceptions import ParseError, VisitationError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from designer_lint.config import DEFAULT_METHOD_NAMES
from designer_lint.errors import SourceError
from designer_lint.syntax import (
    AssignmentStatement,
    Cast,
    ElementAccess,
    Expression,
    ExpressionStatement,
    Invocation,
    Literal,
    LiteralKind,
    MemberAccess,
    Name,
    Opaque,
    Parenthesized,
    Scope,
    SourceLocation,
    Statement,
    Unary,
    UnparsedStatement,
)

logger = logging.getLogger(__name__)

SUPPRESS_MARKER = "designer-lint-suppress"

_SUPPRESS_RE = re.compile(re.escape(SUPPRESS_MARKER) + r"\s+([\w*][\w*,\s]*)")


# ═══════════════════════════════════════════════════════════════════
#  PART 1 — STATEMENT GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

DESIGNER_GRAMMAR = Grammar(r'''
    statement           = _ statement_body _ semicolon? _
    statement_body      = assignment / expression
    semicolon           = ";"

    assignment          = expression _ assign_op _ expression
    assign_op           = "??=" / "<<=" / ">>=" / "+=" / "-=" / "*=" / "/=" / "%="
                        / "|=" / "&=" / "^=" / "="

    expression          = unary / postfix
    unary               = unary_op _ expression
    unary_op            = ~r"[-+!~]"

    postfix             = primary suffix*
    suffix              = member_suffix / call_suffix / index_suffix
    member_suffix       = _ "." _ identifier
    call_suffix         = _ "(" _ arguments? _ ")"
    index_suffix        = _ "[" _ arguments? _ "]"
    arguments           = expression (_ "," _ expression)*

    primary             = number / string / char / keyword_literal / creation
                        / typeof / cast / paren / name

    number              = ~r"0[xX][0-9A-Fa-f_]+(?:[uU][lL]?|[lL][uU]?)?|0[bB][01_]+(?:[uU][lL]?|[lL][uU]?)?|[0-9][0-9_]*(?:\.[0-9][0-9_]*)?(?:[eE][+-]?[0-9]+)?(?:[uU][lL]?|[lL][uU]?|[fFdDmM])?"
    string              = ~r'[$]?@[$]?"(?:[^"]|"")*"' / ~r'[$]?"(?:[^"\\\n]|\\.)*"'
    char                = ~r"'(?:[^'\\\n]|\\.)+'"
    keyword_literal     = ~r"(?:true|false|null)(?![A-Za-z0-9_])"

    creation            = new_keyword _ type_name? rank* call_suffix? initializer?
    new_keyword         = ~r"new(?![A-Za-z0-9_])"
    rank                = _ "[" _ arguments? _ "]"
    initializer         = _ "{" _ initializer_items? _ "}"
    initializer_items   = initializer_item (_ "," _ initializer_item)* (_ ",")?
    initializer_item    = initializer / assignment / expression

    typeof              = typeof_keyword _ "(" _ type_name _ ")"
    typeof_keyword      = ~r"typeof(?![A-Za-z0-9_])"
    cast                = "(" _ type_name _ ")" _ expression
    paren               = "(" _ expression _ ")"

    type_name           = global_prefix? identifier (_ "." _ identifier)* type_args?
    global_prefix       = "global" _ "::" _
    type_args           = _ "<" _ type_name (_ "," _ type_name)* _ ">"

    name                = ~r"@?[A-Za-z_][A-Za-z0-9_]*"
    identifier          = ~r"@?[A-Za-z_][A-Za-z0-9_]*"
    _                   = ~r"\s*"
''')


# ═══════════════════════════════════════════════════════════════════
#  PART 2 — SOURCE TEXT AND LEXICAL HELPERS
# ═══════════════════════════════════════════════════════════════════

class SourceText:
    """Offset -> (line, column) mapping for one file."""

    def __init__(self, text: str, file: str = "<string>") -> None:
        self.text = text
        self.file = file
        self._line_starts = [0]
        self._line_starts.extend(m.end() for m in re.finditer(r"\n", text))

    def location(self, offset: int) -> SourceLocation:
        index = bisect.bisect_right(self._line_starts, offset) - 1
        return SourceLocation(
            file=self.file,
            line=index + 1,
            column=offset - self._line_starts[index] + 1,
        )


def literal_end(text: str, i: int) -> Optional[int]:
    """End offset of the string or char literal starting at *i*, if any.

    Handles regular, verbatim (``@"..."``) and interpolated (``$"..."``)
    strings and char literals.  Unterminated literals run to the end of
    the line (regular) or text (verbatim).
    """
    n = len(text)
    j = i
    verbatim = False
    while j < n and text[j] in "$@":
        verbatim = verbatim or text[j] == "@"
        j += 1
    if j >= n or text[j] not in "\"'":
        return None
    if j > i and text[j] == "'":
        return None
    quote = text[j]
    j += 1
    if quote == '"' and verbatim:
        while j < n:
            if text[j] == '"':
                if j + 1 < n and text[j + 1] == '"':
                    j += 2
                    continue
                return j + 1
            j += 1
        return n
    while j < n:
        c = text[j]
        if c == "\\":
            j += 2
            continue
        if c == quote:
            return j + 1
        if c == "\n":
            return j
        j += 1
    return n


def blank_comments(text: str) -> Tuple[str, List[Tuple[int, str]]]:
    """Replace comments and preprocessor lines with spaces.

    Offsets and newlines are preserved.  Returns the blanked text and the
    ``(line, rule)`` pairs of ``designer-lint-suppress`` comments.
    """
    out = list(text)
    suppressions: List[Tuple[int, str]] = []
    n = len(text)
    i = 0
    line = 1
    line_start = True

    def blank(start: int, end: int) -> None:
        for k in range(start, end):
            if out[k] != "\n":
                out[k] = " "

    def collect(comment: str, at_line: int) -> None:
        match = _SUPPRESS_RE.search(comment)
        if match:
            for rule in re.split(r"[\s,]+", match.group(1).strip()):
                if rule:
                    suppressions.append((at_line, rule))

    while i < n:
        c = text[i]
        if c == "\n":
            line += 1
            line_start = True
            i += 1
            continue
        if c.isspace():
            i += 1
            continue
        if line_start and c == "#":
            end = text.find("\n", i)
            end = n if end == -1 else end
            blank(i, end)
            i = end
            continue
        line_start = False

        end = literal_end(text, i)
        if end is not None:
            line += text.count("\n", i, end)
            i = end
            continue
        if text.startswith("//", i):
            end = text.find("\n", i)
            end = n if end == -1 else end
            collect(text[i + 2:end], line)
            blank(i, end)
            i = end
            continue
        if text.startswith("/*", i):
            close = text.find("*/", i + 2)
            end = n if close == -1 else close + 2
            collect(text[i + 2:n if close == -1 else close], line)
            blank(i, end)
            line += text.count("\n", i, end)
            i = end
            continue
        i += 1
    return "".join(out), suppressions


def matching_brace(text: str, open_index: int) -> int:
    """Index of the ``}`` closing the ``{`` at *open_index* (-1 if none)."""
    depth = 0
    i = open_index
    n = len(text)
    while i < n:
        end = literal_end(text, i)
        if end is not None:
            i = end
            continue
        c = text[i]
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def split_statements(text: str, start: int, end: int) -> List[Tuple[int, int]]:
    """Spans of the top-level statements in ``text[start:end]``.

    A statement ends at a ``;`` outside brackets (the ``;`` is excluded),
    or at a closing ``}`` that returns to top level and is not followed by
    ``;``, ``,`` or ``)`` (a block statement such as ``if (...) { ... }``).
    """
    spans: List[Tuple[int, int]] = []
    depth = 0
    stmt_start: Optional[int] = None
    i = start
    while i < end:
        c = text[i]
        if stmt_start is None:
            if c.isspace():
                i += 1
                continue
            stmt_start = i
        lit = literal_end(text, i)
        if lit is not None:
            i = min(lit, end)
            continue
        if c in "([{":
            depth += 1
        elif c in ")]}":
            depth = max(depth - 1, 0)
            if c == "}" and depth == 0:
                following = text[i + 1:end].lstrip()
                if not following or following[0] not in ";,)":
                    spans.append((stmt_start, i + 1))
                    stmt_start = None
        elif c == ";" and depth == 0:
            if text[stmt_start:i].strip():
                spans.append((stmt_start, i))
            stmt_start = None
        i += 1
    if stmt_start is not None and text[stmt_start:end].strip():
        spans.append((stmt_start, end))
    return spans


def split_assignment(text: str) -> Optional[Tuple[int, str, int]]:
    """Locate the first top-level assignment operator in *text*.

    Returns ``(target_end, operator, value_start)`` or ``None``.
    """
    depth = 0
    i = 0
    n = len(text)
    while i < n:
        lit = literal_end(text, i)
        if lit is not None:
            i = lit
            continue
        c = text[i]
        if c in "([{":
            depth += 1
        elif c in ")]}":
            depth = max(depth - 1, 0)
        elif c == "=" and depth == 0:
            prev = text[i - 1] if i > 0 else ""
            nxt = text[i + 1] if i + 1 < n else ""
            shift = prev in ("<", ">") and i > 1 and text[i - 2] == prev
            if nxt in ("=", ">") or prev in ("=", "!") or (prev in ("<", ">") and not shift):
                i += 1
                continue
            op_start = i
            if shift:
                op_start = i - 2
            elif prev and prev in "+-*/%&|^":
                op_start = i - 1
            elif prev == "?" and i > 1 and text[i - 2] == "?":
                op_start = i - 2
            return op_start, text[op_start:i + 1], i + 1
        i += 1
    return None


# ═══════════════════════════════════════════════════════════════════
#  PART 3 — PARSE TREE -> SYNTAX NODES
# ═══════════════════════════════════════════════════════════════════

def _optional(visited) -> Optional[object]:
    """Result of an optional sub-expression, or ``None`` when absent."""
    if isinstance(visited, list) and visited:
        return visited[0]
    return None


def _repeated(visited) -> list:
    return visited if isinstance(visited, list) else []


class StatementBuilder(NodeVisitor):
    """Transforms a parsimonious parse tree into :mod:`designer_lint.syntax` nodes.

    ``base`` is the offset of the parsed text inside ``source``.
    """

    def __init__(self, source: SourceText, base: int = 0) -> None:
        self.source = source
        self.base = base

    def _loc(self, node: Node) -> SourceLocation:
        return self.source.location(self.base + node.start)

    def generic_visit(self, node, visited_children):
        return visited_children or node

    # ── statements ──────────────────────────────────────────────────

    def visit_statement(self, node, visited_children):
        _, body, _, _, _ = visited_children
        if isinstance(body, AssignmentStatement):
            return body
        return ExpressionStatement(expression=body, loc=body.loc)

    def visit_statement_body(self, node, visited_children):
        return visited_children[0]

    def visit_assignment(self, node, visited_children):
        target, _, operator, _, value = visited_children
        return AssignmentStatement(
            target=target, operator=operator, value=value, loc=target.loc,
        )

    def visit_assign_op(self, node, visited_children):
        return node.text

    # ── expressions ─────────────────────────────────────────────────

    def visit_expression(self, node, visited_children):
        return visited_children[0]

    def visit_unary(self, node, visited_children):
        operator, _, operand = visited_children
        return Unary(operator=operator, operand=operand, loc=self._loc(node))

    def visit_unary_op(self, node, visited_children):
        return node.text

    def visit_postfix(self, node, visited_children):
        expr, suffixes = visited_children
        loc = self._loc(node)
        for kind, payload in _repeated(suffixes):
            if kind == "member":
                expr = MemberAccess(receiver=expr, name=payload, loc=loc)
            elif kind == "call":
                expr = Invocation(callee=expr, arguments=tuple(payload), loc=loc)
            else:
                expr = ElementAccess(target=expr, arguments=tuple(payload), loc=loc)
        return expr

    def visit_suffix(self, node, visited_children):
        return visited_children[0]

    def visit_member_suffix(self, node, visited_children):
        return ("member", visited_children[3])

    def visit_call_suffix(self, node, visited_children):
        return ("call", _optional(visited_children[3]) or [])

    def visit_index_suffix(self, node, visited_children):
        return ("index", _optional(visited_children[3]) or [])

    def visit_arguments(self, node, visited_children):
        first, rest = visited_children
        return [first] + [item[3] for item in _repeated(rest)]

    def visit_primary(self, node, visited_children):
        return visited_children[0]

    def visit_number(self, node, visited_children):
        return Literal(LiteralKind.NUMERIC, node.text, self._loc(node))

    def visit_string(self, node, visited_children):
        return Literal(LiteralKind.STRING, node.text, self._loc(node))

    def visit_char(self, node, visited_children):
        return Literal(LiteralKind.CHAR, node.text, self._loc(node))

    def visit_keyword_literal(self, node, visited_children):
        return Literal(LiteralKind.KEYWORD, node.text, self._loc(node))

    def visit_creation(self, node, visited_children):
        return Opaque(node.text, self._loc(node))

    def visit_typeof(self, node, visited_children):
        return Opaque(node.text, self._loc(node))

    def visit_cast(self, node, visited_children):
        type_name = visited_children[2]
        operand = visited_children[6]
        return Cast(type_name=type_name, operand=operand, loc=self._loc(node))

    def visit_paren(self, node, visited_children):
        return Parenthesized(inner=visited_children[2], loc=self._loc(node))

    def visit_type_name(self, node, visited_children):
        return "".join(node.text.split())

    def visit_name(self, node, visited_children):
        return Name(node.text, self._loc(node))

    def visit_identifier(self, node, visited_children):
        return node.text


# ═══════════════════════════════════════════════════════════════════
#  PART 4 — FILE FRONT-END
# ═══════════════════════════════════════════════════════════════════

@dataclass
class ParsedSource:
    """Scopes and inline suppressions found in one source file."""
    file: str
    scopes: List[Scope] = field(default_factory=list)
    suppressions: List[Tuple[int, str]] = field(default_factory=list)

    @property
    def statement_count(self) -> int:
        return sum(len(scope) for scope in self.scopes)


def _method_pattern(method_names: Sequence[str]) -> "re.Pattern[str]":
    names = "|".join(re.escape(name) for name in method_names)
    return re.compile(
        r"\bvoid\s+(?P<name>" + names + r")\s*\(\s*\)\s*(?P<open>\{)"
    )


_CLASS_RE = re.compile(r"\b(?:class|struct)\s+(?P<name>@?[A-Za-z_][A-Za-z0-9_]*)")


class DesignerParser:
    """Extract analysis scopes from designer source text."""

    def __init__(self, method_names: Sequence[str] = DEFAULT_METHOD_NAMES) -> None:
        self.method_names = tuple(method_names)
        self._method_re = _method_pattern(self.method_names)

    def parse(self, text: str, file: str = "<string>") -> ParsedSource:
        source = SourceText(text, file)
        code, suppressions = blank_comments(text)
        parsed = ParsedSource(file=file, suppressions=suppressions)

        for match in self._method_re.finditer(code):
            open_index = match.start("open")
            close_index = matching_brace(code, open_index)
            if close_index == -1:
                logger.warning("%s: unterminated body of %s()",
                               source.location(open_index), match.group("name"))
                close_index = len(code)

            scope = Scope(
                name=self._scope_name(code, match),
                file=file,
                loc=source.location(match.start("name")),
            )
            for start, end in split_statements(code, open_index + 1, close_index):
                scope.statements.append(self.parse_statement(source, code, start, end))
            logger.debug("%s: %s has %d statement(s)", file, scope.name, len(scope))
            parsed.scopes.append(scope)

        if not parsed.scopes:
            logger.info("%s: no %s() method found", file, "/".join(self.method_names))
        return parsed

    def _scope_name(self, code: str, match: "re.Match[str]") -> str:
        owner = None
        for cls in _CLASS_RE.finditer(code, 0, match.start()):
            owner = cls.group("name")
        method = match.group("name")
        return f"{owner}.{method}" if owner else method

    def parse_statement(self, source: SourceText, code: str,
                        start: int, end: int) -> Statement:
        """Parse ``code[start:end]`` (one statement, ``;`` excluded)."""
        text = code[start:end]
        loc = source.location(start)
        try:
            return StatementBuilder(source, start).visit(DESIGNER_GRAMMAR.parse(text))
        except (ParseError, VisitationError):
            pass

        split = split_assignment(text)
        if split is not None:
            target_end, operator, value_start = split
            target = self.parse_expression(source, code, start, start + target_end)
            if target is not None:
                value_text = text[value_start:]
                stripped = value_text.lstrip()
                value_loc = source.location(
                    start + value_start + len(value_text) - len(stripped)
                )
                logger.debug("%s: value kept as opaque text", value_loc)
                return AssignmentStatement(
                    target=target,
                    operator=operator,
                    value=Opaque(stripped.rstrip(), value_loc),
                    loc=loc,
                )

        logger.debug("%s: statement not modelled: %s", loc, " ".join(text.split())[:60])
        return UnparsedStatement(text.strip(), loc)

    def parse_expression(self, source: SourceText, code: str,
                         start: int, end: int) -> Optional[Expression]:
        text = code[start:end]
        stripped = text.lstrip()
        offset = start + len(text) - len(stripped)
        stripped = stripped.rstrip()
        if not stripped:
            return None
        try:
            tree = DESIGNER_GRAMMAR["expression"].parse(stripped)
            return StatementBuilder(source, offset).visit(tree)
        except (ParseError, VisitationError):
            return None


def parse_source(text: str, file: str = "<string>",
                 method_names: Sequence[str] = DEFAULT_METHOD_NAMES) -> ParsedSource:
    return DesignerParser(method_names).parse(text, file)


def parse_file(path: Union[str, Path],
               method_names: Sequence[str] = DEFAULT_METHOD_NAMES) -> ParsedSource:
    """Read and parse one designer file (UTF-8, BOM tolerated)."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as exc:
        raise SourceError(p, f"not valid UTF-8 ({exc.reason})") from exc
    except OSError as exc:
        raise SourceError(p, exc.strerror or str(exc)) from exc
    return parse_source(text, str(path), method_names)


def iter_source_files(paths: Iterable[Union[str, Path]],
                      patterns: Sequence[str] = ("*.Designer.cs", "*.designer.cs")) -> List[Path]:
    """Expand directories into matching files; files are kept as given."""
    found: List[Path] = []
    seen = set()
    for raw in paths:
        p = Path(raw)
        candidates = [p]
        if p.is_dir():
            candidates = sorted({f for pattern in patterns for f in p.rglob(pattern)})
        for candidate in candidates:
            key = candidate.resolve()
            if key not in seen:
                seen.add(key)
                found.append(candidate)
    return found


__all__ = [
    "DESIGNER_GRAMMAR", "SUPPRESS_MARKER",
    "SourceText", "StatementBuilder", "DesignerParser", "ParsedSource",
    "literal_end", "blank_comments", "matching_brace",
    "split_statements", "split_assignment",
    "parse_source", "parse_file", "iter_source_files",
]
