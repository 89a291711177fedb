"""
designer_lint/diagnostics.py
════════════════════════════

Diagnostic model, rule catalogue, suppressions, and sinks.

  Finding ──► DiagnosticEmitter ──► Diagnostic ──► SuppressionManager ──► sink
                 (RuleDescriptor,                     (inline, file,
                  severity config)                     global)

The emitter is pure formatting: it maps a :class:`~designer_lint.findings.Finding`
to a stable rule identifier, a severity, and a message populated with the
control's key.  Sinks must accept diagnostics from several threads at once.
"""

from __future__ import annotations

import json
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatch
from typing import (
    Any,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Set,
    Tuple,
)

from designer_lint.findings import Finding, FindingKind
from designer_lint.syntax import SourceLocation


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — DIAGNOSTIC MODEL
# ═════════════════════════════════════════════════════════════════════════

class DiagnosticSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"
    STYLE = "style"
    INFORMATION = "information"

    @classmethod
    def parse(cls, text: str) -> "DiagnosticSeverity":
        try:
            return cls(text.strip().lower())
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ValueError(f"unknown severity {text!r} (expected one of: {choices})") from None


@dataclass(frozen=True)
class Diagnostic:
    """
    A single reportable diagnostic.

    Attributes
    ----------
    error_id     : Stable rule identifier (e.g. "InconsistentOrder")
    code         : Short rule code (e.g. "SWFA0010")
    message      : Rendered human-readable message
    severity     : DiagnosticSeverity
    location     : Primary source location
    arguments    : Message arguments (the offending control's key)
    checker_name : Name of the checker that produced this
    scope        : Name of the analysed scope
    evidence     : Machine-readable details for downstream tooling
    """
    error_id: str
    message: str
    severity: DiagnosticSeverity
    location: SourceLocation
    code: str = ""
    arguments: Tuple[str, ...] = ()
    checker_name: str = ""
    scope: str = ""
    evidence: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "file": self.location.file,
            "line": self.location.line,
            "column": self.location.column,
            "severity": self.severity.value,
            "message": self.message,
            "errorId": self.error_id,
            "code": self.code,
            "arguments": list(self.arguments),
        }
        if self.scope:
            result["scope"] = self.scope
        if self.evidence:
            result["evidence"] = self.evidence
        return result

    def to_json_str(self) -> str:
        return json.dumps(self.to_dict())

    def to_gcc_format(self) -> str:
        """GCC-style diagnostic string: file:line:col: severity: message [id]."""
        rule = f"{self.code}:{self.error_id}" if self.code else self.error_id
        return f"{self.location}: {self.severity.value}: {self.message} [{rule}]"

    def __str__(self) -> str:
        return self.to_gcc_format()


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — RULE CATALOGUE AND EMITTER
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RuleDescriptor:
    rule_id: str
    code: str
    title: str
    message_format: str
    category: str
    default_severity: DiagnosticSeverity
    help_text: str = ""

    def format_message(self, control: str) -> str:
        return self.message_format.format(control=control)


CATEGORY = "Accessibility"

NON_NUMERIC_ORDER_VALUE = RuleDescriptor(
    rule_id=FindingKind.NON_NUMERIC_ORDER_VALUE.value,
    code="SWFA0001",
    title="Ensure numeric controls tab order value",
    message_format="Control '{control}' has unexpected TabIndex value.",
    category=CATEGORY,
    default_severity=DiagnosticSeverity.WARNING,
    help_text='Avoid manually editing "InitializeComponent()" method.',
)

INCONSISTENT_ORDER = RuleDescriptor(
    rule_id=FindingKind.INCONSISTENT_ORDER.value,
    code="SWFA0010",
    title="Verify correct controls tab order",
    message_format=(
        "Control '{control}' has a different TabIndex value to its order "
        "in the parent's control collection."
    ),
    category=CATEGORY,
    default_severity=DiagnosticSeverity.WARNING,
    help_text=(
        "Remove TabIndex assignments and re-order controls in the parent's "
        "control collection."
    ),
)

RULES: Dict[FindingKind, RuleDescriptor] = {
    FindingKind.NON_NUMERIC_ORDER_VALUE: NON_NUMERIC_ORDER_VALUE,
    FindingKind.INCONSISTENT_ORDER: INCONSISTENT_ORDER,
}


def resolve_rule(name: str) -> Optional[RuleDescriptor]:
    """Look a rule up by identifier or code, case-insensitively."""
    wanted = name.strip().lower()
    for rule in RULES.values():
        if wanted in (rule.rule_id.lower(), rule.code.lower()):
            return rule
    return None


class DiagnosticEmitter:
    """Render findings as diagnostics.

    ``severities`` maps a rule identifier to an override; a value of
    ``None`` disables the rule and :meth:`emit` returns ``None`` for it.
    """

    def __init__(
        self,
        severities: Optional[Mapping[str, Optional[DiagnosticSeverity]]] = None,
        checker_name: str = "",
        scope: str = "",
    ) -> None:
        self.severities = dict(severities or {})
        self.checker_name = checker_name
        self.scope = scope

    def severity_for(self, rule: RuleDescriptor) -> Optional[DiagnosticSeverity]:
        return self.severities.get(rule.rule_id, rule.default_severity)

    def emit(self, finding: Finding) -> Optional[Diagnostic]:
        rule = RULES[finding.kind]
        severity = self.severity_for(rule)
        if severity is None:
            return None
        evidence: Dict[str, Any] = {}
        if finding.kind is FindingKind.INCONSISTENT_ORDER:
            evidence = {
                "container": finding.container,
                "position": finding.position,
                "declared": finding.declared,
            }
        elif finding.value_text:
            evidence = {"value": finding.value_text}
        return Diagnostic(
            error_id=rule.rule_id,
            code=rule.code,
            message=rule.format_message(finding.control),
            severity=severity,
            location=finding.location,
            arguments=(finding.control,),
            checker_name=self.checker_name,
            scope=self.scope,
            evidence=evidence,
        )


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — SUPPRESSION MANAGER
# ═════════════════════════════════════════════════════════════════════════

def _rule_names(diag: Diagnostic) -> Set[str]:
    return {diag.error_id.lower(), diag.code.lower()} - {""}


class SuppressionManager:
    """
    Manages diagnostic suppressions from multiple sources.

    Sources:
      1. Inline comments:  ``// designer-lint-suppress InconsistentOrder``
      2. File-level suppressions (fnmatch patterns)
      3. Global suppressions (command-line or config)

    Rules may be named by identifier or code; ``*`` matches any rule.

    Usage
    -----
    >>> sm = SuppressionManager()
    >>> sm.add_inline_suppression("Form1.Designer.cs", 12, "SWFA0010")
    >>> sm.add_file_suppression("NonNumericOrderValue", "legacy/*")
    >>> sm.add_global_suppression("InconsistentOrder")
    >>> if not sm.is_suppressed(diagnostic):
    ...     emit(diagnostic)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # {(file, line)} -> rules suppressed at that location
        self._inline: Dict[Tuple[str, int], Set[str]] = defaultdict(set)
        # file pattern -> rules
        self._file_level: Dict[str, Set[str]] = defaultdict(set)
        self._global: Set[str] = set()

    def add_inline_suppression(self, file: str, line: int, rule: str) -> None:
        with self._lock:
            self._inline[(file, line)].add(rule.lower())

    def load_inline_suppressions(self, file: str, entries: Iterable[Tuple[int, str]]) -> None:
        """Register ``(line, rule)`` pairs collected from a source file."""
        for line, rule in entries:
            self.add_inline_suppression(file, line, rule)

    def add_file_suppression(self, rule: str, file_pattern: str) -> None:
        with self._lock:
            self._file_level[file_pattern].add(rule.lower())

    def add_global_suppression(self, rule: str) -> None:
        with self._lock:
            self._global.add(rule.lower())

    def is_rule_suppressed(self, *names: str) -> bool:
        """True when a global suppression covers any of *names* everywhere."""
        wanted = {n.lower() for n in names}
        with self._lock:
            return "*" in self._global or bool(wanted & self._global)

    def is_suppressed(self, diag: Diagnostic) -> bool:
        names = _rule_names(diag)
        with self._lock:
            if "*" in self._global or names & self._global:
                return True

            loc = diag.location
            # same line, or a suppression comment on the preceding line
            for line_offset in (0, 1):
                ids = self._inline.get((loc.file, loc.line - line_offset), set())
                if "*" in ids or names & ids:
                    return True

            for pattern, ids in self._file_level.items():
                if "*" not in ids and not names & ids:
                    continue
                if pattern == loc.file or loc.file.endswith(pattern) or fnmatch(loc.file, pattern):
                    return True
        return False

    def filter_diagnostics(self, diagnostics: Iterable[Diagnostic]) -> List[Diagnostic]:
        return [d for d in diagnostics if not self.is_suppressed(d)]


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — SINKS
# ═════════════════════════════════════════════════════════════════════════

class DiagnosticSink(Protocol):
    def submit(self, diagnostic: Diagnostic) -> None: ...


class DiagnosticCollector:
    """Thread-safe sink that keeps every submitted diagnostic."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: List[Diagnostic] = []

    def submit(self, diagnostic: Diagnostic) -> None:
        with self._lock:
            self._items.append(diagnostic)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


__all__ = [
    "DiagnosticSeverity", "Diagnostic",
    "RuleDescriptor", "RULES", "NON_NUMERIC_ORDER_VALUE", "INCONSISTENT_ORDER",
    "resolve_rule", "DiagnosticEmitter",
    "SuppressionManager",
    "DiagnosticSink", "DiagnosticCollector",
]
