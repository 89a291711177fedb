"""
designer_lint/checkers.py
═════════════════════════

Checker framework and the tab-order checker.

Architecture
────────────

  ┌──────────────────────────────────────────────────────────┐
  │                     CheckerRunner                        │
  │   files ──► DesignerParser ──► Scope (one per routine)   │
  │                                   │                      │
  │            fresh CheckerContext + fresh checker          │
  │                                   │                      │
  │  ┌────────────────────────────────▼───────────────────┐  │
  │  │ TabOrderChecker                                    │  │
  │  │   classify ─► OrderingTracker ─► check_consistency │  │
  │  └────────────────────────────────┬───────────────────┘  │
  │                                   │ findings             │
  │  ┌────────────────────────────────▼───────────────────┐  │
  │  │ DiagnosticEmitter ─► SuppressionManager ─► sink    │  │
  │  └────────────────────────────────────────────────────┘  │
  └──────────────────────────────────────────────────────────┘

Each Checker follows a four-phase lifecycle:

  1. **configure()**        — receive the per-scope context
  2. **collect_evidence()** — walk the scope's statements
  3. **diagnose()**         — correlate evidence into findings
  4. **report()**           — return diagnostics (filtered by suppressions)

Scopes are independent: every scope gets its own context and its own
checker instance, so scopes can be analysed from several threads at once.
Only the sink and the suppression manager are shared, and both lock.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Sequence,
    Tuple,
    Type,
    Union,
)

from designer_lint.classifier import InvalidOrderAssignOp, classify
from designer_lint.config import LintConfig
from designer_lint.consistency import check_consistency
from designer_lint.diagnostics import (
    RULES,
    Diagnostic,
    DiagnosticEmitter,
    DiagnosticSeverity,
    DiagnosticSink,
    SuppressionManager,
)
from designer_lint.errors import SourceError
from designer_lint.findings import Finding
from designer_lint.parser import DesignerParser, ParsedSource, parse_file
from designer_lint.syntax import NO_LOCATION, Scope, SourceLocation, Statement
from designer_lint.tracker import OrderingTracker

logger = logging.getLogger(__name__)

#: Identity of an analysed scope: (file, scope name)
ScopeKey = Tuple[str, str]


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — CHECKER BASE CLASS
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerContext:
    """
    Per-scope context passed to a checker.

    Attributes
    ----------
    scope        : the routine being analysed
    config       : LintConfig
    suppressions : SuppressionManager (shared, thread-safe)
    sink         : receives every unsuppressed diagnostic as it is emitted
    stats        : mutable dict for timing / counting statistics
    """
    scope: Scope
    config: LintConfig = field(default_factory=LintConfig)
    suppressions: SuppressionManager = field(default_factory=SuppressionManager)
    sink: Optional[DiagnosticSink] = None
    stats: Dict[str, Any] = field(default_factory=dict)

    @property
    def statements(self) -> List[Statement]:
        return self.scope.statements


class Checker(ABC):
    """
    Abstract base class for checkers.

    Subclass Contract
    ─────────────────
      - Override ``name``, ``description``, ``error_ids``
      - Implement ``collect_evidence()`` and ``diagnose()``
      - Emit through ``_emit_finding()`` so severities, suppressions and
        the sink are honoured
    """

    name: ClassVar[str] = "base-checker"
    description: ClassVar[str] = ""
    error_ids: ClassVar[FrozenSet[str]] = frozenset()

    def __init__(self) -> None:
        self._diagnostics: List[Diagnostic] = []
        self._ctx: Optional[CheckerContext] = None
        self._emitter = DiagnosticEmitter(checker_name=self.name)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    def configure(self, ctx: CheckerContext) -> None:
        self._ctx = ctx
        self._emitter = DiagnosticEmitter(
            severities=ctx.config.severities,
            checker_name=self.name,
            scope=ctx.scope.name,
        )

    @abstractmethod
    def collect_evidence(self, ctx: CheckerContext) -> None:
        ...

    @abstractmethod
    def diagnose(self, ctx: CheckerContext) -> None:
        ...

    def report(self, ctx: CheckerContext) -> List[Diagnostic]:
        return list(self._diagnostics)

    def run(self, ctx: CheckerContext) -> List[Diagnostic]:
        """Drive the full lifecycle on one scope."""
        self.configure(ctx)
        self.collect_evidence(ctx)
        self.diagnose(ctx)
        return self.report(ctx)

    def _emit_finding(self, finding: Finding) -> Optional[Diagnostic]:
        """Render *finding* and hand it to the sink unless suppressed."""
        diag = self._emitter.emit(finding)
        if diag is None:
            return None
        ctx = self._ctx
        if ctx is not None and ctx.suppressions.is_suppressed(diag):
            logger.debug("%s: %s suppressed", diag.location, diag.error_id)
            return None
        self._diagnostics.append(diag)
        if ctx is not None and ctx.sink is not None:
            ctx.sink.submit(diag)
        return diag

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — TAB ORDER CHECKER
# ═════════════════════════════════════════════════════════════════════════

class TabOrderChecker(Checker):
    """
    Flags controls whose ``TabIndex`` disagrees with the order in which
    they were added to their parent's ``Controls`` collection.

    ``NonNumericOrderValue`` is reported while the statements are walked,
    as soon as the offending assignment is seen.  ``InconsistentOrder`` is
    reported once the whole scope has been observed.
    """

    name: ClassVar[str] = "tab-order"
    description: ClassVar[str] = "Controls tab order consistency"
    error_ids: ClassVar[FrozenSet[str]] = frozenset(r.rule_id for r in RULES.values())

    def __init__(self) -> None:
        super().__init__()
        self.tracker = OrderingTracker()
        self.findings: List[Finding] = []

    def collect_evidence(self, ctx: CheckerContext) -> None:
        for statement in ctx.statements:
            op = classify(statement)
            if op is None:
                continue
            if isinstance(op, InvalidOrderAssignOp):
                self._report(Finding.non_numeric(op.control, op.value_loc, op.value_text))
            self.tracker.observe(op)
        ctx.stats["observed"] = self.tracker.observed

    def diagnose(self, ctx: CheckerContext) -> None:
        for finding in check_consistency(self.tracker.attach_sequence,
                                         self.tracker.declared_order):
            self._report(finding)

    def _report(self, finding: Finding) -> None:
        self.findings.append(finding)
        self._emit_finding(finding)


#: Checkers run on every scope, in order.
DEFAULT_CHECKERS: Sequence[Type[Checker]] = (TabOrderChecker,)


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — CHECKER RUNNER
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerRunResults:
    """
    Aggregate results from running the checkers.

    Attributes
    ----------
    diagnostics          : All diagnostics, in completion order
    diagnostics_by_scope : Diagnostics grouped by (file, scope name)
    stats                : Timing and counting statistics
    scope_names          : Names of analysed scopes
    scope_keys           : (file, scope name) of analysed scopes
    failures             : Files that could not be read
    """
    diagnostics: List[Diagnostic] = field(default_factory=list)
    diagnostics_by_scope: Dict[ScopeKey, List[Diagnostic]] = field(
        default_factory=lambda: defaultdict(list)
    )
    stats: Dict[str, Any] = field(default_factory=dict)
    scope_names: List[str] = field(default_factory=list)
    scope_keys: List[ScopeKey] = field(default_factory=list)
    failures: List[SourceError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == DiagnosticSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == DiagnosticSeverity.WARNING)

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    def by_rule(self, rule_id: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if rule_id in (d.error_id, d.code)]

    def by_file(self, file: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.location.file == file]

    def merge(self, other: "CheckerRunResults") -> None:
        self.diagnostics.extend(other.diagnostics)
        for key, diags in other.diagnostics_by_scope.items():
            self.diagnostics_by_scope[key].extend(diags)
        for key, value in other.stats.items():
            if isinstance(value, (int, float)) and key in self.stats:
                self.stats[key] += value
            else:
                self.stats[key] = value
        self.scope_names.extend(other.scope_names)
        self.scope_keys.extend(other.scope_keys)
        self.failures.extend(other.failures)

    def to_json_lines(self) -> str:
        return "\n".join(d.to_json_str() for d in self.diagnostics)

    def to_gcc_format(self) -> str:
        return "\n".join(d.to_gcc_format() for d in self.diagnostics)

    def summary(self) -> str:
        lines = [
            f"Checked {len(self.scope_names)} scope(s): {self.total_count} diagnostics "
            f"({self.error_count} errors, {self.warning_count} warnings)",
        ]
        # a scope checked twice is listed once
        for file, name in dict.fromkeys(self.scope_keys):
            count = len(self.diagnostics_by_scope.get((file, name), []))
            if count:
                lines.append(f"  {file}: {name}: {count} finding(s)")
        for failure in self.failures:
            lines.append(f"  skipped {failure}")
        return "\n".join(lines)


class CheckerRunner:
    """
    Runs the checkers over scopes, source text, or files.

    Usage
    -----
    >>> runner = CheckerRunner()
    >>> results = runner.run_files(["Form1.Designer.cs"], jobs=4)
    >>> print(results.summary())

    Parameters for constructor
    ─────────────────────────
    config       : LintConfig
    suppressions : SuppressionManager — pre-loaded suppression rules
    sink         : extra sink receiving each diagnostic as it is emitted
    checkers     : checker classes to run on every scope
    """

    def __init__(
        self,
        config: Optional[LintConfig] = None,
        suppressions: Optional[SuppressionManager] = None,
        sink: Optional[DiagnosticSink] = None,
        checkers: Optional[Sequence[Type[Checker]]] = None,
    ) -> None:
        self.config = config or LintConfig()
        self.suppressions = suppressions or SuppressionManager()
        self.sink = sink
        self.checkers = tuple(checkers or DEFAULT_CHECKERS)
        self.parser = DesignerParser(self.config.method_names)
        for rule in self.config.suppress:
            self.suppressions.add_global_suppression(rule)
        for pattern, rules in self.config.file_suppressions.items():
            for rule in rules:
                self.suppressions.add_file_suppression(rule, pattern)

    def _wanted(self, cls: Type[Checker]) -> bool:
        """False when every rule *cls* reports is disabled or suppressed globally."""
        if not cls.error_ids:
            return True
        for rule in RULES.values():
            if rule.rule_id not in cls.error_ids:
                continue
            if self.config.severities.get(rule.rule_id, rule.default_severity) is None:
                continue
            if self.suppressions.is_rule_suppressed(rule.rule_id, rule.code):
                continue
            return True
        return False

    def run_scope(self, scope: Scope) -> CheckerRunResults:
        """Run every checker on one scope with fresh state."""
        results = CheckerRunResults()
        key = (scope.file, scope.name)
        results.scope_names.append(scope.name)
        results.scope_keys.append(key)
        t0 = time.monotonic()
        for cls in self.checkers:
            if not self._wanted(cls):
                logger.debug("Skipping checker '%s' (%s): all of its rules are off",
                             cls.name, cls.description)
                continue
            ctx = CheckerContext(
                scope=scope,
                config=self.config,
                suppressions=self.suppressions,
                sink=self.sink,
            )
            checker = cls()
            try:
                diags = checker.run(ctx)
            except Exception as exc:
                logger.exception("Checker '%s' failed on %s", cls.name, scope.name)
                diags = [Diagnostic(
                    error_id="checkerInternalError",
                    message=f"Checker '{cls.name}' failed: {exc}",
                    severity=DiagnosticSeverity.INFORMATION,
                    location=scope.loc if scope.loc != NO_LOCATION
                    else SourceLocation(file=scope.file),
                    checker_name=cls.name,
                    scope=scope.name,
                )]
                if self.sink is not None:
                    self.sink.submit(diags[0])
            results.diagnostics.extend(diags)
            results.diagnostics_by_scope[key].extend(diags)
        results.stats["statements"] = len(scope)
        results.stats["elapsed_ms"] = (time.monotonic() - t0) * 1000.0
        return results

    def run_parsed(self, parsed: ParsedSource) -> CheckerRunResults:
        self.suppressions.load_inline_suppressions(parsed.file, parsed.suppressions)
        combined = CheckerRunResults()
        for scope in parsed.scopes:
            combined.merge(self.run_scope(scope))
        combined.stats["files"] = combined.stats.get("files", 0) + 1
        return combined

    def run_source(self, text: str, file: str = "<string>") -> CheckerRunResults:
        return self.run_parsed(self.parser.parse(text, file))

    def run_file(self, path: Union[str, Path]) -> CheckerRunResults:
        logger.info("Checking %s", path)
        try:
            parsed = parse_file(path, self.config.method_names)
        except SourceError as exc:
            logger.error("%s", exc)
            failed = CheckerRunResults()
            failed.failures.append(exc)
            return failed
        return self.run_parsed(parsed)

    def run_files(
        self,
        paths: Iterable[Union[str, Path]],
        jobs: Optional[int] = None,
    ) -> CheckerRunResults:
        """Check several files, ``jobs`` at a time.

        Results are merged in input order regardless of completion order.
        """
        paths = list(paths)
        jobs = jobs or self.config.jobs
        combined = CheckerRunResults()
        t0 = time.monotonic()
        if jobs <= 1 or len(paths) <= 1:
            for path in paths:
                combined.merge(self.run_file(path))
        else:
            with ThreadPoolExecutor(max_workers=jobs) as pool:
                for partial in pool.map(self.run_file, paths):
                    combined.merge(partial)
        combined.stats["elapsed_ms"] = (time.monotonic() - t0) * 1000.0
        return combined


def analyze_scope(
    statements: Iterable[Statement],
    sink: Optional[DiagnosticSink] = None,
    config: Optional[LintConfig] = None,
    name: str = "InitializeComponent",
    file: str = "",
) -> List[Diagnostic]:
    """Run the tab-order checker over an already materialised statement list.

    This is the entry point for hosts that produce statements themselves.
    """
    scope = Scope(name=name, file=file, statements=list(statements))
    ctx = CheckerContext(scope=scope, config=config or LintConfig(), sink=sink)
    return TabOrderChecker().run(ctx)


__all__ = [
    "CheckerContext", "Checker", "TabOrderChecker", "DEFAULT_CHECKERS",
    "CheckerRunResults", "CheckerRunner", "analyze_scope",
]
