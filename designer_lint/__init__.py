"""
designer_lint — Tab order checks for Windows Forms designer code
================================================================

Finds controls whose declared ``TabIndex`` disagrees with the order in
which they are added to their parent's ``Controls`` collection inside
``InitializeComponent()``.

Core modules
------------
syntax
    Typed statement / expression nodes with source locations.
parser
    Best-effort designer front-end (parsimonious PEG grammar).
identifiers
    Textual keys for control and container references.
classifier
    Attach-call and ``TabIndex`` assignment recognition.
tracker
    Per-scope attach order and declared order accumulation.
consistency
    Attach position vs. declared order comparison.
diagnostics
    Diagnostic model, rule catalogue, suppressions, sinks.
checkers
    Checker lifecycle, ``TabOrderChecker`` and ``CheckerRunner``.
config
    JSON configuration.
main
    Command-line interface (``designer-lint`` / ``python -m designer_lint``).

Quick start
-----------
>>> from designer_lint import CheckerRunner
>>> results = CheckerRunner().run_source(open("Form1.Designer.cs").read(), "Form1.Designer.cs")
>>> print(results.to_gcc_format())
"""

from __future__ import annotations

import logging
from typing import List

__version__ = "0.2.0"
__license__ = "MIT"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from designer_lint.checkers import (  # noqa: E402
    Checker,
    CheckerContext,
    CheckerRunner,
    CheckerRunResults,
    TabOrderChecker,
    analyze_scope,
)
from designer_lint.classifier import (  # noqa: E402
    AttachOp,
    InvalidOrderAssignOp,
    OrderAssignOp,
    classify,
)
from designer_lint.config import LintConfig, find_config, load_config  # noqa: E402
from designer_lint.consistency import check_consistency  # noqa: E402
from designer_lint.diagnostics import (  # noqa: E402
    Diagnostic,
    DiagnosticCollector,
    DiagnosticEmitter,
    DiagnosticSeverity,
    SuppressionManager,
)
from designer_lint.errors import ConfigError, DesignerLintError, SourceError  # noqa: E402
from designer_lint.findings import Finding, FindingKind  # noqa: E402
from designer_lint.identifiers import extract_control_key  # noqa: E402
from designer_lint.parser import parse_file, parse_source  # noqa: E402
from designer_lint.tracker import OrderingTracker  # noqa: E402

__all__: List[str] = [
    "__version__",
    "Checker", "CheckerContext", "CheckerRunner", "CheckerRunResults",
    "TabOrderChecker", "analyze_scope",
    "AttachOp", "OrderAssignOp", "InvalidOrderAssignOp", "classify",
    "LintConfig", "load_config", "find_config",
    "check_consistency",
    "Diagnostic", "DiagnosticCollector", "DiagnosticEmitter",
    "DiagnosticSeverity", "SuppressionManager",
    "DesignerLintError", "ConfigError", "SourceError",
    "Finding", "FindingKind",
    "extract_control_key",
    "parse_file", "parse_source",
    "OrderingTracker",
]
