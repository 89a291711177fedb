"""
designer_lint/config.py — analysis configuration.

A configuration file is plain JSON, by default ``.designer-lint.json``
found by walking up from the analysed directory::

    {
        "severities": {"InconsistentOrder": "error", "SWFA0001": "none"},
        "suppress": [],
        "file_suppressions": {"Legacy/*": ["InconsistentOrder"]},
        "method_names": ["InitializeComponent"],
        "jobs": 4,
        "strict": false
    }

Rules may be named by identifier or code.  A severity of ``"none"``
disables the rule.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from designer_lint.diagnostics import DiagnosticSeverity, resolve_rule
from designer_lint.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".designer-lint.json"

DEFAULT_METHOD_NAMES: Tuple[str, ...] = ("InitializeComponent",)

_KNOWN_KEYS = frozenset({
    "severities", "suppress", "file_suppressions", "method_names", "jobs", "strict",
})


@dataclass
class LintConfig:
    """Tuning knobs for a designer-lint run."""
    severities: Dict[str, Optional[DiagnosticSeverity]] = field(default_factory=dict)
    suppress: List[str] = field(default_factory=list)
    file_suppressions: Dict[str, List[str]] = field(default_factory=dict)
    method_names: Tuple[str, ...] = DEFAULT_METHOD_NAMES
    jobs: int = 1
    strict: bool = False
    source: Optional[str] = None

    def validate(self) -> List[str]:
        """Return a list of validation problems (empty if valid)."""
        problems: List[str] = []
        if self.jobs <= 0:
            problems.append("jobs must be positive")
        if not self.method_names:
            problems.append("method_names must not be empty")
        for name in self.method_names:
            if not name.isidentifier():
                problems.append(f"method name {name!r} is not an identifier")
        for rule in [*self.suppress, *(r for rs in self.file_suppressions.values() for r in rs)]:
            if rule != "*" and resolve_rule(rule) is None:
                problems.append(f"unknown rule {rule!r}")
        return problems

    def set_severity(self, rule: str, level: str) -> None:
        """Override the severity of *rule*; ``level`` ``"none"`` disables it."""
        descriptor = resolve_rule(rule)
        if descriptor is None:
            raise ConfigError(f"unknown rule {rule!r}", self.source)
        if level.strip().lower() == "none":
            self.severities[descriptor.rule_id] = None
            return
        try:
            self.severities[descriptor.rule_id] = DiagnosticSeverity.parse(level)
        except ValueError as exc:
            raise ConfigError(str(exc), self.source) from None

    def with_overrides(self, **changes: Any) -> "LintConfig":
        """Copy with non-``None`` keyword values applied."""
        applied = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **applied)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any],
                     source: Optional[str] = None) -> "LintConfig":
        if not isinstance(data, Mapping):
            raise ConfigError("top-level value must be an object", source)
        unknown = sorted(set(data) - _KNOWN_KEYS)
        if unknown:
            logger.warning("%s: ignoring unknown configuration keys: %s",
                           source or "<config>", ", ".join(unknown))

        config = cls(source=source)
        severities = data.get("severities", {})
        if not isinstance(severities, Mapping):
            raise ConfigError("'severities' must be an object", source)
        for rule, level in severities.items():
            if not isinstance(level, str):
                raise ConfigError(f"severity for {rule!r} must be a string", source)
            config.set_severity(rule, level)

        config.suppress = _string_list(data.get("suppress", []), "suppress", source)

        file_suppressions = data.get("file_suppressions", {})
        if not isinstance(file_suppressions, Mapping):
            raise ConfigError("'file_suppressions' must be an object", source)
        config.file_suppressions = {
            str(pattern): _string_list(rules, f"file_suppressions[{pattern!r}]", source)
            for pattern, rules in file_suppressions.items()
        }

        if "method_names" in data:
            config.method_names = tuple(
                _string_list(data["method_names"], "method_names", source)
            )
        jobs = data.get("jobs", 1)
        if isinstance(jobs, bool) or not isinstance(jobs, int):
            raise ConfigError("'jobs' must be an integer", source)
        config.jobs = jobs
        strict = data.get("strict", False)
        if not isinstance(strict, bool):
            raise ConfigError("'strict' must be true or false", source)
        config.strict = strict

        problems = config.validate()
        if problems:
            raise ConfigError("; ".join(problems), source)
        return config


def _string_list(value: Any, key: str, source: Optional[str]) -> List[str]:
    if not isinstance(value, Sequence) or isinstance(value, str) \
            or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings", source)
    return list(value)


def load_config(path: Union[str, Path]) -> LintConfig:
    """Read a JSON configuration file."""
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"cannot read configuration: {exc.strerror or exc}", p) from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON at line {exc.lineno}: {exc.msg}", p) from exc
    logger.info("Loaded configuration from %s", p)
    return LintConfig.from_mapping(data, source=str(p))


def find_config(start: Union[str, Path]) -> Optional[Path]:
    """Search *start* and its parents for ``.designer-lint.json``."""
    here = Path(start).expanduser().resolve()
    if here.is_file():
        here = here.parent
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if (directory / ".git").exists():
            break
    return None


__all__ = [
    "CONFIG_FILENAME", "DEFAULT_METHOD_NAMES",
    "LintConfig", "load_config", "find_config",
]
