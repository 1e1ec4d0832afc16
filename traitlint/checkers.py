"""
traitlint/checkers.py
═════════════════════

Lint framework: the diagnostic model, suppressions, the checker base
classes, lint registration and the runner that drives checkers over a
:class:`~traitlint.hir.CompilationUnit`.

Architecture
────────────

  ┌─────────────────────────────────────────────────────────┐
  │                   CheckerRunner                         │
  │  LintRegistry ──► LintRegistration ──► Checker instance │
  │                                                         │
  │  ┌──────────────────────────────────────────────────┐   │
  │  │ ItemChecker: check_item() once per top-level item│   │
  │  └──────────────────────────┬───────────────────────┘   │
  │                             │                           │
  │  ┌──────────────────────────▼───────────────────────┐   │
  │  │ SuppressionManager                               │   │
  │  │  #[allow(lint)]  │  file-level  │  global        │   │
  │  └──────────────────────────┬───────────────────────┘   │
  │                             │                           │
  │  ┌──────────────────────────▼───────────────────────┐   │
  │  │ Diagnostic formatter (JSON / gcc / summary)      │   │
  │  └──────────────────────────────────────────────────┘   │
  └─────────────────────────────────────────────────────────┘

Each Checker follows a four-phase lifecycle:

  1. **configure()**        — resolve lang items, read options
  2. **collect_evidence()** — walk the items, gather offending sites
  3. **diagnose()**         — turn sites into Diagnostics
  4. **report()**           — return Diagnostics not suppressed

Every checker owns its diagnostic list, so checkers never share a sink and
the unit they read is immutable.
"""

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatch
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
)

from traitlint.errors import FatalError
from traitlint.hir import (
    CompilationUnit,
    Item,
    SourceSpan,
    allowed_lints,
    as_impl,
)
from traitlint.lang_items import LangItems

logger = logging.getLogger(__name__)

#: Tool prefix accepted in ``#[allow(traitlint::lint_name)]``.
TOOL_NAME = "traitlint"


def lint_key(name: str) -> str:
    """Normalize ``traitlint::some_lint`` / ``some-lint`` to ``some_lint``."""
    name = name.strip()
    prefix = TOOL_NAME + "::"
    if name.startswith(prefix):
        name = name[len(prefix):]
    return name.replace("-", "_")


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — DIAGNOSTIC MODEL
# ═════════════════════════════════════════════════════════════════════════

class DiagnosticSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


class Level(Enum):
    """
    How a lint is configured to report.

    ALLOW — the lint does not run
    WARN  — findings are warnings
    DENY  — findings are errors (non-zero exit status)
    """
    ALLOW = "allow"
    WARN = "warn"
    DENY = "deny"

    @property
    def severity(self) -> Optional[DiagnosticSeverity]:
        if self is Level.WARN:
            return DiagnosticSeverity.WARNING
        if self is Level.DENY:
            return DiagnosticSeverity.ERROR
        return None


@dataclass(frozen=True)
class Diagnostic:
    """
    A single lint finding.

    Attributes
    ----------
    lint_id      : Name of the lint (e.g., "partialeq_ne_impl")
    message      : Human-readable description
    severity     : DiagnosticSeverity
    span         : Source span of the offending construct
    checker_name : Name of the checker that produced this
    help         : Optional suggestion shown after the message
    tool         : Tool prefix for the lint id
    """
    lint_id: str
    message: str
    severity: DiagnosticSeverity
    span: SourceSpan
    checker_name: str = ""
    help: str = ""
    tool: str = TOOL_NAME

    @property
    def qualified_id(self) -> str:
        return f"{self.tool}::{self.lint_id}"

    def sort_key(self) -> Tuple[SourceSpan, str, str]:
        return (self.span, self.lint_id, self.message)

    def to_json(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "file": self.span.file,
            "line": self.span.line,
            "column": self.span.column,
            "endLine": self.span.end_line,
            "endColumn": self.span.end_column,
            "severity": self.severity.value,
            "message": self.message,
            "lint": self.qualified_id,
        }
        if self.help:
            result["help"] = self.help
        return result

    def to_json_str(self) -> str:
        """Single-line JSON string."""
        return json.dumps(self.to_json(), sort_keys=True)

    def to_gcc_format(self) -> str:
        """GCC-style diagnostic string: file:line:col: severity: message."""
        text = f"{self.span}: {self.severity.value}: {self.message} [{self.qualified_id}]"
        if self.help:
            text += f"\n{self.span}: note: {self.help}"
        return text

    def __str__(self) -> str:
        return self.to_gcc_format()


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — SUPPRESSION MANAGER
# ═════════════════════════════════════════════════════════════════════════

class SuppressionManager:
    """
    Manages diagnostic suppressions from multiple sources.

    Sources:
      1. In-source attributes: ``#[allow(traitlint::lint_name)]`` on an item
         or impl member suppresses findings inside its span
      2. File-level suppressions (passed programmatically)
      3. Global suppressions (command-line or config)

    Usage
    -----
    >>> sm = SuppressionManager()
    >>> sm.load_inline_suppressions(unit)
    >>> sm.add_file_suppression("partialeq_ne_impl", "src/legacy/*.rs")
    >>> sm.add_global_suppression("partialeq_ne_impl")
    >>> if not sm.is_suppressed(diagnostic):
    ...     emit(diagnostic)
    """

    def __init__(self) -> None:
        self._inline: List[Tuple[SourceSpan, Set[str]]] = []
        # file pattern → set of lint ids
        self._file_level: Dict[str, Set[str]] = defaultdict(set)
        self._global: Set[str] = set()

    def load_inline_suppressions(self, unit: CompilationUnit) -> None:
        """Record the span of every item or member carrying ``#[allow]``."""
        for item in unit.items:
            self._add_inline(item.span, allowed_lints(item.attributes))
            impl = as_impl(item)
            if impl is None:
                continue
            for member in impl.members:
                self._add_inline(member.span, allowed_lints(member.attributes))

    def for_unit(self, unit: CompilationUnit) -> "SuppressionManager":
        """
        A new manager with this one's rules plus ``unit``'s ``#[allow]`` spans.

        ``self`` is left untouched, so spans never leak between units.
        """
        scoped = SuppressionManager()
        scoped._inline = list(self._inline)
        for pattern, ids in self._file_level.items():
            scoped._file_level[pattern] = set(ids)
        scoped._global = set(self._global)
        scoped.load_inline_suppressions(unit)
        return scoped

    @property
    def inline_count(self) -> int:
        return len(self._inline)

    def _add_inline(self, span: SourceSpan, names: Iterable[str]) -> None:
        ids = {lint_key(n) for n in names}
        if ids:
            self._inline.append((span, ids))

    def add_file_suppression(self, lint_id: str, file_pattern: str) -> None:
        """Suppress ``lint_id`` in files matching ``file_pattern``."""
        self._file_level[file_pattern].add(lint_key(lint_id))

    def add_global_suppression(self, lint_id: str) -> None:
        """Globally suppress ``lint_id``."""
        self._global.add(lint_key(lint_id))

    def is_suppressed(self, diag: Diagnostic) -> bool:
        lid = diag.lint_id

        if lid in self._global or "*" in self._global:
            return True

        for span, ids in self._inline:
            if lid in ids and span.contains(diag.span):
                return True

        file = diag.span.file
        for pattern, ids in self._file_level.items():
            if lid in ids or "*" in ids:
                if pattern == file or file.endswith(pattern) or fnmatch(file, pattern):
                    return True

        return False

    def filter_diagnostics(
        self, diagnostics: Iterable[Diagnostic]
    ) -> List[Diagnostic]:
        """Return only non-suppressed diagnostics."""
        return [d for d in diagnostics if not self.is_suppressed(d)]


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — CHECKER BASE CLASSES
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerContext:
    """
    Shared context passed to every checker during execution.

    Attributes
    ----------
    unit         : The compilation unit being linted (read-only)
    lang_items   : Lang-item registry of the unit
    suppressions : SuppressionManager
    levels       : Effective level of each lint for this run
    options      : user-provided options dict
    stats        : mutable dict for timing / counting statistics
    """
    unit: CompilationUnit
    lang_items: Optional[LangItems] = None
    suppressions: SuppressionManager = field(default_factory=SuppressionManager)
    levels: Dict[str, Level] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)
    stats: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.lang_items is None:
            self.lang_items = LangItems.from_unit(self.unit)

    def level_of(self, lint_id: str, default: Level) -> Level:
        return self.levels.get(lint_id, default)

    def get_option(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)


class Checker(ABC):
    """
    Abstract base class for all lints.

    Subclass Contract
    ─────────────────
      - Override ``name``, ``description``, ``default_level``
      - Implement ``collect_evidence()`` and ``diagnose()``
      - Optionally override ``configure()`` for custom setup
    """

    name: ClassVar[str] = "base_checker"
    description: ClassVar[str] = ""
    explanation: ClassVar[str] = ""
    default_level: ClassVar[Level] = Level.WARN

    def __init__(self) -> None:
        self._diagnostics: List[Diagnostic] = []
        self._level: Level = self.default_level

    @classmethod
    def registration(cls) -> "LintRegistration":
        """The record a host registers this lint with."""
        return LintRegistration(
            name=cls.name,
            default_level=cls.default_level,
            description=cls.description,
            factory=cls,
            explanation=cls.explanation,
        )

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    @property
    def level(self) -> Level:
        return self._level

    def configure(self, ctx: CheckerContext) -> None:
        """
        Called before evidence collection.

        Subclasses that override this must call ``super().configure(ctx)``.
        """
        self._level = ctx.level_of(self.name, self.default_level)

    @abstractmethod
    def collect_evidence(self, ctx: CheckerContext) -> None:
        ...

    @abstractmethod
    def diagnose(self, ctx: CheckerContext) -> None:
        """Append diagnostics to ``self._diagnostics``."""
        ...

    def report(self, ctx: CheckerContext) -> List[Diagnostic]:
        """Return final diagnostics, filtered by suppressions."""
        return ctx.suppressions.filter_diagnostics(self._diagnostics)

    def _emit(
        self,
        message: str,
        span: SourceSpan,
        help: str = "",
        severity: Optional[DiagnosticSeverity] = None,
    ) -> None:
        """Helper to create and store a diagnostic."""
        self._diagnostics.append(Diagnostic(
            lint_id=self.name,
            message=message,
            severity=severity or self._level.severity or DiagnosticSeverity.WARNING,
            span=span,
            checker_name=type(self).__name__,
            help=help,
        ))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


class ItemChecker(Checker):
    """
    A checker driven once per top-level item, in declaration order.

    Subclasses implement ``check_item``; it must not mutate the item.
    """

    def collect_evidence(self, ctx: CheckerContext) -> None:
        for item in ctx.unit.items:
            self.check_item(ctx, item)

    @abstractmethod
    def check_item(self, ctx: CheckerContext, item: Item) -> None:
        ...


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — LINT REGISTRATION AND CONFIGURATION
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LintRegistration:
    """
    What a host needs to know to address and run one lint.

    ``factory`` builds a fresh checker for each run.
    """
    name: str
    default_level: Level
    description: str
    factory: Callable[[], Checker]
    explanation: str = ""


class LintRegistry:
    """
    Registry of available lints.

    Registries are plain objects handed to a :class:`CheckerRunner`; build
    the built-in set with :func:`default_registry`.

    Usage
    -----
    >>> registry = LintRegistry()
    >>> registry.register(PartialEqNeImplChecker.registration())
    >>> registry.names
    ['partialeq_ne_impl']
    """

    def __init__(self, registrations: Iterable[LintRegistration] = ()) -> None:
        self._lints: Dict[str, LintRegistration] = {}
        for reg in registrations:
            self.register(reg)

    def register(self, registration: LintRegistration) -> None:
        if registration.name in self._lints:
            raise ValueError(f"lint {registration.name!r} is already registered")
        self._lints[registration.name] = registration

    def unregister(self, name: str) -> None:
        self._lints.pop(lint_key(name), None)

    def get_all(self) -> List[LintRegistration]:
        return list(self._lints.values())

    def get_by_name(self, name: str) -> Optional[LintRegistration]:
        return self._lints.get(lint_key(name))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and lint_key(name) in self._lints

    def __len__(self) -> int:
        return len(self._lints)

    @property
    def names(self) -> List[str]:
        return sorted(self._lints.keys())


def default_registry() -> LintRegistry:
    """A new registry holding every built-in lint."""
    # imported here: the lint modules import this one
    from traitlint.partialeq_ne import PartialEqNeImplChecker

    return LintRegistry([PartialEqNeImplChecker.registration()])


@dataclass
class LintConfig:
    """Per-lint level overrides, e.g. from ``-A``/``-W``/``-D`` flags."""
    levels: Dict[str, Level] = field(default_factory=dict)

    @classmethod
    def from_flags(
        cls,
        allow: Sequence[str] = (),
        warn: Sequence[str] = (),
        deny: Sequence[str] = (),
    ) -> "LintConfig":
        config = cls()
        for names, level in ((allow, Level.ALLOW), (warn, Level.WARN), (deny, Level.DENY)):
            for name in names:
                config.set_level(name, level)
        return config

    def set_level(self, name: str, level: Level) -> None:
        self.levels[lint_key(name)] = level

    def level_for(self, registration: LintRegistration) -> Level:
        return self.levels.get(registration.name, registration.default_level)

    def unknown_lints(self, registry: LintRegistry) -> List[str]:
        return sorted(name for name in self.levels if name not in registry)


# ═════════════════════════════════════════════════════════════════════════
#  PART 5 — CHECKER RUNNER
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerRunResults:
    """
    Aggregate results from running a suite of lints.

    Attributes
    ----------
    diagnostics            : All diagnostics, sorted by span
    diagnostics_by_checker : Diagnostics grouped by lint name
    stats                  : Timing and counting statistics
    checker_names          : Names of lints that were run
    """
    diagnostics: List[Diagnostic] = field(default_factory=list)
    diagnostics_by_checker: Dict[str, List[Diagnostic]] = field(
        default_factory=lambda: defaultdict(list)
    )
    stats: Dict[str, Any] = field(default_factory=dict)
    checker_names: List[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(
            1 for d in self.diagnostics
            if d.severity == DiagnosticSeverity.ERROR
        )

    @property
    def warning_count(self) -> int:
        return sum(
            1 for d in self.diagnostics
            if d.severity == DiagnosticSeverity.WARNING
        )

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    def sort(self) -> None:
        self.diagnostics.sort(key=Diagnostic.sort_key)

    def by_severity(self, severity: DiagnosticSeverity) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == severity]

    def by_file(self, file: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.span.file == file]

    def by_lint(self, lint_id: str) -> List[Diagnostic]:
        key = lint_key(lint_id)
        return [d for d in self.diagnostics if d.lint_id == key]

    def to_json_lines(self) -> str:
        return "\n".join(d.to_json_str() for d in self.diagnostics)

    def to_gcc_format(self) -> str:
        return "\n".join(d.to_gcc_format() for d in self.diagnostics)

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            f"Lint run complete: {self.total_count} diagnostics "
            f"({self.error_count} errors, {self.warning_count} warnings)",
        ]
        for name in self.checker_names:
            count = len(self.diagnostics_by_checker.get(name, []))
            elapsed = self.stats.get(f"{name}_elapsed_ms", 0)
            lines.append(f"  {name}: {count} findings ({elapsed:.1f}ms)")
        return "\n".join(lines)


class CheckerRunner:
    """
    Runs a suite of lints against compilation units.

    Usage
    -----
    >>> runner = CheckerRunner(default_registry())
    >>> results = runner.run(unit)
    >>> print(results.summary())

    >>> # Or select specific lints:
    >>> results = runner.run(unit, lints=["partialeq_ne_impl"])

    Parameters for constructor
    ─────────────────────────
    registry    : LintRegistry — source of lint registrations
    suppressions: SuppressionManager — pre-loaded suppression rules
    config      : LintConfig — level overrides
    options     : dict — per-checker configuration
    """

    def __init__(
        self,
        registry: LintRegistry,
        suppressions: Optional[SuppressionManager] = None,
        config: Optional[LintConfig] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.registry = registry
        self.suppressions = suppressions or SuppressionManager()
        self.config = config or LintConfig()
        self.options = options or {}
        for name in self.config.unknown_lints(registry):
            logger.warning("unknown lint in configuration: %s", name)

    def _select(self, lints: Optional[Sequence[str]]) -> List[LintRegistration]:
        if lints is None:
            return self.registry.get_all()
        selected: List[LintRegistration] = []
        for name in lints:
            reg = self.registry.get_by_name(name)
            if reg is None:
                logger.warning("unknown lint requested: %s", name)
                continue
            selected.append(reg)
        return selected

    def run(
        self,
        unit: CompilationUnit,
        lints: Optional[Sequence[str]] = None,
    ) -> CheckerRunResults:
        """
        Run lints against a single compilation unit.

        Raises
        ------
        FatalError
            When a lint finds the host misconfigured (e.g. a missing lang
            item).  Any other checker failure is reported as an
            ``internalError`` note and the run continues.
        """
        results = CheckerRunResults()
        registrations = self._select(lints)
        ctx = CheckerContext(
            unit=unit,
            suppressions=self.suppressions.for_unit(unit),
            levels={reg.name: self.config.level_for(reg) for reg in registrations},
            options=self.options,
        )

        for reg in registrations:
            if ctx.levels[reg.name] is Level.ALLOW:
                logger.debug("lint %s is allowed; not running", reg.name)
                continue

            checker = reg.factory()
            results.checker_names.append(reg.name)

            t0 = time.monotonic()
            try:
                checker.configure(ctx)
                checker.collect_evidence(ctx)
                checker.diagnose(ctx)
                diags = checker.report(ctx)
            except FatalError:
                raise
            except Exception as exc:
                logger.warning("lint %s failed on %s: %s", reg.name, unit.path, exc)
                diags = [Diagnostic(
                    lint_id="internalError",
                    message=f"Lint '{reg.name}' failed: {exc}",
                    severity=DiagnosticSeverity.NOTE,
                    span=SourceSpan(file=unit.path),
                    checker_name=reg.name,
                )]
            elapsed_ms = (time.monotonic() - t0) * 1000.0
            logger.debug(
                "lint %s: %d findings in %.1fms", reg.name, len(diags), elapsed_ms
            )

            results.diagnostics.extend(diags)
            results.diagnostics_by_checker[reg.name] = diags
            results.stats[f"{reg.name}_elapsed_ms"] = elapsed_ms

        results.sort()
        return results

    def run_all(
        self,
        units: Iterable[CompilationUnit],
        lints: Optional[Sequence[str]] = None,
    ) -> CheckerRunResults:
        """Run lints across several compilation units."""
        combined = CheckerRunResults()
        for unit in units:
            partial = self.run(unit, lints=lints)
            combined.diagnostics.extend(partial.diagnostics)
            for name, diags in partial.diagnostics_by_checker.items():
                combined.diagnostics_by_checker[name].extend(diags)
            for key, val in partial.stats.items():
                combined.stats[key] = combined.stats.get(key, 0) + val
            for name in partial.checker_names:
                if name not in combined.checker_names:
                    combined.checker_names.append(name)
        combined.sort()
        return combined


__all__ = [
    "TOOL_NAME",
    "lint_key",
    # Diagnostic model
    "Diagnostic",
    "DiagnosticSeverity",
    "Level",
    # Suppression
    "SuppressionManager",
    # Checker framework
    "Checker",
    "ItemChecker",
    "CheckerContext",
    # Registration
    "LintRegistration",
    "LintRegistry",
    "LintConfig",
    "default_registry",
    # Runner
    "CheckerRunner",
    "CheckerRunResults",
]
