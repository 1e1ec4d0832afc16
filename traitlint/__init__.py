"""
traitlint — trait implementation lints over a resolved item tree
================================================================

A small lint engine: it walks the top-level items of an already
type-checked compilation unit, identifies ``impl`` blocks of well-known
traits by resolved identity, and reports diagnostics at the span of the
offending member.

Core modules
------------
hir
    The read-only item tree (items, impl blocks, spans, trait references).
lang_items
    Lang-item registry and trait-identity resolution.
checkers
    Diagnostic model, suppressions, checker base classes, registration,
    and the runner.
partialeq_ne
    The ``partialeq_ne_impl`` lint.
dump
    Reader for the item dumps the compiler front end writes.

Quick start
-----------
>>> from traitlint import CheckerRunner, default_registry, parse_dump
>>> unit = parse_dump(open("target/lib.items").read())
>>> results = CheckerRunner(default_registry()).run(unit)
>>> print(results.to_gcc_format())
"""

from __future__ import annotations

import logging
from typing import List

__version__ = "0.1.0"
__author__ = "traitlint contributors"
__license__ = "MIT"

_log = logging.getLogger(__name__)
_log.addHandler(logging.NullHandler())

from traitlint.errors import (  # noqa: E402
    DumpError,
    DumpSyntaxError,
    FatalError,
    MissingLangItemError,
    TraitLintError,
)
from traitlint.hir import (  # noqa: E402
    Attribute,
    CompilationUnit,
    DefId,
    ImplBlock,
    Item,
    ItemKind,
    MemberFunction,
    SourceSpan,
    TraitRef,
)
from traitlint.lang_items import EQ_TRAIT, LangItems, TraitResolver  # noqa: E402
from traitlint.checkers import (  # noqa: E402
    Checker,
    CheckerContext,
    CheckerRunner,
    CheckerRunResults,
    Diagnostic,
    DiagnosticSeverity,
    ItemChecker,
    Level,
    LintConfig,
    LintRegistration,
    LintRegistry,
    SuppressionManager,
    default_registry,
)
from traitlint.partialeq_ne import PartialEqNeImplChecker  # noqa: E402
from traitlint.dump import load_dump, parse_dump  # noqa: E402

__all__: List[str] = [
    "__version__",
    # errors
    "TraitLintError",
    "DumpError",
    "DumpSyntaxError",
    "FatalError",
    "MissingLangItemError",
    # item tree
    "Attribute",
    "CompilationUnit",
    "DefId",
    "ImplBlock",
    "Item",
    "ItemKind",
    "MemberFunction",
    "SourceSpan",
    "TraitRef",
    # lang items
    "EQ_TRAIT",
    "LangItems",
    "TraitResolver",
    # framework
    "Checker",
    "CheckerContext",
    "CheckerRunner",
    "CheckerRunResults",
    "Diagnostic",
    "DiagnosticSeverity",
    "ItemChecker",
    "Level",
    "LintConfig",
    "LintRegistration",
    "LintRegistry",
    "SuppressionManager",
    "default_registry",
    # lints
    "PartialEqNeImplChecker",
    # front end
    "load_dump",
    "parse_dump",
]
