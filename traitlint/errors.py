"""
traitlint/errors.py
═══════════════════

Exception hierarchy shared by the dump front end, the lang-item registry
and the lint runner.

Error Hierarchy
───────────────

  TraitLintError (base)
  ├── DumpError            - the item dump cannot be read
  │   └── DumpSyntaxError  - the item dump does not match the grammar
  └── FatalError           - misconfigured host environment, aborts the run
      └── MissingLangItemError

An unresolved trait reference is *not* an error: lints treat it as a
non-match.  ``FatalError`` is the only condition the runner refuses to
degrade gracefully, because skipping a lint whose lang item is missing would
be indistinguishable from a clean crate.
"""

from __future__ import annotations

from typing import Any, Optional


class TraitLintError(Exception):
    """
    Base exception for all traitlint errors.

    Carries an optional ``hint`` rendered after the message.
    """

    def __init__(self, message: str, hint: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint

    def with_hint(self, hint: str) -> "TraitLintError":
        self.hint = hint
        return self

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


# ───────────────────────────────────────────────────────────────────────────────
# INPUT ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class DumpError(TraitLintError):
    """The item dump could not be loaded."""

    def __init__(self, message: str, source: str = "", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.source = source


class DumpSyntaxError(DumpError):
    """The item dump does not match the dump grammar."""

    def __init__(
        self,
        message: str,
        source: str = "",
        line: int = 0,
        column: int = 0,
        rule: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, source=source, **kwargs)
        self.line = line
        self.column = column
        self.rule = rule

    def __str__(self) -> str:
        where = f"{self.source}:{self.line}:{self.column}" if self.line else self.source
        text = f"{where}: {self.message}" if where else self.message
        if self.hint:
            text += f" (hint: {self.hint})"
        return text


# ───────────────────────────────────────────────────────────────────────────────
# FATAL ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class FatalError(TraitLintError):
    """A host misconfiguration; the analysis run must stop."""


class MissingLangItemError(FatalError):
    """The lang-item registry has no entry for a trait a lint depends on."""

    def __init__(self, item: str, **kwargs: Any) -> None:
        kwargs.setdefault(
            "hint",
            f"the front end must declare `lang {item} = <crate>:<index>`",
        )
        super().__init__(f"lang item `{item}` is not registered", **kwargs)
        self.item = item


__all__ = [
    "TraitLintError",
    "DumpError",
    "DumpSyntaxError",
    "FatalError",
    "MissingLangItemError",
]
