"""
traitlint/partialeq_ne.py
═════════════════════════

``partialeq_ne_impl``: flags manual re-implementations of ``PartialEq::ne``.
"""

from __future__ import annotations

import logging
from typing import ClassVar, List, Optional

from traitlint.checkers import CheckerContext, ItemChecker, Level
from traitlint.hir import (
    ImplBlock,
    Item,
    MemberFunction,
    as_impl,
    is_automatically_derived,
)
from traitlint.lang_items import EQ_TRAIT, TraitResolver

logger = logging.getLogger(__name__)

NE_METHOD = "ne"

MESSAGE = "re-implementing `PartialEq::ne` is unnecessary"
HELP = "the default implementation of `ne` already returns `!self.eq(other)`"


class PartialEqNeImplChecker(ItemChecker):
    """
    Checks for manual re-implementations of ``PartialEq::ne``.

    ``PartialEq::ne`` is required to always return the negated result of
    ``PartialEq::eq``, which is exactly what the default implementation
    does, so there is never a reason to write it by hand::

        struct Foo;

        impl PartialEq for Foo {
            fn eq(&self, other: &Foo) -> bool { ... }
            fn ne(&self, other: &Foo) -> bool { !(self == other) }
        }

    Implementations generated by ``#[derive(PartialEq)]`` are skipped.
    """

    name: ClassVar[str] = "partialeq_ne_impl"
    description: ClassVar[str] = "re-implementing `PartialEq::ne`"
    explanation: ClassVar[str] = (
        "`PartialEq::ne` is required to always return the negated result of "
        "`PartialEq::eq`, which is exactly what the default implementation "
        "does. Therefore, there should never be any need to re-implement it."
    )
    default_level: ClassVar[Level] = Level.WARN

    def __init__(self) -> None:
        super().__init__()
        self._resolver: Optional[TraitResolver] = None
        self._sites: List[MemberFunction] = []

    def configure(self, ctx: CheckerContext) -> None:
        super().configure(ctx)
        # raises MissingLangItemError when the unit declares no `eq` item
        self._resolver = TraitResolver(ctx.lang_items, EQ_TRAIT)

    def _eq_impl(self, item: Item) -> Optional[ImplBlock]:
        impl = as_impl(item)
        if impl is None:
            return None
        if impl.trait_ref is None:
            return None
        if is_automatically_derived(impl.attributes):
            return None
        if not self._resolver.resolves(impl.trait_ref):
            return None
        return impl

    def check_item(self, ctx: CheckerContext, item: Item) -> None:
        impl = self._eq_impl(item)
        if impl is None:
            return
        for member in impl.members_named(NE_METHOD):
            logger.debug("manual `ne` in %s at %s", impl.name, member.span)
            self._sites.append(member)

    def diagnose(self, ctx: CheckerContext) -> None:
        for member in self._sites:
            self._emit(MESSAGE, member.span, help=HELP)


__all__ = [
    "PartialEqNeImplChecker",
    "NE_METHOD",
    "MESSAGE",
    "HELP",
]
