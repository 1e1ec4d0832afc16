"""
traitlint/lang_items.py
═══════════════════════

Lang-item registry and trait-identity resolution.

A lint that cares about a well-known trait must never compare the path an
``impl`` header spells the trait with: ``PartialEq``, ``cmp::PartialEq`` and
a ``use ... as Eqish`` alias all name the same definition, while a local
``trait PartialEq`` names a different one.  Instead the front end declares
the canonical :class:`~traitlint.hir.DefId` of each lang item, and a
:class:`TraitResolver` compares ids.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Mapping, Optional, Tuple

from traitlint.errors import MissingLangItemError
from traitlint.hir import CompilationUnit, DefId, TraitRef

logger = logging.getLogger(__name__)

#: Lang-item name of the structural-equality trait (``PartialEq``).
EQ_TRAIT = "eq"


class LangItems:
    """
    Registry of well-known definitions for one compilation unit.

    Usage
    -----
    >>> items = LangItems({"eq": DefId(0, 412)})
    >>> items.get("eq")
    DefId(crate=0, index=412)
    >>> "ord" in items
    False
    """

    def __init__(self, table: Optional[Mapping[str, DefId]] = None) -> None:
        self._table: Dict[str, DefId] = dict(table or {})

    @classmethod
    def from_unit(cls, unit: CompilationUnit) -> "LangItems":
        return cls(unit.lang_items)

    def get(self, name: str) -> Optional[DefId]:
        return self._table.get(name)

    def require(self, name: str) -> DefId:
        """Return the id registered for ``name`` or raise a fatal error."""
        def_id = self._table.get(name)
        if def_id is None:
            raise MissingLangItemError(name)
        return def_id

    def eq_trait(self) -> DefId:
        return self.require(EQ_TRAIT)

    def __contains__(self, name: object) -> bool:
        return name in self._table

    def __iter__(self) -> Iterator[Tuple[str, DefId]]:
        return iter(sorted(self._table.items()))

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"<LangItems {sorted(self._table)}>"


class TraitResolver:
    """
    Decides whether a trait reference denotes one specific lang item.

    The canonical id is looked up when the resolver is built, so a registry
    without the requested item fails with :class:`MissingLangItemError`
    before a single item has been inspected.
    """

    def __init__(self, lang_items: LangItems, item: str = EQ_TRAIT) -> None:
        self.item = item
        self.target: DefId = lang_items.require(item)

    def resolves(self, trait_ref: Optional[TraitRef]) -> bool:
        """
        True iff ``trait_ref`` is resolved and its id is the target's.

        Missing or unresolved references are non-matches.
        """
        if trait_ref is None:
            return False
        if not trait_ref.is_resolved:
            logger.debug(
                "skipping unresolved trait reference %r", trait_ref.path
            )
            return False
        return trait_ref.def_id == self.target

    def __repr__(self) -> str:
        return f"<TraitResolver {self.item}={self.target}>"


__all__ = [
    "EQ_TRAIT",
    "LangItems",
    "TraitResolver",
]
