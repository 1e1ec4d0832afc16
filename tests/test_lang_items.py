# tests/test_lang_items.py
"""
Tests for the lang-item registry and identity-based trait resolution.
"""

import pytest

from traitlint.errors import FatalError, MissingLangItemError
from traitlint.hir import DefId, TraitRef
from traitlint.lang_items import EQ_TRAIT, LangItems, TraitResolver
from tests.conftest import EQ_ID, HASH_ID, LOCAL_EQ_ID, unit


@pytest.fixture
def lang_items():
    return LangItems({"eq": EQ_ID, "hash": HASH_ID})


class TestLangItems:

    def test_get(self, lang_items):
        assert lang_items.get("eq") == EQ_ID
        assert lang_items.get("ord") is None

    def test_require_missing_is_fatal(self, lang_items):
        with pytest.raises(MissingLangItemError) as info:
            lang_items.require("ord")
        assert isinstance(info.value, FatalError)
        assert info.value.item == "ord"
        assert "ord" in str(info.value)

    def test_eq_trait(self, lang_items):
        assert lang_items.eq_trait() == EQ_ID

    def test_from_unit(self):
        items = LangItems.from_unit(unit(lang_items={"eq": EQ_ID}))
        assert "eq" in items
        assert len(items) == 1
        assert list(items) == [("eq", EQ_ID)]


class TestTraitResolver:

    def test_matches_by_identity(self, lang_items):
        resolver = TraitResolver(lang_items, EQ_TRAIT)
        assert resolver.resolves(TraitRef("PartialEq", EQ_ID))

    def test_alias_spelling_still_matches(self, lang_items):
        resolver = TraitResolver(lang_items)
        assert resolver.resolves(TraitRef("core::cmp::PartialEq", EQ_ID))
        assert resolver.resolves(TraitRef("Eqish", DefId(EQ_ID.crate, EQ_ID.index)))

    def test_same_name_different_definition_does_not_match(self, lang_items):
        resolver = TraitResolver(lang_items)
        assert not resolver.resolves(TraitRef("PartialEq", LOCAL_EQ_ID))

    def test_other_lang_item_does_not_match(self, lang_items):
        assert not TraitResolver(lang_items).resolves(TraitRef("Hash", HASH_ID))

    def test_unresolved_reference_fails_closed(self, lang_items):
        assert not TraitResolver(lang_items).resolves(TraitRef("PartialEq"))

    def test_missing_reference(self, lang_items):
        assert not TraitResolver(lang_items).resolves(None)

    def test_missing_lang_item_fails_at_construction(self):
        with pytest.raises(MissingLangItemError):
            TraitResolver(LangItems({"hash": HASH_ID}), EQ_TRAIT)

    def test_deterministic(self, lang_items):
        resolver = TraitResolver(lang_items)
        ref = TraitRef("PartialEq", EQ_ID)
        assert [resolver.resolves(ref) for _ in range(3)] == [True, True, True]
