# tests/conftest.py
"""
Shared fixtures: hand-built item trees and item-dump sources.
"""

import textwrap
from typing import Optional, Sequence

import pytest

from traitlint.hir import (
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

FILE = "src/lib.rs"
EQ_ID = DefId(0, 412)
HASH_ID = DefId(0, 77)
LOCAL_EQ_ID = DefId(1, 3)


def span(line: int, column: int, end_line: int, end_column: int) -> SourceSpan:
    return SourceSpan(FILE, line, column, end_line, end_column)


def member(name: str, line: int) -> MemberFunction:
    return MemberFunction(
        name=name,
        span=span(line, 5, line, 45),
        signature="(&self, other: &Foo) -> bool",
    )


def impl(
    trait: Optional[TraitRef] = None,
    members: Sequence[MemberFunction] = (),
    attributes: Sequence[Attribute] = (),
    self_ty: str = "Foo",
    line: int = 3,
) -> ImplBlock:
    end = line + len(members) + 1
    return ImplBlock.new(
        self_ty=self_ty,
        span=span(line, 1, end, 2),
        trait_ref=trait,
        members=members,
        attributes=attributes,
    )


def unit(*items: Item, lang_items=None) -> CompilationUnit:
    if lang_items is None:
        lang_items = {"eq": EQ_ID}
    return CompilationUnit(path=FILE, items=tuple(items), lang_items=lang_items)


@pytest.fixture
def partial_eq():
    return TraitRef("PartialEq", EQ_ID)


@pytest.fixture
def manual_ne_unit(partial_eq):
    """struct Foo + impl PartialEq for Foo { eq, ne }."""
    return unit(
        Item(ItemKind.STRUCT, "Foo", span(1, 1, 1, 12)),
        impl(partial_eq, [member("eq", 4), member("ne", 5)]),
    )


MANUAL_NE_DUMP = textwrap.dedent("""\
    unit "src/lib.rs"
    lang eq = 0:412

    struct Foo @1:1-1:12

    impl core::cmp::PartialEq => 0:412 for Foo @3:1-6:2 {
        fn eq(&self, other: &Foo) -> bool @4:5-4:40
        fn ne(&self, other: &Foo) -> bool @5:5-5:44
    }
""")

MIXED_DUMP = textwrap.dedent("""\
    // written by the front end
    unit "src/shapes.rs"
    lang eq = 0:412
    lang hash = 0:77

    #[derive(PartialEq)]
    struct Point @1:1-4:2

    #[automatically_derived]
    impl PartialEq => 0:412 for Point @2:10-2:19 {
        fn eq(&self, other: &Point) -> bool @2:10-2:19
        fn ne(&self, other: &Point) -> bool @2:10-2:19
    }

    impl Point @6:1-10:2 {
        fn ne(&self) -> bool @7:5-9:6
    }

    impl Missing => ? for Point @12:1-14:2 {
        fn ne(&self, other: &Point) -> bool @13:5-13:40
    }

    impl cmp::PartialEq => 0:412 for Circle @16:1-19:2 {
        fn eq(&self, other: &Circle) -> bool @17:5-17:40
        fn ne(&self, other: &Circle) -> bool @18:5-18:44
    }

    #[allow(traitlint::partialeq_ne_impl)]
    impl PartialEq => 0:412 for Square @21:1-24:2 {
        fn eq(&self, other: &Square) -> bool @22:5-22:40
        fn ne(&self, other: &Square) -> bool @23:5-23:44
    }

    fn main @26:1-26:13
""")


@pytest.fixture
def manual_ne_dump():
    return MANUAL_NE_DUMP


@pytest.fixture
def mixed_dump():
    return MIXED_DUMP


@pytest.fixture
def dump_file(tmp_path):
    path = tmp_path / "lib.items"
    path.write_text(MANUAL_NE_DUMP, encoding="utf-8")
    return path
