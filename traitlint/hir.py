"""
traitlint/hir.py
════════════════

The resolved, read-only item tree a lint pass walks.

The compiler front end (parsing, name resolution, type checking) is an
external collaborator.  It hands over one :class:`CompilationUnit` per
analyzed crate: the ordered top-level items, each with its attributes and
source span, and a table of lang items mapping well-known names to
definition ids.

Trait references carry a :class:`DefId`, the identity of the trait
definition.  Two references denote the same trait iff their ids are equal;
the ``path`` a reference was spelled with (``PartialEq``, ``cmp::PartialEq``,
an alias, a re-export) is kept for display only.

All classes are frozen dataclasses, so a unit can be shared by any number of
concurrently running lints without coordination.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import (
    Dict,
    Iterator,
    Mapping,
    Optional,
    Sequence,
    Tuple,
)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — SPANS AND IDENTITIES
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, order=True)
class SourceSpan:
    """A half-open region of source text, 1-based lines and columns."""
    file: str = ""
    line: int = 0
    column: int = 0
    end_line: int = 0
    end_column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"

    def contains(self, other: "SourceSpan") -> bool:
        """True if ``other`` lies entirely inside this span."""
        if other.file != self.file:
            return False
        start = (self.line, self.column)
        end = (self.end_line, self.end_column)
        return start <= (other.line, other.column) and (
            other.end_line, other.end_column
        ) <= end


@dataclass(frozen=True, order=True)
class DefId:
    """Opaque identity of a definition: ``(crate, index)``."""
    crate: int
    index: int

    def __str__(self) -> str:
        return f"{self.crate}:{self.index}"


@dataclass(frozen=True)
class TraitRef:
    """
    The trait named in an ``impl Trait for Type`` header.

    ``def_id`` is ``None`` when the front end failed to resolve the path.
    """
    path: str
    def_id: Optional[DefId] = None

    @property
    def is_resolved(self) -> bool:
        return self.def_id is not None

    def __str__(self) -> str:
        return self.path


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — ATTRIBUTES
# ═════════════════════════════════════════════════════════════════════════

AUTOMATICALLY_DERIVED = "automatically_derived"


@dataclass(frozen=True)
class Attribute:
    """An outer attribute such as ``#[allow(dead_code)]``."""
    name: str
    args: Tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> "Attribute":
        """
        Build an attribute from its source text, without the ``#[ ]``.

        >>> Attribute.parse("allow(unused, traitlint::partialeq_ne_impl)")
        Attribute(name='allow', args=('unused', 'traitlint::partialeq_ne_impl'))
        """
        text = text.strip()
        if "(" not in text:
            return cls(name=text)
        name, _, rest = text.partition("(")
        rest = rest.rstrip()
        if rest.endswith(")"):
            rest = rest[:-1]
        args = tuple(a.strip() for a in rest.split(",") if a.strip())
        return cls(name=name.strip(), args=args)

    def __str__(self) -> str:
        if self.args:
            return f"#[{self.name}({', '.join(self.args)})]"
        return f"#[{self.name}]"


def is_automatically_derived(attributes: Sequence[Attribute]) -> bool:
    """True if the item was generated by a ``#[derive]`` expansion."""
    return any(attr.name == AUTOMATICALLY_DERIVED for attr in attributes)


def allowed_lints(attributes: Sequence[Attribute]) -> Iterator[str]:
    """Yield every lint name listed in ``#[allow(...)]`` attributes."""
    for attr in attributes:
        if attr.name == "allow":
            yield from attr.args


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — ITEMS
# ═════════════════════════════════════════════════════════════════════════

class ItemKind(Enum):
    IMPL = "impl"
    FN = "fn"
    STRUCT = "struct"
    ENUM = "enum"
    UNION = "union"
    TRAIT = "trait"
    MOD = "mod"
    USE = "use"
    CONST = "const"
    STATIC = "static"
    TYPE = "type"


@dataclass(frozen=True)
class MemberFunction:
    """A function defined inside an ``impl`` block."""
    name: str
    span: SourceSpan
    signature: str = ""
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class Item:
    """A top-level declaration of a compilation unit."""
    kind: ItemKind
    name: str
    span: SourceSpan
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class ImplBlock(Item):
    """
    ``impl [Trait for] Type { ... }``.

    ``trait_ref`` is ``None`` for an inherent impl.  ``generics`` is the
    parameter list written after ``impl`` (``<T: Clone>``), or empty.
    """
    self_ty: str = ""
    generics: str = ""
    trait_ref: Optional[TraitRef] = None
    members: Tuple[MemberFunction, ...] = ()

    def __post_init__(self) -> None:
        if self.kind is not ItemKind.IMPL:
            raise ValueError(f"ImplBlock must have kind IMPL, got {self.kind}")

    @classmethod
    def new(
        cls,
        self_ty: str,
        span: SourceSpan,
        trait_ref: Optional[TraitRef] = None,
        members: Sequence[MemberFunction] = (),
        attributes: Sequence[Attribute] = (),
        generics: str = "",
    ) -> "ImplBlock":
        if trait_ref is not None:
            name = f"impl{generics} {trait_ref.path} for {self_ty}"
        else:
            name = f"impl{generics} {self_ty}"
        return cls(
            kind=ItemKind.IMPL,
            name=name,
            span=span,
            attributes=tuple(attributes),
            self_ty=self_ty,
            generics=generics,
            trait_ref=trait_ref,
            members=tuple(members),
        )

    @property
    def is_inherent(self) -> bool:
        return self.trait_ref is None

    def members_named(self, name: str) -> Iterator[MemberFunction]:
        """Every member called ``name``, in declaration order."""
        for member in self.members:
            if member.name == name:
                yield member


def as_impl(item: Item) -> Optional[ImplBlock]:
    """Return ``item`` if it is an impl block, else ``None``."""
    return item if isinstance(item, ImplBlock) else None


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — COMPILATION UNIT
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CompilationUnit:
    """
    One analyzed crate as handed over by the front end.

    ``lang_items`` maps lang-item names (``"eq"`` for ``PartialEq``) to the
    canonical id of the trait that implements them in this build.  It is
    stored as a read-only view and left out of the hash.
    """
    path: str
    items: Tuple[Item, ...] = ()
    lang_items: Mapping[str, DefId] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "lang_items", MappingProxyType(dict(self.lang_items)))

    def impls(self) -> Iterator[ImplBlock]:
        for item in self.items:
            impl = as_impl(item)
            if impl is not None:
                yield impl

    def items_by_kind(self) -> Dict[ItemKind, int]:
        counts: Dict[ItemKind, int] = {}
        for item in self.items:
            counts[item.kind] = counts.get(item.kind, 0) + 1
        return counts

    def __len__(self) -> int:
        return len(self.items)


__all__ = [
    "SourceSpan",
    "DefId",
    "TraitRef",
    "Attribute",
    "AUTOMATICALLY_DERIVED",
    "is_automatically_derived",
    "allowed_lints",
    "ItemKind",
    "MemberFunction",
    "Item",
    "ImplBlock",
    "as_impl",
    "CompilationUnit",
]
