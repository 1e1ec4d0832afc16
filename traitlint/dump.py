"""
dump.py — Resolved item dump reader
===================================

The compiler front end writes the resolved top-level items of a crate to a
small text dump; this module parses it into a
:class:`~traitlint.hir.CompilationUnit`.

Usage::

    from traitlint.dump import load_dump, parse_dump

    unit = parse_dump('''
        unit "src/lib.rs"
        lang eq = 0:412

        struct Foo @1:1-1:12

        impl core::cmp::PartialEq => 0:412 for Foo @3:1-6:2 {
            fn eq(&self, other: &Foo) -> bool @4:5-4:40
            fn ne(&self, other: &Foo) -> bool @5:5-5:44
        }
    ''')

Format
------
* ``unit "<path>"`` starts the dump; every span belongs to that file.
* ``lang <name> = <crate>:<index>`` declares a lang item.
* ``impl <Trait> => <crate>:<index> for <Type> @span { members }`` is a
  trait impl; ``=> ?`` marks a trait path the front end could not
  resolve; ``impl <Type> @span { ... }`` is an inherent impl.  A generic
  parameter list may follow ``impl`` (``impl<T: Clone>``); trait paths and
  types are taken verbatim, so ``PartialEq<str>``, ``Pair<A, B>`` and
  ``&'a Foo`` all work.
* ``fn <name>(<params>) -> <ret> @span`` is an impl member; the signature is
  optional.
* ``<kind> <name> @span`` is any other item (``fn``, ``struct``, ...).
* ``#[...]`` lines attach an attribute to the following item or member.
* Spans are ``@line:col-end_line:end_col``; ``//`` starts a comment.

Depends on:
    - parsimonious (PEG parser)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from traitlint.errors import DumpError, DumpSyntaxError
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

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1 — DUMP GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

DUMP_GRAMMAR = Grammar(r'''
    unit          = _ unit_header entry*
    unit_header   = "unit" __ string _
    entry         = lang_decl / item

    lang_decl     = "lang" __ ident _ "=" _ def_id _

    item          = attribute* item_body
    item_body     = impl_block / other_item
    attribute     = "#[" attr_text "]" _
    attr_text     = ~r"[^\]\n]*"

    impl_block    = "impl" generics? __ trait_clause? self_ty _ span _ "{" _ member* "}" _
    generics      = ~r"<(?:[^<>]|<(?:[^<>]|<[^<>]*>)*>)*>"
    trait_clause  = trait_path _ "=>" _ resolution __ "for" __
    trait_path    = ~r"(?:[^@{}=\n]|=(?!>))+?(?=\s*=>)"
    self_ty       = ~r"[^@{}\n]+"
    resolution    = def_id / unresolved
    unresolved    = "?"
    member        = attribute* "fn" __ ident _ signature? span _
    signature     = ~r"\([^)]*\)(\s*->[^@{}]*)?"

    other_item    = item_kind __ ident _ span _
    item_kind     = "fn" / "struct" / "enum" / "union" / "trait" / "mod"
                  / "use" / "const" / "static" / "type"

    span          = "@" integer ":" integer "-" integer ":" integer
    def_id        = integer ":" integer
    ident         = ~r"[A-Za-z_][A-Za-z0-9_]*"
    integer       = ~r"[0-9]+"
    string        = ~'"[^"]*"'

    _             = (ws / comment)*
    __            = ~r"[ \t]+"
    ws            = ~r"\s+"
    comment       = ~r"//[^\n]*"
''')


# ═══════════════════════════════════════════════════════════════════
#  PART 2 — VISITOR (Parse Tree → CompilationUnit)
# ═══════════════════════════════════════════════════════════════════

class DumpBuilder(NodeVisitor):
    """Transforms a Parsimonious parse tree into a CompilationUnit."""

    unwrapped_exceptions = (DumpError,)

    def __init__(self, source: str = "<string>") -> None:
        self.source = source
        # set by visit_unit_header, which is visited before any span
        self._file = ""

    def generic_visit(self, node: Node, visited_children: List[Any]) -> Any:
        return visited_children

    # ─────────────────────────────────────────────────────────────
    # Unit
    # ─────────────────────────────────────────────────────────────

    def visit_unit(self, node, visited_children):
        _, path, entries = visited_children
        items: List[Item] = []
        lang_items: Dict[str, DefId] = {}
        for entry in entries:
            if isinstance(entry, Item):
                items.append(entry)
                continue
            name, def_id = entry
            if name in lang_items:
                raise DumpError(
                    f"lang item `{name}` declared twice", source=self.source
                )
            lang_items[name] = def_id
        return CompilationUnit(path=path, items=tuple(items), lang_items=lang_items)

    def visit_unit_header(self, node, visited_children):
        _, _, path, _ = visited_children
        self._file = path
        return path

    def visit_entry(self, node, visited_children):
        return visited_children[0]

    def visit_lang_decl(self, node, visited_children):
        _, _, name, _, _, _, def_id, _ = visited_children
        return (name, def_id)

    # ─────────────────────────────────────────────────────────────
    # Items
    # ─────────────────────────────────────────────────────────────

    def visit_item(self, node, visited_children):
        attributes, body = visited_children
        return body(tuple(attributes))

    def visit_item_body(self, node, visited_children):
        return visited_children[0]

    def visit_attribute(self, node, visited_children):
        _, text, _, _ = visited_children
        return Attribute.parse(text)

    def visit_attr_text(self, node, visited_children):
        return node.text

    def visit_impl_block(self, node, visited_children):
        (_, generics, _, trait_clause, self_ty, _, span,
         _, _, _, members, _, _) = visited_children
        trait_ref: Optional[TraitRef] = trait_clause[0] if trait_clause else None
        return lambda attributes: ImplBlock.new(
            self_ty=self_ty,
            span=span,
            trait_ref=trait_ref,
            members=members,
            attributes=attributes,
            generics=generics[0] if generics else "",
        )

    def visit_generics(self, node, visited_children):
        return node.text

    def visit_trait_clause(self, node, visited_children):
        path, _, _, _, def_id, _, _, _ = visited_children
        return TraitRef(path=path, def_id=def_id)

    def visit_resolution(self, node, visited_children):
        return visited_children[0]

    def visit_unresolved(self, node, visited_children):
        return None

    def visit_member(self, node, visited_children):
        attributes, _, _, name, _, signature, span, _ = visited_children
        return MemberFunction(
            name=name,
            span=span,
            signature=signature[0] if signature else "",
            attributes=tuple(attributes),
        )

    def visit_signature(self, node, visited_children):
        return node.text.strip()

    def visit_other_item(self, node, visited_children):
        kind, _, name, _, span, _ = visited_children
        return lambda attributes: Item(
            kind=kind, name=name, span=span, attributes=attributes
        )

    def visit_item_kind(self, node, visited_children):
        return ItemKind(node.text)

    # ─────────────────────────────────────────────────────────────
    # Atoms
    # ─────────────────────────────────────────────────────────────

    def visit_span(self, node, visited_children):
        _, line, _, column, _, end_line, _, end_column = visited_children
        if (end_line, end_column) < (line, column):
            raise DumpSyntaxError(
                f"span ends before it starts: {node.text}",
                source=self.source,
            )
        return SourceSpan(
            file=self._file,
            line=line,
            column=column,
            end_line=end_line,
            end_column=end_column,
        )

    def visit_def_id(self, node, visited_children):
        crate, _, index = visited_children
        return DefId(crate=crate, index=index)

    def visit_trait_path(self, node, visited_children):
        return node.text.strip()

    def visit_self_ty(self, node, visited_children):
        return node.text.strip()

    def visit_ident(self, node, visited_children):
        return node.text

    def visit_integer(self, node, visited_children):
        return int(node.text)

    def visit_string(self, node, visited_children):
        return node.text[1:-1]


# ═══════════════════════════════════════════════════════════════════
#  PART 3 — PUBLIC API
# ═══════════════════════════════════════════════════════════════════

def parse_dump(text: str, source: str = "<string>") -> CompilationUnit:
    """
    Parse an item dump into a CompilationUnit.

    Raises
    ------
    DumpSyntaxError
        If ``text`` does not match the dump grammar.
    """
    try:
        tree = DUMP_GRAMMAR.parse(text)
    except ParseError as exc:
        snippet = exc.text[exc.pos:exc.pos + 24].split("\n", 1)[0]
        rule = exc.expr.name if exc.expr is not None else None
        raise DumpSyntaxError(
            f"unexpected input {snippet!r}" if snippet else "unexpected end of dump",
            source=source,
            line=exc.line(),
            column=exc.column(),
            rule=rule or None,
        ) from exc
    unit = DumpBuilder(source).visit(tree)
    logger.debug(
        "parsed %s: %d items, %d lang items",
        source, len(unit.items), len(unit.lang_items),
    )
    return unit


def load_dump(path: Union[str, Path]) -> CompilationUnit:
    """Read and parse an item dump file."""
    p = Path(path)
    logger.info("Loading item dump: %s", p)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise DumpError(f"cannot read dump: {exc.strerror or exc}", source=str(p)) from exc
    return parse_dump(text, source=str(p))


__all__ = [
    "DUMP_GRAMMAR",
    "DumpBuilder",
    "parse_dump",
    "load_dump",
]
