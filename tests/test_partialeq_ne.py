# tests/test_partialeq_ne.py
"""
Tests for the partialeq_ne_impl lint.
"""

from dataclasses import replace

import pytest

from traitlint.checkers import (
    CheckerContext,
    CheckerRunner,
    DiagnosticSeverity,
    Level,
    LintConfig,
    LintRegistry,
)
from traitlint.dump import parse_dump
from traitlint.errors import MissingLangItemError
from traitlint.hir import Attribute, DefId, Item, ItemKind, TraitRef
from traitlint.partialeq_ne import HELP, MESSAGE, PartialEqNeImplChecker
from tests.conftest import (
    EQ_ID,
    HASH_ID,
    LOCAL_EQ_ID,
    impl,
    member,
    span,
    unit,
)


@pytest.fixture
def runner():
    return CheckerRunner(LintRegistry([PartialEqNeImplChecker.registration()]))


def lint(cu):
    """Drive one checker through its lifecycle without a runner."""
    ctx = CheckerContext(unit=cu)
    checker = PartialEqNeImplChecker()
    checker.configure(ctx)
    checker.collect_evidence(ctx)
    checker.diagnose(ctx)
    return checker.report(ctx)


class TestMetadata:

    def test_registration(self):
        reg = PartialEqNeImplChecker.registration()
        assert reg.name == "partialeq_ne_impl"
        assert reg.default_level is Level.WARN
        assert reg.description == "re-implementing `PartialEq::ne`"
        assert isinstance(reg.factory(), PartialEqNeImplChecker)
        assert "negated result" in reg.explanation


class TestTruePositives:

    def test_manual_ne_reported_once(self, manual_ne_unit):
        diags = lint(manual_ne_unit)
        assert len(diags) == 1
        diag = diags[0]
        assert diag.lint_id == "partialeq_ne_impl"
        assert diag.severity is DiagnosticSeverity.WARNING
        assert diag.message == MESSAGE
        assert diag.help == HELP

    def test_span_is_the_method_not_the_block(self, manual_ne_unit):
        block = manual_ne_unit.items[1]
        ne = block.members[1]
        (diag,) = lint(manual_ne_unit)
        assert diag.span == ne.span
        assert diag.span != block.span

    def test_alias_path_with_same_identity(self):
        cu = unit(impl(TraitRef("Eqish", EQ_ID), [member("eq", 4), member("ne", 5)]))
        assert len(lint(cu)) == 1

    def test_every_match_reported(self):
        cu = unit(impl(
            TraitRef("PartialEq", EQ_ID),
            [member("ne", 4), member("eq", 5), member("ne", 6)],
        ))
        diags = lint(cu)
        assert [d.span.line for d in diags] == [4, 6]

    def test_several_impls(self):
        cu = unit(
            impl(TraitRef("PartialEq", EQ_ID), [member("ne", 4)], self_ty="A", line=3),
            impl(TraitRef("PartialEq", EQ_ID), [member("ne", 9)], self_ty="B", line=8),
        )
        assert [d.span.line for d in lint(cu)] == [4, 9]


class TestNoFalsePositives:

    def test_derived_impl_skipped(self):
        cu = unit(impl(
            TraitRef("PartialEq", EQ_ID),
            [member("eq", 4), member("ne", 5)],
            attributes=[Attribute("automatically_derived")],
        ))
        assert lint(cu) == []

    def test_unrelated_trait_with_ne(self):
        cu = unit(
            impl(TraitRef("Hash", HASH_ID), [member("ne", 4)]),
            lang_items={"eq": EQ_ID, "hash": HASH_ID},
        )
        assert lint(cu) == []

    def test_local_trait_named_partialeq(self):
        cu = unit(impl(TraitRef("PartialEq", LOCAL_EQ_ID), [member("ne", 4)]))
        assert lint(cu) == []

    def test_eq_only(self):
        cu = unit(impl(TraitRef("PartialEq", EQ_ID), [member("eq", 4)]))
        assert lint(cu) == []

    def test_unresolved_trait(self):
        cu = unit(impl(TraitRef("PartialEq"), [member("ne", 4)]))
        assert lint(cu) == []

    def test_inherent_impl(self):
        cu = unit(impl(None, [member("ne", 4)]))
        assert lint(cu) == []

    def test_non_impl_items(self):
        cu = unit(
            Item(ItemKind.FN, "ne", span(1, 1, 1, 20)),
            Item(ItemKind.STRUCT, "Foo", span(2, 1, 2, 12)),
        )
        assert lint(cu) == []

    def test_name_must_match_exactly(self):
        cu = unit(impl(
            TraitRef("PartialEq", EQ_ID),
            [member("eq", 4), member("ne_", 5), member("Ne", 6), member("not_ne", 7)],
        ))
        assert lint(cu) == []


class TestFailureSemantics:

    def test_missing_eq_lang_item_is_fatal(self, manual_ne_unit):
        cu = unit(*manual_ne_unit.items, lang_items={"hash": HASH_ID})
        with pytest.raises(MissingLangItemError):
            lint(cu)

    def test_runner_propagates_missing_lang_item(self, runner, manual_ne_unit):
        cu = unit(*manual_ne_unit.items, lang_items={})
        with pytest.raises(MissingLangItemError):
            runner.run(cu)

    def test_idempotent(self, runner, manual_ne_unit):
        first = runner.run(manual_ne_unit).diagnostics
        second = runner.run(manual_ne_unit).diagnostics
        assert first == second
        assert [d.to_json_str() for d in first] == [d.to_json_str() for d in second]

    def test_tree_not_mutated(self, manual_ne_unit):
        before = repr(manual_ne_unit)
        lint(manual_ne_unit)
        assert repr(manual_ne_unit) == before


class TestThroughRunner:

    def test_mixed_dump(self, runner, mixed_dump):
        results = runner.run(parse_dump(mixed_dump))
        assert results.checker_names == ["partialeq_ne_impl"]
        (diag,) = results.diagnostics
        assert diag.span.file == "src/shapes.rs"
        assert (diag.span.line, diag.span.column) == (18, 5)

    def test_deny_reports_errors(self, manual_ne_unit):
        runner = CheckerRunner(
            LintRegistry([PartialEqNeImplChecker.registration()]),
            config=LintConfig.from_flags(deny=["partialeq_ne_impl"]),
        )
        results = runner.run(manual_ne_unit)
        assert results.error_count == 1
        assert results.warning_count == 0

    def test_allow_skips_the_lint(self, manual_ne_unit):
        runner = CheckerRunner(
            LintRegistry([PartialEqNeImplChecker.registration()]),
            config=LintConfig.from_flags(allow=["traitlint::partialeq_ne_impl"]),
        )
        results = runner.run(manual_ne_unit)
        assert results.total_count == 0
        assert results.checker_names == []

    def test_allow_attribute_on_member(self, runner):
        ne = replace(
            member("ne", 5),
            attributes=(Attribute("allow", ("partialeq_ne_impl",)),),
        )
        cu = unit(impl(TraitRef("PartialEq", EQ_ID), [member("eq", 4), ne]))
        assert runner.run(cu).total_count == 0

    def test_other_crate_eq_id(self, runner):
        other = DefId(2, 412)
        cu = unit(
            impl(TraitRef("PartialEq", other), [member("ne", 4)]),
            lang_items={"eq": other},
        )
        assert runner.run(cu).total_count == 1
