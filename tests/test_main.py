# tests/test_main.py
"""
End-to-end tests: item dump file → CLI → diagnostics and exit code.
"""

import json

import pytest

from traitlint import __version__
from traitlint.main import EXIT_ERROR, EXIT_INFRA, EXIT_OK, main


class TestCheckCommand:

    def test_warning_exits_zero(self, dump_file, capsys):
        assert main(["check", str(dump_file)]) == EXIT_OK
        out = capsys.readouterr().out.splitlines()
        assert out[0] == (
            "src/lib.rs:5:5: warning: re-implementing `PartialEq::ne` is "
            "unnecessary [traitlint::partialeq_ne_impl]"
        )
        assert out[1].startswith("src/lib.rs:5:5: note: the default implementation")

    def test_deny_exits_one(self, dump_file, capsys):
        assert main(["check", str(dump_file), "-D", "partialeq_ne_impl"]) == EXIT_ERROR
        assert ": error: " in capsys.readouterr().out

    def test_allow_silences(self, dump_file, capsys):
        assert main(["check", str(dump_file), "-A", "partialeq_ne_impl"]) == EXIT_OK
        assert capsys.readouterr().out == ""

    def test_suppress(self, dump_file, capsys):
        code = main(["check", str(dump_file), "-D", "partialeq_ne_impl",
                     "--suppress", "traitlint::partialeq_ne_impl"])
        assert code == EXIT_OK
        assert capsys.readouterr().out == ""

    def test_json_format(self, dump_file, capsys):
        main(["check", str(dump_file), "--format", "json"])
        (line,) = capsys.readouterr().out.splitlines()
        data = json.loads(line)
        assert data["lint"] == "traitlint::partialeq_ne_impl"
        assert (data["line"], data["column"], data["endColumn"]) == (5, 5, 44)

    def test_summary_format(self, dump_file, capsys):
        main(["check", str(dump_file), "-f", "summary"])
        out = capsys.readouterr().out
        assert "Lint run complete: 1 diagnostics (0 errors, 1 warnings)" in out

    def test_output_file(self, dump_file, tmp_path, capsys):
        dest = tmp_path / "out" / "report.txt"
        main(["check", str(dump_file), "-o", str(dest)])
        assert capsys.readouterr().out == ""
        assert "partialeq_ne_impl" in dest.read_text(encoding="utf-8")

    def test_several_dumps(self, dump_file, tmp_path, mixed_dump, capsys):
        other = tmp_path / "shapes.items"
        other.write_text(mixed_dump, encoding="utf-8")
        main(["check", str(dump_file), str(other), "-f", "json"])
        files = [json.loads(line)["file"] for line in capsys.readouterr().out.splitlines()]
        assert files == ["src/lib.rs", "src/shapes.rs"]


class TestInfrastructureFailures:

    def test_missing_dump(self, tmp_path, capsys):
        assert main(["check", str(tmp_path / "nope.items")]) == EXIT_INFRA
        assert "cannot read dump" in capsys.readouterr().err

    def test_bad_dump(self, tmp_path, capsys):
        path = tmp_path / "bad.items"
        path.write_text('unit "a.rs"\nbogus\n', encoding="utf-8")
        assert main(["check", str(path)]) == EXIT_INFRA
        assert "bad.items:2:1" in capsys.readouterr().err

    def test_missing_lang_item(self, tmp_path, capsys):
        path = tmp_path / "nolang.items"
        path.write_text('unit "a.rs"\nstruct Foo @1:1-1:12\n', encoding="utf-8")
        assert main(["check", str(path)]) == EXIT_INFRA
        assert "lang item `eq` is not registered" in capsys.readouterr().err

    def test_no_command(self, capsys):
        assert main([]) == EXIT_INFRA


class TestLintsCommand:

    def test_lists_builtin_lints(self, capsys):
        assert main(["lints"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "partialeq_ne_impl" in out
        assert "warn" in out
        assert "1 lint(s) available." in out

    def test_explain(self, capsys):
        main(["lints", "--explain"])
        assert "negated result" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(["--version"])
        assert info.value.code == 0
        assert __version__ in capsys.readouterr().out
