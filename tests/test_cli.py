from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest

from tinymake.cli import main
from tinymake.contracts import OUTPUT_SCHEMA, load_schema
from tinymake.exit_codes import ERR_BUILD, ERR_IO, ERR_PARSE, ERR_RESOLVE, ERR_USAGE, OK

from helpers import set_mtime

RULES = "app: lib main.c\n\ttouch app\nlib: util.c\n\ttouch lib\n"


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write(root: Path, text: str = RULES, name: str = "Tinymakefile") -> Path:
    path = root / name
    path.write_text(text, encoding="utf-8")
    return path


def _json(out: str) -> dict[str, object]:
    payload = json.loads(out)
    jsonschema.validate(payload, load_schema(OUTPUT_SCHEMA))
    return payload


def test_list_rules_text(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(workdir)
    assert main(["--list-rules"]) == OK
    assert capsys.readouterr().out.splitlines() == [
        "rule: app",
        "  dependency: lib",
        "  dependency: main.c",
        "  command: touch app",
        "rule: lib",
        "  dependency: util.c",
        "  command: touch lib",
    ]


def test_list_rules_json(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(workdir)
    assert main(["--list-rules", "--json"]) == OK
    payload = _json(capsys.readouterr().out)
    assert payload["status"] == "ok"
    assert payload["rules"][1] == {
        "target": "lib",
        "line": 3,
        "dependencies": ["util.c"],
        "commands": ["touch lib"],
    }


def test_print_chain(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(workdir)
    assert main(["--print-chain"]) == OK
    assert capsys.readouterr().out.splitlines() == ["node: app", "node: lib", "node: main.c", "node: util.c"]

    assert main(["--print-chain", "--json", "lib"]) == OK
    assert _json(capsys.readouterr().out)["chain"] == ["lib", "util.c"]


def test_up_to_date_target_reports_nothing_to_do(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(workdir, "out: in\n\ttouch out\n")
    for name, when in (("in", 1_000), ("out", 2_000)):
        (workdir / name).write_text("", encoding="utf-8")
        set_mtime(workdir / name, when)
    assert main([]) == OK
    assert capsys.readouterr().out == 'tinymake: "out" is up to date.\n'


@pytest.mark.integration
def test_build_echoes_commands(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(workdir)
    (workdir / "main.c").write_text("", encoding="utf-8")
    (workdir / "util.c").write_text("", encoding="utf-8")
    assert main(["app"]) == OK
    assert capsys.readouterr().out.splitlines() == ["touch lib", "touch app"]
    assert (workdir / "app").exists()


@pytest.mark.integration
def test_build_json_report(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(workdir)
    (workdir / "main.c").write_text("", encoding="utf-8")
    (workdir / "util.c").write_text("", encoding="utf-8")
    assert main(["--json"]) == OK
    build = _json(capsys.readouterr().out)["build"]
    assert build == {
        "target": "app",
        "up_to_date": False,
        "commands": ["touch lib", "touch app"],
        "rebuilt": ["lib", "app"],
    }


@pytest.mark.integration
def test_json_build_keeps_command_output_off_stdout(workdir: Path, capfd: pytest.CaptureFixture[str]) -> None:
    _write(workdir, "out:\n\techo hello\n\ttouch out\n")
    assert main(["--json"]) == OK
    captured = capfd.readouterr()
    assert _json(captured.out)["build"]["commands"] == ["echo hello", "touch out"]
    assert "hello" in captured.err


@pytest.mark.integration
def test_undecodable_command_bytes_are_echoed_escaped(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (workdir / "Tinymakefile").write_bytes(b"out:\n\ttrue \xff\n\ttouch out\n")
    assert main([]) == OK
    assert capsys.readouterr().out == "true \\xff\ntouch out\n"
    assert (workdir / "out").exists()


def test_undecodable_name_in_error_message(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (workdir / "Tinymakefile").write_bytes(b"out: \xff\n\ttouch out\n")
    assert main([]) == ERR_BUILD
    assert capsys.readouterr().out == 'ERROR: no rule to make "\\xff"\n'


def test_parse_error_exit_code(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(workdir, "app lib\n")
    assert main(["--list-rules"]) == ERR_PARSE
    assert capsys.readouterr().out.startswith("ERROR: Tinymakefile:1:5: expected colon, got word: \"lib\"")


def test_missing_rule_file(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == ERR_IO
    assert "No such file or directory" in capsys.readouterr().out


def test_cycle_error_exit_code(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(workdir, "a: b\n\ttouch a\nb: a\n\ttouch b\n")
    assert main(["--print-chain"]) == ERR_RESOLVE
    assert capsys.readouterr().out == "ERROR: circular dependency: a -> b -> a\n"


def test_json_error_payload(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(workdir, "a: b\n\ttouch a\nb: a\n\ttouch b\n")
    assert main(["--json"]) == ERR_RESOLVE
    payload = _json(capsys.readouterr().out)
    assert payload["status"] == "error"
    assert payload["errors"] == [
        {"code": ERR_RESOLVE, "kind": "cycle_error", "message": "circular dependency: a -> b -> a"}
    ]


def test_file_option_and_cwd(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    project = workdir / "project"
    project.mkdir()
    _write(project, "custom:\n\ttouch custom\n", name="rules.mk")
    assert main(["--cwd", str(project), "-f", "rules.mk", "--list-rules"]) == OK
    assert capsys.readouterr().out.splitlines() == ["rule: custom", "  command: touch custom"]


def test_conflicting_flags_are_a_usage_error(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--verbose", "--quiet"])
    assert exc.value.code == ERR_USAGE
    assert "not allowed with" in capsys.readouterr().err
