import json
import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from bplus import bplus_cli

C_COMPILER = shutil.which("cc") or shutil.which("gcc") or shutil.which("clang")
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
SOURCE = "let x = 5\nprint x"


def test_run_bplus_string_input_prints(capsys: pytest.CaptureFixture[str]) -> None:
    assert bplus_cli.run_bplus(source=SOURCE, is_string=True) == 0
    out = capsys.readouterr().out
    assert "int x;" in out
    assert 'printf("%i\\n", x);' in out


def test_run_bplus_file_input(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    file_path = tmp_path / "input.bp"
    file_path.write_text(SOURCE)
    assert bplus_cli.run_bplus(source=str(file_path)) == 0
    assert "x = 5;" in capsys.readouterr().out


def test_run_bplus_rejects_other_extensions() -> None:
    with pytest.raises(ValueError, match=r"Only \.bp files"):
        bplus_cli.run_bplus(source="program.txt")


def test_run_bplus_output_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    output_path = tmp_path / "out.c"
    assert bplus_cli.run_bplus(source=SOURCE, is_string=True, out=str(output_path)) == 0
    assert output_path.read_text().startswith("#include <stdio.h>")
    assert capsys.readouterr().out == ""


def test_run_bplus_reports_compile_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert bplus_cli.run_bplus(source="print y", is_string=True) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Error on line 1:" in captured.err
    assert "The identifier 'y' is not defined." in captured.err


def test_emit_tokens(capsys: pytest.CaptureFixture[str]) -> None:
    assert bplus_cli.run_bplus(source="print 1", is_string=True, emit="tokens") == 0
    assert capsys.readouterr().out.splitlines() == [
        "Token(START, 'start', line=1)",
        "Token(PRINT, 'print', line=1)",
        "Token(NUMBER, '1', line=1)",
        "Token(END, 'end', line=1)",
    ]


def test_emit_ast(capsys: pytest.CaptureFixture[str]) -> None:
    assert bplus_cli.run_bplus(source="print 1", is_string=True, emit="ast") == 0
    assert json.loads(capsys.readouterr().out) == {
        "kind": "program",
        "statements": [{"kind": "print", "child": {"kind": "number", "symbol": "1"}}],
    }


def test_emit_ast_reports_parse_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert bplus_cli.run_bplus(source="print (1", is_string=True, emit="ast") == 1
    assert "Unmatched '(', expected ')'" in capsys.readouterr().err


def test_emit_ast_error_report_on_crlf_source(capsys: pytest.CaptureFixture[str]) -> None:
    source = "let x = 1\r\nlet x = 2\r\nprint x"
    assert bplus_cli.run_bplus(source=source, is_string=True, emit="ast") == 1
    err = capsys.readouterr().err
    assert "\r" not in err
    assert "   --->   let x = 2\n" in err


def test_exec_requires_c_output(capsys: pytest.CaptureFixture[str]) -> None:
    status = bplus_cli.run_bplus(
        source="print 1", is_string=True, emit="tokens", execute=True
    )
    assert status == 1
    assert "Execution not supported for --emit tokens" in capsys.readouterr().err


def test_exec_uses_given_compiler(capsys: pytest.CaptureFixture[str]) -> None:
    calls: list[list[str]] = []

    def fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        calls.append(cmd)
        if len(cmd) > 1:
            return subprocess.CompletedProcess(cmd, 0, "", "")
        return subprocess.CompletedProcess(cmd, 0, "5\n", "")

    with patch("bplus.bplus_cli.subprocess.run", side_effect=fake_run):
        status = bplus_cli.run_bplus(
            source=SOURCE, is_string=True, execute=True, cc="mycc"
        )
    assert status == 0
    assert calls[0][0] == "mycc"
    assert calls[0][1] == "-o"
    assert calls[0][3].endswith("out.c")
    assert capsys.readouterr().out == "5\n"


def test_exec_reports_c_compiler_failure(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv("CC", raising=False)
    failed = subprocess.CompletedProcess(["cc"], 1, "", "out.c: error: bad")
    with patch("bplus.bplus_cli.subprocess.run", return_value=failed):
        status = bplus_cli.run_bplus(source=SOURCE, is_string=True, execute=True)
    assert status == 1
    err = capsys.readouterr().err
    assert "out.c: error: bad" in err
    assert "C compiler 'cc' failed" in err


def test_exec_defaults_to_cc_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CC", "envcc")
    seen: list[str] = []

    def fake_build_and_run(code: str, cc: str) -> int:
        seen.append(cc)
        return 0

    monkeypatch.setattr(bplus_cli, "build_and_run", fake_build_and_run)
    assert bplus_cli.run_bplus(source=SOURCE, is_string=True, execute=True) == 0
    assert seen == ["envcc"]


@pytest.mark.skipif(C_COMPILER is None, reason="no C compiler available")
def test_exec_runs_program(capsys: pytest.CaptureFixture[str]) -> None:
    status = bplus_cli.run_bplus(
        source="for i = 0..3 { print i * 10 }", is_string=True, execute=True, cc=C_COMPILER
    )
    assert status == 0
    assert capsys.readouterr().out == "0\n10\n20\n"


def test_main_exit_status(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(sys, "argv", ["bplus", "-s", "print 1"])
    with pytest.raises(SystemExit) as excinfo:
        bplus_cli.main()
    assert excinfo.value.code == 0
    assert "printf" in capsys.readouterr().out


def test_main_compile_error_exit_status(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "argv", ["bplus", "-s", "let let"])
    with pytest.raises(SystemExit) as excinfo:
        bplus_cli.main()
    assert excinfo.value.code == 1


def test_main_bad_extension(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(sys, "argv", ["bplus", "notes.txt"])
    with pytest.raises(SystemExit) as excinfo:
        bplus_cli.main()
    assert excinfo.value.code == 1
    assert "bplus: Only .bp files are supported." in capsys.readouterr().err


def test_main_missing_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(sys, "argv", ["bplus", str(tmp_path / "missing.bp")])
    with pytest.raises(SystemExit) as excinfo:
        bplus_cli.main()
    assert excinfo.value.code == 1


def test_main_verbose_logs(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[bool] = []
    monkeypatch.setattr(bplus_cli, "setup_logging", calls.append)
    monkeypatch.setattr(sys, "argv", ["bplus", "-s", "print 1", "--verbose"])
    with pytest.raises(SystemExit):
        bplus_cli.main()
    assert calls == [True]


def test_cli_as_module() -> None:
    env = {**os.environ, "PYTHONPATH": str(SRC_DIR)}
    result = subprocess.run(
        [sys.executable, "-m", "bplus.bplus_cli", "-s", SOURCE],
        capture_output=True,
        text=True,
        env=env,
    )
    assert result.returncode == 0
    assert "x = 5;" in result.stdout
