import os
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

C_COMPILER = (
    shutil.which(os.environ.get("CC", "cc"))
    or shutil.which("gcc")
    or shutil.which("clang")
)


@pytest.fixture
def run_c(tmp_path: Path) -> Callable[..., str]:
    """Builds C source with the system compiler and returns the program's stdout."""
    if C_COMPILER is None:
        pytest.skip("no C compiler available")
    compiler: str = C_COMPILER

    def run(code: str, stdin: str = "") -> str:
        c_file = tmp_path / "prog.c"
        exe = tmp_path / "prog"
        c_file.write_text(code, encoding="utf-8")
        subprocess.run(
            [compiler, "-o", str(exe), str(c_file)], check=True, capture_output=True
        )
        result = subprocess.run(
            [str(exe)], input=stdin, capture_output=True, text=True, check=True
        )
        return result.stdout

    return run


@pytest.fixture
def check_c() -> Callable[[str], None]:
    """Type-checks C source with the system compiler without building it."""
    if C_COMPILER is None:
        pytest.skip("no C compiler available")
    compiler: str = C_COMPILER

    def check(code: str) -> None:
        result = subprocess.run(
            [compiler, "-fsyntax-only", "-x", "c", "-"],
            input=code,
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0, f"{result.stderr}\n{code}"

    return check
