"""
B+ CLI Entrypoint.

This module provides the command-line interface for compiling B+ programs to C.

Features:
    - Read source from `.bp` files or inline strings.
    - Lex, parse, and generate C, or stop early to dump tokens or the AST.
    - Output to console or file.
    - Optionally build the generated C with the system C compiler and run it.

Example usage:
    bplus hello.bp
    bplus -s "print 123" -e
    bplus hello.bp -o hello.c
    bplus hello.bp --emit ast --verbose

Functions:
    run_bplus(...) -> int:
        Executes the B+ pipeline (lex → parse → generate → output/exec).

    main() -> None:
        Parses CLI arguments and exits with the status of `run_bplus`.
"""

import argparse
import json
import logging
import os
import subprocess
import sys
import tempfile
from pathlib import Path

from bplus.bplus_compiler import CompilerConfig, compile_source
from bplus.bplus_errors import CompileError, ParseError, format_error_report
from bplus.bplus_lexer import lex
from bplus.bplus_parser import parse

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )


def build_and_run(code: str, cc: str) -> int:
    """
    Compiles C source with `cc`, runs the binary, and prints its output.

    Returns:
        int: The program's exit status, or 1 if the C compiler failed.
    """
    with tempfile.TemporaryDirectory(prefix="bplus-") as tmp:
        c_path = Path(tmp) / "out.c"
        exe_path = Path(tmp) / "out"
        c_path.write_text(code, encoding="utf-8")

        logger.debug("Running %s on %s", cc, c_path)
        build = subprocess.run(
            [cc, "-o", str(exe_path), str(c_path)],
            capture_output=True,
            text=True,
        )
        if build.returncode != 0:
            print(build.stderr.rstrip(), file=sys.stderr)
            print(f"C compiler '{cc}' failed", file=sys.stderr)
            return 1

        run = subprocess.run([str(exe_path)], capture_output=True, text=True)
        print(run.stdout, end="")
        if run.stderr:
            print(run.stderr, end="", file=sys.stderr)
        return run.returncode


def run_bplus(
    source: str,
    is_string: bool = False,
    out: str | None = None,
    execute: bool = False,
    emit: str = "c",
    verbose: bool = False,
    cc: str | None = None,
) -> int:
    """
    Run the B+ toolchain: lex, parse, generate, and optionally write or execute.

    Args:
        source (str): The B+ source code or path to a `.bp` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        out (str | None): Optional path to write the output. If None, prints to stdout.
        execute (bool): If True, builds the generated C and runs it.
        emit (str): What to produce: "c", "tokens", or "ast". Defaults to "c".
        verbose (bool): Trace compiler stages through logging.
        cc (str | None): C compiler command. Defaults to `$CC`, then `cc`.

    Returns:
        int: Process exit status (0 on success).

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.bp'.
    """
    if not is_string and not source.endswith(".bp"):
        raise ValueError("Only .bp files are supported.")
    # 1. Read source
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()
    source = source.replace("\r\n", "\n")

    # 2. Compile, or stop after an earlier stage
    try:
        if emit == "tokens":
            result = "\n".join(repr(tok) for tok in lex(source))
        elif emit == "ast":
            result = json.dumps(parse(lex(source)).to_dict(), indent=2)
        else:
            result = compile_source(source, CompilerConfig(verbose=verbose))
    except CompileError as err:
        print(err.report, file=sys.stderr)
        return 1
    except ParseError as err:
        print(format_error_report(source, err.token, err.message), file=sys.stderr)
        return 1

    # 3. Output result
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(result)
    elif not execute:
        print(result)

    # 4. Optional execution
    if execute and emit == "c":
        return build_and_run(result, cc or os.environ.get("CC", "cc"))
    if execute:
        print(f"Execution not supported for --emit {emit}", file=sys.stderr)
        return 1
    return 0


def main() -> None:
    """
    Entry point for the B+ CLI.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `-o`, `--out`: Write output to a file.
        - `-e`, `--exec`: Build the generated C and run it.
        - `--emit`: Produce "c" (default), "tokens", or "ast".
        - `--cc`: C compiler used by `--exec`.
        - `--verbose`: Trace compiler stages.
    """
    parser = argparse.ArgumentParser(prog="bplus")
    parser.add_argument("source", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "-e",
        "--exec",
        dest="execute",
        action="store_true",
        help="Build the generated C and run it",
    )
    parser.add_argument(
        "--emit",
        choices=("c", "tokens", "ast"),
        default="c",
        help="Output to produce (default: c)",
    )
    parser.add_argument("--cc", help="C compiler for --exec (default: $CC or cc)")
    parser.add_argument("--verbose", action="store_true", help="Trace compiler stages")

    args = parser.parse_args()
    setup_logging(args.verbose)

    try:
        status = run_bplus(
            source=args.source,
            is_string=args.string,
            out=args.out,
            execute=args.execute,
            emit=args.emit,
            verbose=args.verbose,
            cc=args.cc,
        )
    except (ValueError, OSError) as err:
        print(f"bplus: {err}", file=sys.stderr)
        status = 1
    sys.exit(status)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
