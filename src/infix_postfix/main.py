"""
Command-line front-end for the infix to postfix calculator.

Modes:
- One-shot: convert and evaluate an expression given on the command line
- Batch: evaluate every line of a file (or archive) in worker processes
- Console: prompt for an expression, then for variable values
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from pydantic import BaseModel, Field, FilePath, ValidationError

from infix_postfix.batch.runner import BatchRunner, build_output_path
from infix_postfix.common.bindings import parse_binding_args, parse_bindings
from infix_postfix.common.errors import ExpressionError
from infix_postfix.common.evaluator import PostfixEvaluator
from infix_postfix.common.logger import configure_logging, logger
from infix_postfix.common.parser import ExpressionParser


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    expression : str, optional
        Infix expression for one-shot mode.
    bindings : list of str
        Binding words ("A=2" or "A 2") for one-shot mode.
    file_path : FilePath, optional
        File containing expression lines for batch mode.
    output : Path, optional
        Results file for batch mode.
    workers : int, optional
        Maximum number of worker processes in batch mode.
    log_level : str
        Logging level name.
    """

    expression: Optional[str] = None
    bindings: List[str] = Field(default_factory=list)
    file_path: Optional[FilePath] = None
    output: Optional[Path] = None
    workers: Optional[int] = Field(default=None, ge=1)
    log_level: str = "WARNING"


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param argv: Arguments to parse, defaults to sys.argv[1:]
    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = argparse.ArgumentParser(
        prog="infix-postfix",
        description="Convert infix expressions to postfix and evaluate them",
    )
    parser.add_argument("expression", nargs="?", help="Infix expression, e.g. \"A+B*C\"")
    parser.add_argument("bindings", nargs="*", help="Variable values, e.g. A=2 B=3 or A 2 B 3")
    parser.add_argument("-f", "--file", dest="file_path", help="File of expression lines to evaluate")
    parser.add_argument("-o", "--output", help="Results file for --file (default: next to the input)")
    parser.add_argument("-w", "--workers", type=int, help="Maximum number of worker processes")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    args = parser.parse_args(argv)

    if args.file_path and args.expression:
        parser.error("an expression cannot be combined with --file")

    try:
        return CliArgs(
            expression=args.expression,
            bindings=args.bindings,
            file_path=args.file_path,
            output=args.output,
            workers=args.workers,
            log_level=args.log_level,
        )
    except ValidationError as exc:
        parser.error(str(exc))


def run_expression(expression: str, bindings: List[str], out: Optional[TextIO] = None) -> int:
    """
    Convert and evaluate one expression, printing its postfix form and result.

    :param str expression: Infix expression
    :param list bindings: Binding words
    :param out: Stream to print to, defaults to sys.stdout
    :return: Exit status, 0 on success and 1 on an expression error
    """
    out = out or sys.stdout
    try:
        values = parse_binding_args(bindings)
        postfix = ExpressionParser.to_postfix(expression)
        print(f"Postfix: {ExpressionParser.format_postfix(postfix)}", file=out)
        result = PostfixEvaluator.evaluate(postfix, values)
    except ExpressionError as exc:
        logger.debug("Expression %r failed: %s", expression, exc)
        print(f"Error: {exc}", file=out)
        return 1
    print(f"Result: {result}", file=out)
    return 0


def run_console(stdin: Optional[TextIO] = None, out: Optional[TextIO] = None) -> int:
    """
    Interactive console mode.

    Prompts for an infix expression, prints its postfix form, then prompts
    for variable values such as "A 2 B 3 C 4" and prints the result.

    :param stdin: Stream to read from, defaults to sys.stdin
    :param out: Stream to print to, defaults to sys.stdout
    :return: Exit status, 0 on success and 1 on an expression error
    """
    stdin = stdin or sys.stdin
    out = out or sys.stdout
    print("Enter the infix expression:", file=out)
    expression = stdin.readline().strip()

    try:
        postfix = ExpressionParser.to_postfix(expression)
    except ExpressionError as exc:
        print(f"Error: {exc}", file=out)
        return 1
    print(f"Postfix: {ExpressionParser.format_postfix(postfix)}", file=out)

    print("Enter values for variables (e.g. A 2 B 3 C 4):", file=out)
    try:
        values = parse_bindings(stdin.readline())
        result = PostfixEvaluator.evaluate(postfix, values)
    except ExpressionError as exc:
        print(f"Error: {exc}", file=out)
        return 1
    print(f"Result: {result}", file=out)
    return 0


def run_batch(file_path: Path, output: Optional[Path] = None, workers: Optional[int] = None) -> int:
    """
    Evaluate every line of a file and write results next to it.

    :param file_path: Input file or archive
    :param output: Results file, defaults to build_output_path(file_path)
    :param workers: Maximum number of worker processes
    :return: Exit status, 0 if every line evaluated and 1 otherwise
    """
    output_path = output or build_output_path(file_path)
    runner = BatchRunner(output_file=output_path, max_workers=workers)
    try:
        failures = runner.run(file_path)
    except ValueError as exc:
        logger.error(f"📄❌ Could not read {file_path}: {exc}")
        return 1
    print(f"Results written to {output_path}")
    return 1 if failures else 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entrypoint of the infix-postfix command.
    """
    cli_args = parse_args(argv)
    configure_logging(cli_args.log_level)

    if cli_args.file_path is not None:
        return run_batch(Path(cli_args.file_path), cli_args.output, cli_args.workers)
    if cli_args.expression is not None:
        return run_expression(cli_args.expression, cli_args.bindings)
    return run_console()


if __name__ == "__main__":
    sys.exit(main())
