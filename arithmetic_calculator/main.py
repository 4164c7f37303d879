"""
Command-line entrypoint.

Two modes:
- ``repl`` (default): type expressions, see results, browse the session history
- ``run FILE``: evaluate every line of an operations file or archive with
  worker processes and write the outcomes next to the input
"""
import argparse
from pathlib import Path
from typing import Callable, List, Optional

from pydantic import BaseModel, FilePath, ValidationError

from arithmetic_calculator.batch.runner import BatchRunner
from arithmetic_calculator.common.config import CalculatorSettings
from arithmetic_calculator.common.logger import set_level
from arithmetic_calculator.common.operations import describe
from arithmetic_calculator.session.session import CalculatorSession


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    command : str
        Either "repl" or "run".
    file_path : FilePath, optional
        Path to the file containing arithmetic operations (run mode only).
    settings : CalculatorSettings
        Worker count and log level.
    """

    command: str = "repl"
    file_path: Optional[FilePath] = None
    settings: CalculatorSettings = CalculatorSettings()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arithmetic-calculator",
        description="Evaluate arithmetic expressions (+ - * / % and parentheses)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("repl", help="Interactive calculator (default)")

    run_parser = subparsers.add_parser("run", help="Evaluate an operations file or archive")
    run_parser.add_argument("file_path", help="Path to the file containing arithmetic operations")
    run_parser.add_argument("-w", "--workers", type=int, default=None, help="Maximum concurrent worker processes")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param argv: Arguments to parse, defaults to sys.argv[1:]

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    settings_fields: dict = {"log_level": "DEBUG" if args.verbose else "INFO"}
    if getattr(args, "workers", None) is not None:
        settings_fields["max_workers"] = args.workers

    try:
        return CliArgs(
            command=args.command or "repl",
            file_path=getattr(args, "file_path", None),
            settings=CalculatorSettings(**settings_fields),
        )
    except ValidationError as exc:
        parser.error(str(exc))


def build_output_path(input_path: Path) -> Path:
    """
    Construct the results file path based on the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/operations.7z
    output: resources/operations_7z_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    # "ops.tar.xz" has stem "ops.tar"; strip every suffix first
    stem = input_path.name[: -len("".join(input_path.suffixes))] if input_path.suffixes else input_path.name
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def repl(
    session: Optional[CalculatorSession] = None,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> CalculatorSession:
    """
    Run the interactive loop until "quit" or end of input.

    Commands: ``quit``, ``history``, ``clear`` (clears the history). Any other
    line replaces the current expression and is evaluated.

    :return: The session, with its history
    :rtype: CalculatorSession
    """
    session = session if session is not None else CalculatorSession()
    write("Arithmetic calculator. Type 'quit' to exit, 'history' to view history, 'clear' to clear history.")

    while True:
        try:
            line = read(">>> ").strip()
        except EOFError:
            break

        if not line:
            continue
        if line.lower() == "quit":
            break
        if line.lower() == "history":
            for entry in session.history:
                write(f"{entry.expression} = {describe(entry.outcome)}")
            continue
        if line.lower() == "clear":
            session.clear_history()
            write("History cleared.")
            continue

        session.clear()
        session.append(line)
        outcome = session.submit()
        if outcome is None:
            continue
        write(describe(outcome) if outcome.ok else f"Error: {outcome.message}")

    return session


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main function executed by the console script.
    """
    cli_args = parse_args(argv)
    set_level(cli_args.settings.log_level)

    if cli_args.command == "run":
        input_path: Path = Path(cli_args.file_path)
        output_path: Path = build_output_path(input_path)
        runner = BatchRunner(output_file=output_path, max_workers=cli_args.settings.max_workers)
        try:
            count = runner.run(input_path)
        except ValueError as exc:
            build_parser().error(str(exc))
        print(f"{count} expressions evaluated, results in {output_path}")
        return

    repl()


if __name__ == "__main__":
    main()
