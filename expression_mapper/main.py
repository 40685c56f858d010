"""
Command-line entrypoint.

This script:
- Parses one expression, or every expression of a file, in a numeric system
- Evaluates it over an interval of that numeric system
- Prints the values, or writes them next to the input file

Examples:
    expression-mapper "sin ( x ) ^ 2" --start 0 --end 3 --step 0.5
    expression-mapper "exp ( i * x )" --group complex --start 0_0 --end 1_1 --step 0.5
    expression-mapper --file resources/expressions.zip --start 1 --end 10
"""

import argparse
from pathlib import Path
import sys
from typing import Any, List, Optional

from pydantic import BaseModel, Field, FilePath, ValidationError, field_validator, model_validator

from expression_mapper.common.errors import DomainEvaluationError, ExpressionError
from expression_mapper.common.interval import Interval
from expression_mapper.common.logger import logger
from expression_mapper.common.sources import ExpressionSource
from expression_mapper.groups.registry import available_groups, build_interval, get_group
from expression_mapper.mapper import ExpressionMapper
from expression_mapper.sampler.config import SamplerConfig


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    expression : str, optional
        Expression to evaluate.
    file_path : FilePath, optional
        Path to a file (or archive) with one expression per line.
    """

    expression: Optional[str] = None
    file_path: Optional[FilePath] = None
    variable: str = "x"
    group: str = "real"
    start: str
    end: str
    step: str = "1"
    workers: int = Field(default=1, ge=1)

    @field_validator("group")
    def group_must_be_registered(cls, v: str) -> str:
        get_group(v)
        return v

    @model_validator(mode="after")
    def one_input(self) -> "CliArgs":
        """Exactly one of an expression or a file must be given."""
        if (self.expression is None) == (self.file_path is None):
            raise ValueError("Give either an expression or --file, not both")
        return self


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param list argv: Arguments, defaults to sys.argv[1:]

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = argparse.ArgumentParser(
        description="Evaluate an expression of one variable over an interval"
    )

    parser.add_argument("expression", nargs="?", help="Expression to evaluate, e.g. 'x ^ 2 - 1'")
    parser.add_argument("--file", dest="file_path", help="File or archive with one expression per line")
    parser.add_argument("--variable", default="x", help="Name of the free variable")
    parser.add_argument("--group", default="real", help=f"Numeric system, one of {available_groups()}")
    parser.add_argument("--start", required=True, help="First value of the interval")
    parser.add_argument("--end", help="Last value of the interval, defaults to start")
    parser.add_argument("--step", default="1", help="Distance between two values")
    parser.add_argument("--workers", type=int, default=1, help="Number of worker processes")

    args = parser.parse_args(argv)

    try:
        return CliArgs(
            expression=args.expression,
            file_path=args.file_path,
            variable=args.variable,
            group=args.group,
            start=args.start,
            end=args.end if args.end is not None else args.start,
            step=args.step,
            workers=args.workers,
        )
    except ValidationError as exc:
        parser.error(str(exc))


def build_output_path(input_path: Path) -> Path:
    """
    Construct a safe output file path based on the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/expressions.7z
    output: resources/expressions_7z_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    suffix_safe = "_".join(input_path.suffixes).replace(".", "_")
    stem = input_path.name[: len(input_path.name) - len("".join(input_path.suffixes))]
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def evaluate_file(mapper: ExpressionMapper, source: ExpressionSource, interval: Interval, output_file: Path) -> None:
    """
    Evaluate every expression of a source and write one line per expression.

    Failing expressions are reported on their line and do not stop the others.
    """
    expressions: List[str] = source.read_expressions()
    logger.info(f"📄 {len(expressions)} expression(s) read from {source.path}")

    with output_file.open("w", encoding="utf-8") as f_out:
        for expr in expressions:
            try:
                values: List[Any] = mapper.map_values(expr, interval)
                f_out.write(f"{expr} = {values}\n")
            except ExpressionError as exc:
                f_out.write(f"{expr} -> ERROR: {' '.join(str(exc).split())}\n")
            f_out.flush()

    logger.info(f"✉️ Results written to {output_file}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function executed by the console script.

    :return: Process exit code
    :rtype: int
    """
    cli_args = parse_args(argv)

    try:
        interval: Interval = build_interval(cli_args.group, cli_args.start, cli_args.step, cli_args.end)
    except ValueError as exc:
        logger.error(f"📏❌ Invalid interval: {exc}")
        return 2

    mapper = ExpressionMapper(
        group=get_group(cli_args.group),
        variable=cli_args.variable,
        config=SamplerConfig(max_workers=cli_args.workers),
    )

    if cli_args.file_path is not None:
        input_path = Path(cli_args.file_path)
        try:
            evaluate_file(mapper, ExpressionSource(path=input_path), interval, build_output_path(input_path))
        except ValueError as exc:
            logger.error(f"📄❌ {exc}")
            return 1
        return 0

    try:
        values: List[Any] = mapper.map_values(cli_args.expression, interval)
    except DomainEvaluationError as exc:
        for point, value in zip(interval.points(), exc.partial_results):
            print(f"{point} -> {value}")
        logger.error(f"❌ {exc}")
        return 1
    except ExpressionError as exc:
        logger.error(f"❌ {exc}")
        return 1

    for point, value in zip(interval.points(), values):
        print(f"{point} -> {value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
