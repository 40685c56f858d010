"""Test the command-line entrypoint."""
from pathlib import Path

import pytest

from expression_mapper.main import build_output_path, main, parse_args


def test_build_output_path() -> None:
    """Extensions are folded into the result file name."""
    assert build_output_path(Path("resources/ops.7z")) == Path("resources/ops_7z_results.txt")
    assert build_output_path(Path("resources/ops.tar.xz")) == Path("resources/ops_tar_xz_results.txt")
    assert build_output_path(Path("ops.txt")) == Path("ops_txt_results.txt")


def test_parse_args_defaults() -> None:
    """The end defaults to the start and the group to the reals."""
    args = parse_args(["x + 1", "--start", "2"])
    assert args.expression == "x + 1"
    assert args.group == "real"
    assert args.variable == "x"
    assert args.end == "2"
    assert args.workers == 1


@pytest.mark.parametrize("argv", [
    ["--start", "0"],                                   # No expression nor file
    ["x", "--start", "0", "--group", "quaternion"],     # Unknown numeric system
    ["x", "--start", "0", "--workers", "0"],            # No worker
])
def test_parse_args_invalid(argv) -> None:
    """Invalid arguments stop the parser."""
    with pytest.raises(SystemExit):
        parse_args(argv)


def test_main_prints_values(capsys) -> None:
    """Each point is printed with its value."""
    assert main(["x * 2", "--start", "1", "--end", "3"]) == 0
    assert capsys.readouterr().out == "1.0 -> 2.0\n2.0 -> 4.0\n3.0 -> 6.0\n"


def test_main_complex(capsys) -> None:
    """Complex intervals are built from complex literals."""
    assert main(["z + 2_3", "--group", "complex", "--variable", "z", "--start", "5_4"]) == 0
    assert capsys.readouterr().out == "(5+4j) -> (7+7j)\n"


def test_main_reports_failures(capsys) -> None:
    """Values before a failing point are printed, then the exit code signals the error."""
    assert main(["1 / x", "--start", "-1", "--end", "1"]) == 1
    assert capsys.readouterr().out == "-1.0 -> -1.0\n"
    assert main(["x +", "--start", "0"]) == 1


def test_main_invalid_interval() -> None:
    """Degenerate intervals are refused before parsing."""
    assert main(["x", "--start", "3", "--end", "1"]) == 2


def test_main_file(tmp_path) -> None:
    """Every expression of a file gets a line in the results file."""
    input_file = tmp_path / "ops.txt"
    input_file.write_text("x + 1\nx y\n1 / x\n")

    assert main(["--file", str(input_file), "--start", "0", "--end", "1"]) == 0

    lines = (tmp_path / "ops_txt_results.txt").read_text().splitlines()
    assert lines[0] == "x + 1 = [1.0, 2.0]"
    assert lines[1].startswith("x y -> ERROR:")
    assert lines[2].startswith("1 / x -> ERROR: Evaluation failed at 0.0")
