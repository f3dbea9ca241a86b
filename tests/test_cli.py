"""Tests for the command-line entry point."""

import pytest

from stn_i.__main__ import build_parser, format_duration, main
from stn_i.reporting import BASE_COLUMNS, ORIGINAL_COLUMNS

from .test_analysis import PARAMETERS
from .test_data_io import write_run


@pytest.fixture(autouse=True)
def restore_verbosity(monkeypatch):
    monkeypatch.delenv("STN_VERBOSITY", raising=False)


class TestFormatDuration:
    """Test duration formatting."""

    def test_seconds(self):
        assert format_duration(12.5) == "12.50s"

    def test_minutes(self):
        assert format_duration(125) == "2m 5.0s"

    def test_hours(self):
        assert format_duration(7260) == "2h 1m"


class TestBuildParser:
    """Test option defaults."""

    def test_defaults(self, tmp_path):
        """Test defaults mirror STNConfig."""
        args = build_parser().parse_args(["--output", str(tmp_path)])
        assert args.criteria == "min"
        assert args.significance == 2
        assert args.type_priority == "STANDARD,START,END"
        assert args.output_file == "stn_i_file.txt"
        assert args.workers == 1

    def test_rejects_unknown_criteria(self, tmp_path):
        """Test argparse refuses an unknown criteria."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--output", str(tmp_path), "--criteria", "avg"])


class TestMain:
    """Test full invocations."""

    def test_synthetic(self, tmp_path, capsys):
        """Test the built-in experiment writes the STN file."""
        out = tmp_path / "out"
        assert main(["--synthetic", "--output", str(out)]) == 0
        lines = (out / "stn_i_file.txt").read_text().splitlines()
        assert lines[0].split("\t") == BASE_COLUMNS
        assert len(lines) == 9
        assert "STN-i Summary" in capsys.readouterr().out

    def test_quiet_prints_only_path(self, tmp_path, capsys):
        """Test quiet mode prints the output path alone."""
        assert main(["--synthetic", "--output", str(tmp_path), "-q"]) == 0
        assert capsys.readouterr().out.strip() == str(tmp_path / "stn_i_file.txt")

    def test_original_mode_columns(self, tmp_path):
        """Test either original flag adds the extra columns."""
        assert main(["--synthetic", "--output", str(tmp_path), "--original-type", "-q"]) == 0
        header = (tmp_path / "stn_i_file.txt").read_text().splitlines()[0].split("\t")
        assert header == BASE_COLUMNS + ORIGINAL_COLUMNS

    def test_custom_file_name(self, tmp_path):
        """Test --output-file names the STN file."""
        assert main(["--synthetic", "--output", str(tmp_path), "--output-file", "net.tsv", "-q"]) == 0
        assert (tmp_path / "net.tsv").is_file()

    def test_from_files(self, tmp_path):
        """Test a run folder and definitions file."""
        params = tmp_path / "parameters.csv"
        params.write_text(PARAMETERS)
        write_run(tmp_path / "runs", "run_a")
        out = tmp_path / "out"
        code = main(
            [
                "--input", str(tmp_path / "runs"),
                "--parameters", str(params),
                "--output", str(out),
                "--criteria", "mean",
                "-q",
            ]
        )
        assert code == 0
        lines = (out / "stn_i_file.txt").read_text().splitlines()
        assert len(lines) == 3
        assert lines[2].split("\t")[2] == "210050"
        assert lines[2].split("\t")[1] == "108.00"

    def test_invalid_type_priority(self, tmp_path, capsys):
        """Test a bad priority exits with code 2."""
        code = main(["--synthetic", "--output", str(tmp_path), "--type-priority", "START,END"])
        assert code == 2
        assert "type_priority" in capsys.readouterr().err

    def test_missing_input_arguments(self, tmp_path):
        """Test --input and --parameters are required without --synthetic."""
        with pytest.raises(SystemExit):
            main(["--output", str(tmp_path)])

    def test_bad_parameters_writes_nothing(self, tmp_path, capsys):
        """Test a parse error exits with 1 and leaves no output file."""
        params = tmp_path / "parameters.csv"
        params.write_text(PARAMETERS.replace(";c;", ";z;"))
        write_run(tmp_path / "runs", "run_a")
        out = tmp_path / "out"
        code = main(["--input", str(tmp_path / "runs"), "--parameters", str(params), "--output", str(out)])
        assert code == 1
        assert "UnknownType" in capsys.readouterr().err
        assert not (out / "stn_i_file.txt").exists()

    def test_out_of_range_writes_nothing(self, tmp_path, capsys):
        """Test a domain error exits with 1 and leaves no output file."""
        params = tmp_path / "parameters.csv"
        params.write_text(PARAMETERS.replace("(0,50)", "(0,9)"))
        write_run(tmp_path / "runs", "run_a")
        out = tmp_path / "out"
        code = main(["--input", str(tmp_path / "runs"), "--parameters", str(params), "--output", str(out)])
        assert code == 1
        assert "OutOfRange" in capsys.readouterr().err
        assert not (out / "stn_i_file.txt").exists()

    def test_missing_parameters_file(self, tmp_path, capsys):
        """Test a missing definitions file exits with 1."""
        write_run(tmp_path / "runs", "run_a")
        code = main(
            [
                "--input", str(tmp_path / "runs"),
                "--parameters", str(tmp_path / "none.csv"),
                "--output", str(tmp_path / "out"),
            ]
        )
        assert code == 1
        assert "File not found" in capsys.readouterr().err

    def test_output_is_a_file(self, tmp_path, capsys):
        """Test an output path that is a file is refused."""
        target = tmp_path / "taken"
        target.write_text("x")
        assert main(["--synthetic", "--output", str(target)]) == 1
        assert "not a directory" in capsys.readouterr().err
