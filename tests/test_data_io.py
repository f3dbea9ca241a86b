"""Unit tests for data_io.py module."""

import pytest

from stn_i.data_io import RunResultSource
from stn_i.errors import SourceError, SourceReason
from stn_i.synthetic_data import load_synthetic_catalog


CONFIGURATIONS = (
    "ID\tPARENT\talgorithm\ttenure\talpha\n"
    "1\tNA\tsa\tNA\t0.1\n"
    "2\tNA\tts\t12\t0.6\n"
    "3\t2\tts\t17\t0.55\n"
)
ITERATIONS = (
    "ITERATION\tID\tELITE\n"
    "1\t1\tFALSE\n"
    "1\t2\tTRUE\n"
    "2\t2\tFALSE\n"
    "2\t3\tTRUE\n"
)
EXPERIMENTS = (
    "ID\tINSTANCE\tVALUE\n"
    "1\tinst1\t120\n"
    "1\tinst2\t118\n"
    "2\tinst1\t110\n"
    "3\tinst1\t104\n"
    "3\tinst2\tNA\n"
)


def write_run(root, name, configurations=CONFIGURATIONS, iterations=ITERATIONS, experiments=EXPERIMENTS):
    """Helper function to write one run directory."""
    run_dir = root / name
    run_dir.mkdir(parents=True)
    if configurations is not None:
        (run_dir / "configurations.tsv").write_text(configurations)
    if iterations is not None:
        (run_dir / "iterations.tsv").write_text(iterations)
    if experiments is not None:
        (run_dir / "experiments.tsv").write_text(experiments)
    return run_dir


@pytest.fixture
def catalog():
    return load_synthetic_catalog()


class TestRunDiscovery:
    """Test discovery of run directories."""

    def test_runs_sorted_by_name(self, tmp_path, catalog):
        """Test runs are numbered in directory-name order."""
        write_run(tmp_path, "run_b")
        write_run(tmp_path, "run_a")
        source = RunResultSource(tmp_path, catalog)
        assert len(source) == 2
        assert source.list_runs() == ["run_a", "run_b"]
        runs = source.load_runs()
        assert [(r.run_id, r.label) for r in runs] == [(1, "run_a"), (2, "run_b")]

    def test_unrelated_directories_ignored(self, tmp_path, catalog):
        """Test directories without run files are skipped."""
        write_run(tmp_path, "run_a")
        (tmp_path / "notes").mkdir()
        (tmp_path / "readme.txt").write_text("hello")
        assert RunResultSource(tmp_path, catalog).list_runs() == ["run_a"]

    def test_no_runs(self, tmp_path, catalog):
        """Test an input folder without runs raises."""
        with pytest.raises(SourceError) as exc_info:
            RunResultSource(tmp_path, catalog)
        assert exc_info.value.reason is SourceReason.NO_RUNS

    def test_partial_run(self, tmp_path, catalog):
        """Test a run missing one of its tables raises."""
        write_run(tmp_path, "run_a", experiments=None)
        with pytest.raises(SourceError) as exc_info:
            RunResultSource(tmp_path, catalog)
        assert exc_info.value.reason is SourceReason.MISSING_FILE
        assert exc_info.value.run == "run_a"

    def test_missing_input(self, tmp_path, catalog):
        """Test a missing input folder raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            RunResultSource(tmp_path / "missing", catalog)

    def test_input_is_file(self, tmp_path, catalog):
        """Test a file given as input folder raises."""
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(ValueError, match="not a directory"):
            RunResultSource(path, catalog)


class TestLoadRun:
    """Test loading of a single run."""

    def test_load_run(self, tmp_path, catalog):
        """Test iterations, elites, values and qualities."""
        write_run(tmp_path, "run_a")
        run = RunResultSource(tmp_path, catalog).load_run(1)

        assert run.total_iterations == 2
        first, second = run.iterations
        assert [c.config_id for c in first.configurations] == ["1", "2"]
        assert first.elite_ids == frozenset({"2"})
        assert second.elite_ids == frozenset({"3"})

        c1 = first.configurations[0]
        assert c1.parent_id is None
        assert c1.values["algorithm"] == "sa"
        assert c1.values["tenure"] is None
        assert c1.values["alpha"] == pytest.approx(0.1)
        assert c1.qualities == (120.0, 118.0)

        c3 = second.configurations[1]
        assert c3.parent_id == "2"
        assert c3.values["tenure"] == 17.0
        assert c3.qualities == (104.0,)

    def test_irace_column_names(self, tmp_path, catalog):
        """Test .ID. and .PARENT. headers are accepted."""
        write_run(tmp_path, "run_a", configurations=CONFIGURATIONS.replace("ID\tPARENT", ".ID.\t.PARENT.", 1))
        run = RunResultSource(tmp_path, catalog).load_run(1)
        assert run.iterations[1].configurations[1].parent_id == "2"

    def test_out_of_range_run_id(self, tmp_path, catalog):
        """Test run ids outside 1..N raise."""
        write_run(tmp_path, "run_a")
        with pytest.raises(IndexError):
            RunResultSource(tmp_path, catalog).load_run(2)

    def test_missing_parameter_column(self, tmp_path, catalog):
        """Test a configurations table without a catalog parameter raises."""
        configurations = "ID\tPARENT\talgorithm\talpha\n1\tNA\tsa\t0.1\n2\tNA\tts\t0.6\n3\t2\tts\t0.55\n"
        write_run(tmp_path, "run_a", configurations=configurations)
        with pytest.raises(SourceError) as exc_info:
            RunResultSource(tmp_path, catalog).load_run(1)
        assert exc_info.value.reason is SourceReason.MISSING_FIELD
        assert "tenure" in str(exc_info.value)

    def test_unknown_configuration(self, tmp_path, catalog):
        """Test an iteration referencing an undefined configuration raises."""
        write_run(tmp_path, "run_a", iterations=ITERATIONS + "2\t9\tFALSE\n")
        with pytest.raises(SourceError) as exc_info:
            RunResultSource(tmp_path, catalog).load_run(1)
        assert exc_info.value.reason is SourceReason.UNKNOWN_CONFIGURATION
        assert exc_info.value.configuration == "9"

    def test_configuration_without_measurement(self, tmp_path, catalog):
        """Test a raced configuration with only NA values raises."""
        experiments = "ID\tINSTANCE\tVALUE\n1\tinst1\t120\n2\tinst1\t110\n3\tinst1\tNA\n"
        write_run(tmp_path, "run_a", experiments=experiments)
        with pytest.raises(SourceError) as exc_info:
            RunResultSource(tmp_path, catalog).load_run(1)
        assert exc_info.value.reason is SourceReason.NO_MEASUREMENTS
        assert exc_info.value.run == "run_a"

    def test_non_numeric_parameter(self, tmp_path, catalog):
        """Test a non-numeric value for a numeric parameter raises."""
        write_run(tmp_path, "run_a", configurations=CONFIGURATIONS.replace("0.55", "high"))
        with pytest.raises(SourceError) as exc_info:
            RunResultSource(tmp_path, catalog).load_run(1)
        assert exc_info.value.reason is SourceReason.BAD_VALUE

    def test_bad_elite_flag(self, tmp_path, catalog):
        """Test an ELITE cell that is not boolean raises."""
        write_run(tmp_path, "run_a", iterations=ITERATIONS.replace("1\t2\tTRUE", "1\t2\tmaybe"))
        with pytest.raises(SourceError) as exc_info:
            RunResultSource(tmp_path, catalog).load_run(1)
        assert exc_info.value.reason is SourceReason.BAD_VALUE

    def test_duplicate_in_iteration(self, tmp_path, catalog):
        """Test a configuration listed twice in one iteration names the run."""
        write_run(tmp_path, "run_a", iterations=ITERATIONS + "2\t3\tTRUE\n")
        with pytest.raises(SourceError) as exc_info:
            RunResultSource(tmp_path, catalog).load_run(1)
        assert exc_info.value.reason is SourceReason.BAD_ITERATIONS
        assert exc_info.value.run == "run_a"

    def test_iteration_gap(self, tmp_path, catalog):
        """Test iterations must be contiguous."""
        iterations = "ITERATION\tID\tELITE\n1\t1\tFALSE\n3\t2\tTRUE\n"
        write_run(tmp_path, "run_a", iterations=iterations)
        with pytest.raises(SourceError) as exc_info:
            RunResultSource(tmp_path, catalog).load_run(1)
        assert exc_info.value.reason is SourceReason.BAD_ITERATIONS
