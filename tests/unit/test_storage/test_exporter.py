"""
Unit tests for ResultsExporter.
"""

import json
from unittest.mock import patch

import polars as pl
import pytest

from autoprofiler.config.storage_config import StorageConfig
from autoprofiler.storage.base import SAMPLES_SCHEMA
from autoprofiler.storage.exporter import (
    ResultsExporter,
    build_samples_frame,
    results_to_dict,
)


@pytest.fixture
def results(test_utils):
    return {
        "average-login": [test_utils.make_batch([15.0, 5.0], number_of_interactions=3, batch_id="Login-1")],
        "average-menu": [test_utils.make_batch([8.0], number_of_interactions=2, batch_id="Menu-1")],
    }


@pytest.mark.unit
class TestResultConversion:
    """Test cases for the module-level conversion helpers."""

    def test_results_to_dict_keeps_order_and_wire_names(self, results):
        data = results_to_dict(results)

        assert list(data) == ["average-login", "average-menu"]
        assert data["average-login"][0]["numberOfInteractions"] == 3
        assert data["average-login"][0]["logs"][0]["actualDuration"] == 15.0

    def test_build_samples_frame(self, results):
        df = build_samples_frame(results)

        assert df.columns == list(SAMPLES_SCHEMA)
        assert len(df) == 3
        assert df["flow_key"].to_list() == ["average-login", "average-login", "average-menu"]
        assert df["log_index"].to_list() == [0, 1, 0]
        assert df["batch_id"].to_list() == ["Login-1", "Login-1", "Menu-1"]

    def test_build_samples_frame_empty(self):
        df = build_samples_frame({})

        assert df.is_empty()
        assert df.columns == list(SAMPLES_SCHEMA)


@pytest.mark.unit
class TestResultsExporter:
    """Test cases for ResultsExporter."""

    def test_json_output_files(self, results, temp_dir):
        """Test the files written for JSON output."""
        exporter = ResultsExporter(temp_dir / "run", run_info={"Page": "http://localhost:3000"})

        written = exporter.export(results, "json")

        assert set(written) == {"results", "samples", "summary"}
        with open(written["results"], encoding="utf-8") as f:
            assert json.load(f) == results_to_dict(results)
        assert pl.read_parquet(written["samples"]).shape[0] == 3

        summary = written["summary"].read_text(encoding="utf-8")
        assert "Page: http://localhost:3000" in summary
        assert "average-login:" in summary
        assert "2 render(s)" in summary

    def test_json_storage_and_legacy_csv(self, results, temp_dir):
        """Test the JSON sample table and its CSV copy."""
        exporter = ResultsExporter(
            temp_dir, StorageConfig(format="json", generate_legacy_formats=True)
        )

        written = exporter.export(results)

        assert written["samples"].name == "samples.json"
        assert written["samples_csv"].exists()
        assert exporter.load_samples(["flow_key"])["flow_key"].to_list()[-1] == "average-menu"

    def test_chart_output_calls_plotter(self, results, temp_dir):
        """Test that chart output hands the sample table to the plotter."""
        chart_path = temp_dir / "summary_chart.html"
        with patch("autoprofiler.storage.exporter.generate_charts", return_value=[chart_path]) as mock_charts:
            written = ResultsExporter(temp_dir).export(results, "chart")

        mock_charts.assert_called_once()
        df, output_dir = mock_charts.call_args.args
        assert len(df) == 3
        assert output_dir == temp_dir
        assert written["summary_chart"] == chart_path

    def test_empty_results_still_written(self, temp_dir):
        written = ResultsExporter(temp_dir).export({})

        assert json.loads(written["results"].read_text()) == {}

    def test_unknown_output_type(self, results, temp_dir):
        with pytest.raises(ValueError):
            ResultsExporter(temp_dir).export(results, "html")

    def test_load_before_export(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            ResultsExporter(temp_dir).load_samples()


@pytest.mark.unit
class TestExistingRun:
    """Test cases for re-rendering charts of a finished run."""

    @pytest.mark.parametrize("format_type", ["parquet", "json"])
    def test_for_existing_run_detects_format(self, results, temp_dir, format_type):
        ResultsExporter(temp_dir, StorageConfig(format=format_type)).export(results)

        exporter = ResultsExporter.for_existing_run(temp_dir)

        assert exporter.storage_config.format == format_type
        assert len(exporter.load_samples()) == 3

    def test_for_existing_run_without_table(self, temp_dir):
        (temp_dir / "results.json").write_text("{}", encoding="utf-8")

        with pytest.raises(FileNotFoundError):
            ResultsExporter.for_existing_run(temp_dir)

    def test_for_existing_run_missing_directory(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            ResultsExporter.for_existing_run(temp_dir / "missing")

        assert not (temp_dir / "missing").exists()

    def test_render_charts_uses_stored_table(self, results, temp_dir):
        """Test that charts are rebuilt from the table on disk."""
        ResultsExporter(temp_dir).export(results)
        chart_path = temp_dir / "summary_chart.html"

        with patch("autoprofiler.storage.exporter.generate_charts", return_value=[chart_path]) as mock_charts:
            written = ResultsExporter.for_existing_run(temp_dir).render_charts()

        df, output_dir = mock_charts.call_args.args
        assert df["flow_key"].to_list() == ["average-login", "average-login", "average-menu"]
        assert output_dir == temp_dir
        assert written == [chart_path]
