"""
Results exporter for finished automation runs.

This module writes the final ResultsMap to disk: the JSON results bundle, a
flattened sample table in the configured storage format and a human-readable
summary log, plus Plotly charts when chart output is requested. Charts of an
earlier run can be re-rendered from its sample table.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import polars as pl

from ..config.storage_config import SUPPORTED_FORMATS, StorageConfig
from ..models.samples import SampleBatch
from ..plotter import generate_charts
from .base import SAMPLES_SCHEMA
from .factory import create_storage

logger = logging.getLogger(__name__)

RESULTS_FILENAME = "results.json"
SUMMARY_FILENAME = "summary.log"


def results_to_dict(results: Mapping[str, Sequence[SampleBatch]]) -> Dict[str, List[Dict[str, Any]]]:
    """Convert a ResultsMap to its JSON wire format, keeping key order."""
    return {key: [batch.to_dict() for batch in batches] for key, batches in results.items()}


def build_samples_frame(results: Mapping[str, Sequence[SampleBatch]]) -> pl.DataFrame:
    """
    Flatten a ResultsMap into one row per log entry.

    Args:
        results: Flow key -> batches

    Returns:
        DataFrame with the SAMPLES_SCHEMA columns (empty when there are no logs)
    """
    rows = []
    for flow_key, batches in results.items():
        for batch_index, batch in enumerate(batches):
            for log_index, entry in enumerate(batch.logs):
                rows.append({
                    "flow_key": flow_key,
                    "batch_index": batch_index,
                    "batch_id": batch.id,
                    "log_index": log_index,
                    "numberOfInteractions": float(batch.number_of_interactions),
                    "actualDuration": entry.actual_duration,
                    "baseDuration": entry.base_duration,
                    "commitTime": entry.commit_time,
                    "startTime": entry.start_time,
                    "phase": entry.phase,
                    "id": entry.id,
                    "interactionCount": len(entry.interactions),
                })
    return pl.DataFrame(rows, schema=SAMPLES_SCHEMA)


class ResultsExporter:
    """
    Writes a finished ResultsMap to an output directory.

    The results bundle is always JSON. The flattened sample table follows the
    storage configuration (Parquet or JSON), with an optional CSV copy.
    """

    def __init__(
        self,
        output_dir: Path,
        storage_config: Optional[StorageConfig] = None,
        run_info: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the exporter.

        Args:
            output_dir: Directory where files will be written
            storage_config: Sample table settings; defaults to Parquet/snappy
            run_info: Run parameters recorded in the summary log
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.storage_config = storage_config or StorageConfig()
        self.storage = create_storage(self.storage_config)
        self.run_info = dict(run_info or {})

        logger.debug(
            f"Initialized ResultsExporter with format: {self.storage_config.format}"
        )

    def export(
        self, results: Mapping[str, Sequence[SampleBatch]], output_type: str = "json"
    ) -> Dict[str, Path]:
        """
        Write every output file for ``results``.

        Args:
            results: Final ResultsMap
            output_type: "json" or "chart"; "chart" also writes HTML charts

        Returns:
            Mapping of output name to written path

        Raises:
            ValueError: If ``output_type`` is unknown
        """
        if output_type not in ("json", "chart"):
            raise ValueError(f"Unsupported output type: {output_type}")

        try:
            logger.info("Saving automation results...")
            if not results:
                logger.warning("No flow produced any renders; writing empty results")

            written: Dict[str, Path] = {}
            written["results"] = self._save_results_bundle(results)

            samples_df = build_samples_frame(results)
            written.update(self._save_samples(samples_df))
            written["summary"] = self._save_summary_log(results)

            if output_type == "chart":
                for chart_path in generate_charts(samples_df, self.output_dir):
                    written[chart_path.stem] = chart_path

            logger.info(f"Successfully saved automation results to: {self.output_dir}")
            return written

        except Exception as e:
            logger.error(f"Error saving automation results: {e}", exc_info=True)
            raise

    def _save_results_bundle(self, results: Mapping[str, Sequence[SampleBatch]]) -> Path:
        results_path = self.output_dir / RESULTS_FILENAME
        with open(results_path, "w", encoding="utf-8") as f:
            json.dump(results_to_dict(results), f, indent=2, ensure_ascii=False)
        logger.info(f"Saved results for {len(results)} flow key(s) to: {results_path}")
        return results_path

    def _save_samples(self, df: pl.DataFrame) -> Dict[str, Path]:
        """
        Save the flattened sample table in the configured format.

        If legacy format generation is enabled a CSV copy is written as well.
        """
        written: Dict[str, Path] = {}
        file_path = self.storage.save_samples(df, self.output_dir)
        written["samples"] = file_path
        logger.info(f"Saved {len(df)} render samples to: {file_path}")

        if self.storage_config.generate_legacy_formats:
            legacy_path = self.output_dir / "samples.csv"
            df.write_csv(legacy_path)
            written["samples_csv"] = legacy_path
            logger.info(f"Saved legacy CSV format to: {legacy_path}")

        return written

    def _save_summary_log(self, results: Mapping[str, Sequence[SampleBatch]]) -> Path:
        """Save human-readable summary log."""
        summary_path = self.output_dir / SUMMARY_FILENAME

        with open(summary_path, "w", encoding="utf-8") as f:
            f.write("Automation Summary\n")
            f.write("==================\n\n")
            for name, value in self.run_info.items():
                f.write(f"{name}: {value}\n")
            f.write(f"Flow keys: {len(results)}\n\n")

            for flow_key, batches in results.items():
                f.write(f"{flow_key}:\n")
                for batch in batches:
                    total_actual = sum(entry.actual_duration for entry in batch.logs)
                    f.write(
                        f"  {batch.id or '(no id)'}: {len(batch.logs)} render(s), "
                        f"total actualDuration {total_actual:.2f} ms, "
                        f"interactions {batch.number_of_interactions:g}\n"
                    )
                f.write("\n")

        logger.info(f"Saved summary log to: {summary_path}")
        return summary_path

    def load_samples(self, columns: Optional[List[str]] = None) -> pl.DataFrame:
        """
        Load the sample table written by a previous export.

        Args:
            columns: Optional list of columns to load

        Raises:
            FileNotFoundError: If no sample table exists in the output directory
        """
        return self.storage.load_samples(self.output_dir, columns)

    def render_charts(self) -> List[Path]:
        """Re-render the charts of the run in the output directory from its sample table."""
        samples_df = self.load_samples()
        logger.info(f"Rendering charts for {len(samples_df)} render samples in: {self.output_dir}")
        return generate_charts(samples_df, self.output_dir)

    @classmethod
    def for_existing_run(cls, run_dir: Path) -> "ResultsExporter":
        """
        Create an exporter for a run directory written earlier.

        The storage format is taken from whichever sample table the directory
        holds, Parquet first.

        Raises:
            FileNotFoundError: If the directory holds no sample table
        """
        run_dir = Path(run_dir)
        if not run_dir.is_dir():
            raise FileNotFoundError(f"Run directory not found: {run_dir}")

        for format_type in SUPPORTED_FORMATS:
            storage_config = StorageConfig(format=format_type)
            if create_storage(storage_config).samples_path(run_dir).exists():
                return cls(run_dir, storage_config)

        raise FileNotFoundError(f"No render samples found in {run_dir}")
