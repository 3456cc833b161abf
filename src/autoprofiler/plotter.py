"""
Generates charts from the flattened render sample table.

This module is the visualization step of an automation run. It takes the
sample table built by the exporter (one row per render log entry), processes
it with Polars, and creates interactive bar charts with Plotly:

1. One grouped bar chart per flow key, showing ``actualDuration`` and
   ``baseDuration`` for every render index.
2. One summary chart comparing the total actual render duration and the
   number of interactions of every flow key.

Charts are saved as interactive HTML files and, if Kaleido is installed, as
static PNG images.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional

import plotly.express as px
import plotly.graph_objects as go
import polars as pl

from .utils import hyphenate_string

logger = logging.getLogger(__name__)

DURATION_COLUMNS = ["actualDuration", "baseDuration"]


def _chart_basename(flow_key: str) -> str:
    return hyphenate_string(re.sub(r"[^\w\s.:/-]", "", flow_key)) or "flow"


def _save_plotly_figure(fig: go.Figure, base_filename: str, output_dir: Path) -> Optional[Path]:
    """
    Saves a Plotly figure to HTML and, if possible, PNG.

    Args:
        fig: The Plotly figure object to save.
        base_filename: The base name for the output files (without extension).
        output_dir: The directory to save the files in.

    Returns:
        Path of the HTML file, or None if it could not be written.
    """
    plot_filename_html = output_dir / f"{base_filename}.html"
    try:
        fig.write_html(plot_filename_html)
        logger.info(f"Interactive chart saved to: {plot_filename_html}")
    except Exception as e:
        logger.error(
            f"Failed to save chart {plot_filename_html} using Plotly: {e}",
            exc_info=True,
        )
        return None

    try:
        plot_filename_png = output_dir / f"{base_filename}.png"
        fig.write_image(plot_filename_png, width=1200, height=600)
        logger.info(f"Static chart saved to: {plot_filename_png}")
    except Exception as e_kaleido:
        logger.warning(
            f"Failed to save static chart to PNG (Kaleido might be missing or misconfigured): {e_kaleido}"
        )
    return plot_filename_html


def _generate_flow_chart(df_flow: pl.DataFrame, flow_key: str, output_dir: Path) -> Optional[Path]:
    """
    Grouped bar chart of the render durations of one flow key.

    When a key holds several batches, the durations of each render index
    are averaged across them.
    """
    per_index = (
        df_flow.group_by("log_index", maintain_order=True)
        .agg(
            [pl.col(column).mean().alias(column) for column in DURATION_COLUMNS]
            + [pl.col("id").first().alias("id")]
        )
        .sort("log_index")
    )
    long_df = per_index.unpivot(
        index=["log_index", "id"],
        on=DURATION_COLUMNS,
        variable_name="Metric",
        value_name="Duration",
    )

    fig = px.bar(
        long_df.to_pandas(),
        x="log_index",
        y="Duration",
        color="Metric",
        barmode="group",
        hover_data=["id"],
        title=f"Render Durations - {flow_key}",
        labels={"log_index": "Render", "Duration": "Duration (ms)"},
    )
    fig.update_layout(legend_title_text="Metric", xaxis={"dtick": 1})

    return _save_plotly_figure(fig, f"{_chart_basename(flow_key)}_durations", output_dir)


def _generate_summary_chart(df: pl.DataFrame, output_dir: Path) -> Optional[Path]:
    """Bar chart of total actual duration per flow key, with interactions on a second axis."""
    per_batch = df.group_by(["flow_key", "batch_index"], maintain_order=True).agg(
        pl.col("actualDuration").sum().alias("totalActualDuration"),
        pl.col("numberOfInteractions").first().alias("numberOfInteractions"),
    )
    summary = per_batch.group_by("flow_key", maintain_order=True).agg(
        pl.col("totalActualDuration").mean(),
        pl.col("numberOfInteractions").mean(),
    )

    fig = go.Figure()
    fig.add_trace(
        go.Bar(
            x=summary["flow_key"].to_list(),
            y=summary["totalActualDuration"].to_list(),
            name="Total actualDuration (ms)",
        )
    )
    fig.add_trace(
        go.Scatter(
            x=summary["flow_key"].to_list(),
            y=summary["numberOfInteractions"].to_list(),
            name="Interactions",
            mode="markers+lines",
            yaxis="y2",
            line={"color": "black", "dash": "dash"},
        )
    )
    fig.update_layout(
        title="Flow Summary",
        xaxis_title="Flow",
        yaxis={"title": "Total actualDuration (ms)"},
        yaxis2={"title": "Interactions", "overlaying": "y", "side": "right"},
    )

    return _save_plotly_figure(fig, "summary_chart", output_dir)


def generate_charts(samples_df: pl.DataFrame, output_dir: Path) -> List[Path]:
    """
    Generates every chart for a sample table.

    Args:
        samples_df: Flattened sample table (see ``build_samples_frame``)
        output_dir: Directory where the chart files will be saved

    Returns:
        Paths of the HTML charts that were written
    """
    output_dir = Path(output_dir)
    if samples_df.is_empty():
        logger.warning("No render samples to chart. Skipping chart generation.")
        return []

    output_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []

    for (flow_key,), df_flow in samples_df.group_by("flow_key", maintain_order=True):
        logger.info(f"--- Generating chart for {flow_key} ---")
        chart_path = _generate_flow_chart(df_flow, flow_key, output_dir)
        if chart_path is not None:
            written.append(chart_path)

    summary_path = _generate_summary_chart(samples_df, output_dir)
    if summary_path is not None:
        written.append(summary_path)

    return written
