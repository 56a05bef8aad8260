"""Spreadsheet export: summary, positions and activity as one .xlsx workbook."""

import logging
import os
from importlib.util import find_spec

import pandas as pd

import config
from analyzers.metrics import compute_metrics
from analyzers.tables import (
    ACTIVE_COLUMNS, ACTIVITY_COLUMNS, CLOSED_COLUMNS,
    active_position_rows, activity_rows, closed_position_rows, summary_rows,
)
from reporting.formatting import export_filename

logger = logging.getLogger(__name__)

ENGINE = "openpyxl"


class ExportUnavailableError(RuntimeError):
    """The spreadsheet engine is not installed."""


def spreadsheet_available() -> bool:
    return find_spec(ENGINE) is not None


def build_sheets(snapshot):
    """Sheet name -> DataFrame, in workbook order."""
    metrics = compute_metrics(snapshot)
    summary = summary_rows(snapshot.address, metrics) if metrics is not None else [
        ("Address", snapshot.address)]
    return {
        "Summary": pd.DataFrame(summary, columns=["Metric", "Value"]),
        "Active Positions": pd.DataFrame(active_position_rows(snapshot.positions),
                                         columns=ACTIVE_COLUMNS),
        "Closed Positions": pd.DataFrame(closed_position_rows(snapshot.closed_positions),
                                         columns=CLOSED_COLUMNS),
        "Activity": pd.DataFrame(activity_rows(snapshot.activity),
                                 columns=ACTIVITY_COLUMNS),
    }


def generate_spreadsheet(snapshot, output_dir=config.OUTPUT_DIR):
    """Write the workbook for ``snapshot`` and return its path."""
    if not spreadsheet_available():
        raise ExportUnavailableError(
            "Spreadsheet export needs the 'openpyxl' package "
            "(pip install openpyxl).")

    os.makedirs(output_dir, exist_ok=True)
    output_path = os.path.join(output_dir, export_filename(snapshot.address, "xlsx"))

    with pd.ExcelWriter(output_path, engine=ENGINE) as writer:
        for name, df in build_sheets(snapshot).items():
            df.to_excel(writer, sheet_name=name, index=False)

    logger.info("Spreadsheet written to %s", output_path)
    return output_path
