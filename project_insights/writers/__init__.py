"""Writers for exporting results as CSV text, files and DataFrames."""

from project_insights.writers.csv_writer import encode_csv_value, records_to_rows, rows_to_csv
from project_insights.writers.export_files import (
    csv_filename,
    document_filename,
    executive_report_filename,
    report_filename,
    save_export,
    sprint_report_filename,
    timesheet_report_filename,
)
from project_insights.writers.frame_builder import (
    health_frame,
    profitability_frame,
    rows_frame,
    utilization_frame,
)

__all__ = [
    "encode_csv_value",
    "records_to_rows",
    "rows_to_csv",
    "csv_filename",
    "document_filename",
    "executive_report_filename",
    "report_filename",
    "save_export",
    "sprint_report_filename",
    "timesheet_report_filename",
    "health_frame",
    "profitability_frame",
    "rows_frame",
    "utilization_frame",
]
