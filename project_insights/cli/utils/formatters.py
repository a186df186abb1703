"""Output formatting utilities for CLI."""

from typing import List

import click
import pandas as pd


def format_success(message: str) -> str:
    """Format a success message with green color."""
    return click.style(f"✓ {message}", fg="green", bold=True)


def format_error(message: str) -> str:
    """Format an error message with red color."""
    return click.style(f"✗ {message}", fg="red", bold=True)


def format_warning(message: str) -> str:
    """Format a warning message with yellow color."""
    return click.style(f"⚠ {message}", fg="yellow", bold=True)


def format_info(message: str) -> str:
    return click.style(f"ℹ {message}", fg="blue")


def format_table(headers: List[str], rows: List[List[str]], max_width: int = 40) -> str:
    """Format data as a boxed text table.

    Args:
        headers: Column headers
        rows: Data rows (each row is a list of cell values)
        max_width: Maximum width for each column; longer cells are cut

    Returns:
        Formatted table as a string
    """
    if not headers:
        return ""

    col_widths = [len(str(h)) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(col_widths)]):
            col_widths[i] = max(col_widths[i], len(str(cell)))
    col_widths = [min(w, max_width) for w in col_widths]

    separator = "+" + "+".join("-" * (w + 2) for w in col_widths) + "+"

    def line(cells) -> str:
        parts = [
            f" {str(cell)[: col_widths[i]]:<{col_widths[i]}} "
            for i, cell in enumerate(cells[: len(col_widths)])
        ]
        return "|" + "|".join(parts) + "|"

    table_lines = [separator, line(list(headers)), separator]
    if rows:
        table_lines.extend(line(list(row)) for row in rows)
        table_lines.append(separator)

    return "\n".join(table_lines)


def format_frame(df: pd.DataFrame, max_width: int = 40) -> str:
    """Format a DataFrame as a table; NaN cells are shown empty."""
    if df.empty and not len(df.columns):
        return ""
    rows = [["" if pd.isna(v) else v for v in record] for record in df.itertuples(index=False)]
    return format_table([str(c) for c in df.columns], rows, max_width=max_width)
