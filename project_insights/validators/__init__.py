"""Validation layer for boundary data quality."""

from project_insights.validators.record_validator import RecordValidator
from project_insights.validators.validation_report import (
    ValidationIssue,
    ValidationReport,
    ValidationSeverity,
)

__all__ = [
    "RecordValidator",
    "ValidationReport",
    "ValidationIssue",
    "ValidationSeverity",
]
