"""Validation report for collecting boundary data-quality issues."""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Optional


class ValidationSeverity(IntEnum):
    """Severity levels for validation issues."""

    INFO = 1
    WARNING = 2
    ERROR = 3


_LOG_LEVELS = {
    ValidationSeverity.INFO: logging.INFO,
    ValidationSeverity.WARNING: logging.WARNING,
    ValidationSeverity.ERROR: logging.ERROR,
}


@dataclass
class ValidationIssue:
    """A single data-quality issue.

    Attributes:
        severity: The severity level of the issue
        field: The field (or entity) the issue concerns
        message: Human-readable description of the issue
        value: The offending value
        context: Optional context (entity, record id, index)
    """

    severity: ValidationSeverity
    field: str
    message: str
    value: Any
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        context_str = ""
        if self.context:
            context_parts = [f"{k}={v}" for k, v in self.context.items()]
            context_str = f" ({', '.join(context_parts)})"
        return f"[{self.severity.name}] {self.field}: {self.message}{context_str}"


class ValidationReport:
    """Collects issues found while reading and checking records.

    Errors mark records that were skipped; warnings mark records that were
    kept but will be ignored or defaulted by the calculators.

    Example:
        >>> report = ValidationReport()
        >>> report.add_error("Timesheet", "Record is not an object", "oops")
        >>> report.add_warning("project_id", "Unknown project", "p9")
        >>> report.summary()
        '1 error(s), 1 warning(s)'
    """

    def __init__(self) -> None:
        self.issues: List[ValidationIssue] = []

    def _count(self, severity: ValidationSeverity) -> int:
        return sum(1 for issue in self.issues if issue.severity == severity)

    @property
    def error_count(self) -> int:
        return self._count(ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return self._count(ValidationSeverity.WARNING)

    @property
    def info_count(self) -> int:
        return self._count(ValidationSeverity.INFO)

    def is_valid(self) -> bool:
        """True when no errors are present; warnings do not count."""
        return self.error_count == 0

    def has_errors(self) -> bool:
        return self.error_count > 0

    def add(
        self,
        severity: ValidationSeverity,
        field: str,
        message: str,
        value: Any,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.issues.append(ValidationIssue(severity, field, message, value, context))

    def add_error(
        self, field: str, message: str, value: Any, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.add(ValidationSeverity.ERROR, field, message, value, context)

    def add_warning(
        self, field: str, message: str, value: Any, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.add(ValidationSeverity.WARNING, field, message, value, context)

    def add_info(
        self, field: str, message: str, value: Any, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.add(ValidationSeverity.INFO, field, message, value, context)

    def get_errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    def get_warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    def merge(self, other: "ValidationReport") -> None:
        self.issues.extend(other.issues)

    def summary(self) -> str:
        """Counts of errors, warnings and info messages.

        Returns:
            Summary such as "2 error(s), 1 warning(s)", or "No issues found"
        """
        parts = []
        if self.error_count:
            parts.append(f"{self.error_count} error(s)")
        if self.warning_count:
            parts.append(f"{self.warning_count} warning(s)")
        if self.info_count:
            parts.append(f"{self.info_count} info message(s)")
        return ", ".join(parts) if parts else "No issues found"

    def log(self, logger: logging.Logger) -> None:
        """Emit every issue on ``logger`` at its severity's level."""
        for issue in self.issues:
            logger.log(_LOG_LEVELS[issue.severity], str(issue))

    def format(self) -> str:
        """Format the report for display, grouped by severity."""
        if not self.issues:
            return "Validation successful - no issues found"

        lines = [f"Validation Report - {self.summary()}", "=" * 60]
        for severity, heading in (
            (ValidationSeverity.ERROR, "ERRORS"),
            (ValidationSeverity.WARNING, "WARNINGS"),
            (ValidationSeverity.INFO, "INFO"),
        ):
            group = [i for i in self.issues if i.severity == severity]
            if group:
                lines.append(f"\n{heading}:")
                lines.extend(f"  - {issue}" for issue in group)

        return "\n".join(lines)
