"""Boundary parsing of raw backend records into typed models.

Defaulting of missing fields happens in the model validators. A record that
still cannot be parsed (not an object, or a required field such as a user's
email missing) is skipped and recorded in a ValidationReport.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from pydantic import ValidationError

from project_insights.models import (
    Activity,
    BaseDataModel,
    Expense,
    Project,
    Sprint,
    Task,
    TimeEntry,
    User,
)
from project_insights.validators.validation_report import ValidationReport

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseDataModel)

ENTITY_MODELS: Dict[str, Type[BaseDataModel]] = {
    "Project": Project,
    "Timesheet": TimeEntry,
    "Task": Task,
    "User": User,
    "Sprint": Sprint,
    "Activity": Activity,
    "ProjectExpense": Expense,
}


def parse_records(
    model: Type[ModelT],
    raw_records: Iterable[Any],
    report: Optional[ValidationReport] = None,
    entity: Optional[str] = None,
) -> List[ModelT]:
    """Parse raw dictionaries into ``model`` instances, skipping bad records.

    Args:
        model: Pydantic model class
        raw_records: Decoded JSON records
        report: Report collecting one error per skipped record
        entity: Entity name used in issue context (defaults to the model name)

    Returns:
        Parsed records in input order

    Example:
        >>> report = ValidationReport()
        >>> users = parse_records(User, [{"email": "a@x.com"}, {"full_name": "?"}], report)
        >>> len(users), report.error_count
        (1, 1)
    """
    entity = entity or model.__name__
    parsed: List[ModelT] = []
    skipped = 0

    for index, raw in enumerate(raw_records):
        context = {"entity": entity, "index": index}
        if not isinstance(raw, dict):
            skipped += 1
            if report is not None:
                report.add_error(entity, "Record is not an object", raw, context)
            continue

        try:
            parsed.append(model.model_validate(raw))
        except ValidationError as e:
            skipped += 1
            if report is not None:
                for error in e.errors():
                    field = ".".join(str(part) for part in error.get("loc", ())) or entity
                    report.add_error(
                        field,
                        error.get("msg", "Invalid value"),
                        error.get("input"),
                        {**context, "id": raw.get("id") or raw.get("_id")},
                    )

    if skipped:
        logger.warning(f"Skipped {skipped} unparseable {entity} records")
    logger.debug(f"Parsed {len(parsed)} {entity} records")
    return parsed
