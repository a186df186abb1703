"""Project and expense data models.

This module defines the Project model, carrying the commercial terms used by
profitability calculations, and the Expense model for non-labor costs.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, Field, field_validator

from project_insights.models.base import (
    BaseDataModel,
    to_date,
    to_decimal,
    to_optional_str,
    to_relation_id,
)

DEFAULT_CURRENCY = "INR"

BILLING_MODELS = ("fixed_price", "retainer", "time_and_materials", "non_billable")
PROJECT_STATUSES = ("planning", "active", "on_hold", "completed")
RISK_LEVELS = ("low", "medium", "high", "critical")


class Project(BaseDataModel):
    """Represents a project.

    Attributes:
        id: Backend identifier
        name: Project name
        status: planning, active, on_hold or completed
        progress: Percent complete, clamped to 0-100
        budget: Budget in project currency
        actual_cost: Actual cost recorded on the project
        currency: ISO currency code of the project's amounts
        billing_model: fixed_price, retainer, time_and_materials or
            non_billable (None when not set)
        contract_amount: Contract value for fixed price work
        retainer_amount: Retainer value
        estimated_duration: Estimated duration (hours for T&M projects)
        default_bill_rate_per_hour: Bill rate for T&M revenue
        expense_budget: Non-labor budget (per duration unit for T&M)
        deadline: Project deadline
        created_date: Creation date, used as the project start
        risk_level: Declared risk level (low, medium, high, critical)

    Example:
        >>> project = Project(id="p1", name="Alpha", progress=150, budget=None)
        >>> project.progress, project.budget, project.currency
        (100, Decimal('0'), 'INR')
    """

    id: Optional[str] = None
    name: str = "Unknown Project"
    status: Optional[str] = None
    progress: int = 0
    budget: Decimal = Decimal("0")
    actual_cost: Decimal = Decimal("0")
    currency: str = DEFAULT_CURRENCY
    billing_model: Optional[str] = None
    contract_amount: Decimal = Decimal("0")
    retainer_amount: Decimal = Decimal("0")
    estimated_duration: Decimal = Decimal("0")
    default_bill_rate_per_hour: Decimal = Decimal("0")
    expense_budget: Decimal = Decimal("0")
    deadline: Optional[dt.date] = None
    created_date: Optional[dt.date] = None
    risk_level: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def flatten_id(cls, v):
        """Reduce embedded ids to plain strings."""
        return to_relation_id(v)

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, v):
        """Missing names fall back to the unknown-project label."""
        return to_optional_str(v) or "Unknown Project"

    @field_validator("status", "billing_model", "risk_level", mode="before")
    @classmethod
    def normalize_choice(cls, v):
        """Lower-case enumerated fields; empty values become None."""
        text = to_optional_str(v)
        return text.lower() if text else None

    @field_validator("progress", mode="before")
    @classmethod
    def clamp_progress(cls, v):
        """Clamp progress into the 0-100 range."""
        number = to_decimal(v)
        return int(max(Decimal("0"), min(Decimal("100"), number)))

    @field_validator(
        "budget",
        "actual_cost",
        "contract_amount",
        "retainer_amount",
        "estimated_duration",
        "default_bill_rate_per_hour",
        "expense_budget",
        mode="before",
    )
    @classmethod
    def default_amount(cls, v):
        """Missing or malformed amounts count as zero."""
        return to_decimal(v)

    @field_validator("currency", mode="before")
    @classmethod
    def default_currency(cls, v):
        """Upper-case the currency code, defaulting to INR."""
        text = to_optional_str(v)
        return text.upper() if text else DEFAULT_CURRENCY

    @field_validator("deadline", "created_date", mode="before")
    @classmethod
    def parse_dates(cls, v):
        """Accept ISO dates and timestamps."""
        return to_date(v)


class Expense(BaseDataModel):
    """Represents a non-labor project expense.

    Only approved expenses contribute to cost aggregates.

    Example:
        >>> expense = Expense(project={"_id": "p1"}, amount="250", status="APPROVED")
        >>> expense.project_id, expense.is_approved
        ('p1', True)
    """

    id: Optional[str] = None
    project_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("project_id", "project", "projectId")
    )
    amount: Decimal = Decimal("0")
    currency: Optional[str] = None
    status: str = "draft"
    date: Optional[dt.date] = None

    @field_validator("project_id", mode="before")
    @classmethod
    def flatten_project(cls, v):
        """Reduce embedded project references to their id."""
        return to_relation_id(v)

    @field_validator("id", mode="before")
    @classmethod
    def flatten_id(cls, v):
        """Reduce embedded ids to plain strings."""
        return to_relation_id(v)

    @field_validator("amount", mode="before")
    @classmethod
    def default_amount(cls, v):
        """Missing or malformed amounts count as zero."""
        return to_decimal(v)

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, v):
        """Upper-case the currency code."""
        text = to_optional_str(v)
        return text.upper() if text else None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        """Lower-case the status, defaulting to draft."""
        text = to_optional_str(v)
        return text.lower() if text else "draft"

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v):
        """Accept ISO dates and timestamps."""
        return to_date(v)

    @property
    def is_approved(self) -> bool:
        """Whether the expense contributes to cost aggregates."""
        return self.status == "approved"
