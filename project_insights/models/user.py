"""User data model."""

from decimal import Decimal
from typing import Optional

from pydantic import field_validator

from project_insights.models.base import BaseDataModel, to_decimal, to_optional_str
from project_insights.models.project import DEFAULT_CURRENCY


class User(BaseDataModel):
    """Represents a platform user.

    Attributes:
        email: Login email, the key used by time entries and tasks
        full_name: Display name
        hourly_rate: Profile cost rate, used when entries carry no rate
        ctc_currency: Currency of the profile rate
        custom_role: Tenant-specific role ("client" users are not staff)
        job_title: Job title shown on reports

    Example:
        >>> user = User(email="a@x.com", full_name="Ann", custom_role="Client")
        >>> user.is_staff
        False
    """

    email: str
    full_name: Optional[str] = None
    hourly_rate: Decimal = Decimal("0")
    ctc_currency: str = DEFAULT_CURRENCY
    custom_role: Optional[str] = None
    job_title: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v):
        """Email is the join key and must be present."""
        text = to_optional_str(v)
        if not text:
            raise ValueError("email cannot be empty")
        return text

    @field_validator("full_name", "custom_role", "job_title", mode="before")
    @classmethod
    def strip_text(cls, v):
        return to_optional_str(v)

    @field_validator("hourly_rate", mode="before")
    @classmethod
    def default_rate(cls, v):
        return to_decimal(v)

    @field_validator("ctc_currency", mode="before")
    @classmethod
    def default_currency(cls, v):
        text = to_optional_str(v)
        return text.upper() if text else DEFAULT_CURRENCY

    @property
    def display_name(self) -> str:
        """Full name, falling back to the email."""
        return self.full_name or self.email

    @property
    def is_staff(self) -> bool:
        """Whether the user counts towards resource utilization."""
        return (self.custom_role or "").lower() != "client"
