"""
Persistence of generated AI reports.

Report text is capped before upload. When the backend still rejects the
payload as too large (HTTP 413) the save is retried once with a smaller cap.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from project_insights.services.backend_client import (
    SERVICE_ERRORS,
    BackendClient,
    BackendError,
)

logger = logging.getLogger(__name__)

PROJECT_REPORT_ENTITY = "ProjectReport"
QUESTION_REPORT_ENTITY = "AIInsightsReport"

DEFAULT_MAX_LENGTH = 800_000
DEFAULT_FALLBACK_LENGTH = 500_000

TRUNCATION_NOTE = (
    "\n\n---\n\n**Note:** This report was truncated due to size limitations."
)
FALLBACK_TRUNCATION_NOTE = (
    "\n\n---\n\n**Note:** This report was significantly truncated due to size "
    "limitations."
)


@dataclass(frozen=True)
class SaveResult:
    """Outcome of a report save.

    Attributes:
        saved: Whether the backend accepted the report
        is_truncated: Whether the stored content was cut
        stored_length: Length of the stored content (0 when not saved)
        record: Backend copy of the created record
    """

    saved: bool
    is_truncated: bool = False
    stored_length: int = 0
    record: Optional[Dict[str, Any]] = None


def cap_content(content: str, max_length: int, note: str = TRUNCATION_NOTE):
    """Cut ``content`` to ``max_length`` characters plus ``note``.

    Returns:
        Tuple of (content, was_truncated)
    """
    if len(content) <= max_length:
        return content, False
    return content[:max_length] + note, True


class ReportStore:
    """
    Saves project and question reports to the backend.

    Args:
        client: Backend client
        tenant_id: Tenant the reports belong to
        max_length: Primary content cap
        fallback_length: Cap used for the single retry after HTTP 413

    Example:
        >>> store = ReportStore(client, tenant_id="t1")
        >>> store.save_project_report("p1", "Alpha", text, "pm@x.com").saved
        True
    """

    def __init__(
        self,
        client: BackendClient,
        tenant_id: Optional[str],
        max_length: int = DEFAULT_MAX_LENGTH,
        fallback_length: int = DEFAULT_FALLBACK_LENGTH,
    ):
        if fallback_length >= max_length:
            raise ValueError("fallback_length must be less than max_length")
        self.client = client
        self.tenant_id = tenant_id
        self.max_length = max_length
        self.fallback_length = fallback_length

    @classmethod
    def from_config(cls, client: BackendClient, config: Any) -> "ReportStore":
        return cls(
            client,
            config.tenant_id,
            max_length=config.report_store_max_length,
            fallback_length=config.report_store_fallback_length,
        )

    def save_project_report(
        self,
        project_id: str,
        project_name: str,
        content: str,
        generated_by: str,
        generated_by_name: Optional[str] = None,
        analytics_data: Optional[Dict[str, Any]] = None,
    ) -> SaveResult:
        """Save an executive report for one project."""
        fields = {
            "project_id": project_id,
            "project_name": project_name,
            "analytics_data": analytics_data or {},
        }
        return self._save(
            PROJECT_REPORT_ENTITY, fields, content, generated_by, generated_by_name
        )

    def save_question_report(
        self,
        question: str,
        content: str,
        generated_by: str,
        generated_by_name: Optional[str] = None,
        context_data: Optional[Dict[str, Any]] = None,
    ) -> SaveResult:
        """Save the answer to a free-form question."""
        fields = {"question": question, "context_data": context_data or {}}
        return self._save(
            QUESTION_REPORT_ENTITY, fields, content, generated_by, generated_by_name
        )

    def _payload(
        self,
        fields: Dict[str, Any],
        content: str,
        original_length: int,
        truncated: bool,
        generated_by: str,
        generated_by_name: Optional[str],
    ) -> Dict[str, Any]:
        payload = {
            "tenant_id": self.tenant_id,
            **fields,
            "report_content": content,
            "generated_by": generated_by,
            "generated_by_name": generated_by_name or generated_by,
            "is_truncated": truncated,
        }
        if truncated:
            payload["original_length"] = original_length
        return payload

    def _save(
        self,
        entity: str,
        fields: Dict[str, Any],
        content: str,
        generated_by: str,
        generated_by_name: Optional[str],
    ) -> SaveResult:
        if not self.tenant_id:
            logger.warning(f"No tenant configured; {entity} not saved")
            return SaveResult(saved=False)

        stored, truncated = cap_content(content, self.max_length)
        if truncated:
            logger.warning(
                f"{entity} content truncated from {len(content)} to {len(stored)} characters"
            )

        payload = self._payload(
            fields, stored, len(content), truncated, generated_by, generated_by_name
        )
        try:
            record = self.client.create_entity(entity, payload)
            logger.info(f"Saved {entity} ({len(stored)} characters)")
            return SaveResult(True, truncated, len(stored), record)
        except BackendError as e:
            if e.status_code != 413:
                logger.error(f"Failed to save {entity}: {e}")
                return SaveResult(saved=False)
            logger.warning(f"{entity} rejected as too large; retrying with a smaller payload")
        except SERVICE_ERRORS as e:
            logger.error(f"Failed to save {entity}: {e}")
            return SaveResult(saved=False)

        smaller = content[: self.fallback_length] + FALLBACK_TRUNCATION_NOTE
        payload = self._payload(
            fields, smaller, len(content), True, generated_by, generated_by_name
        )
        try:
            record = self.client.create_entity(entity, payload)
        except SERVICE_ERRORS as e:
            logger.error(f"Failed to save {entity} after retry: {e}")
            return SaveResult(saved=False)

        logger.info(f"Saved {entity} after retry ({len(smaller)} characters)")
        return SaveResult(True, True, len(smaller), record)
