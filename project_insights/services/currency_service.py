"""
Exchange-rate lookup through the backend's conversion endpoint.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional, Tuple

from project_insights.calculators.currency import RateTable
from project_insights.models import Expense, Project, User
from project_insights.services.backend_client import SERVICE_ERRORS, BackendClient

logger = logging.getLogger(__name__)


class CurrencyService:
    """
    Fills a RateTable from ``GET /currency/convert``.

    The backend caches upstream rates, so one request per missing pair is
    enough. A failed lookup is logged and left out of the table; the
    calculators then treat the pair as approximate.

    Example:
        >>> service = CurrencyService(client)
        >>> table = service.build_rate_table("USD", projects, users, expenses)
        >>> table.to_target(Decimal("10"), "INR").is_approximate
        False
    """

    def __init__(self, client: BackendClient):
        self.client = client

    def fetch_rate(self, source: str, target: str) -> Optional[Decimal]:
        """
        Fetch the rate for one unit of ``source`` in ``target``.

        Returns:
            Positive rate, or None when the lookup failed
        """
        try:
            data = self.client.get(
                "currency/convert", params={"from": source, "to": target, "amount": 1}
            )
        except SERVICE_ERRORS as e:
            logger.error(f"Failed to fetch rate for {source} -> {target}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Unexpected rate payload for {source} -> {target}")
            return None

        raw = data.get("rate")
        if raw is None:
            raw = data.get("result")
        try:
            rate = Decimal(str(raw)) if raw is not None else None
        except InvalidOperation:
            rate = None

        if rate is None or rate <= 0:
            logger.warning(f"No usable rate in response for {source} -> {target}")
            return None
        return rate

    def fill(self, table: RateTable, pairs: Iterable[Tuple[str, str]]) -> int:
        """
        Fetch every pair not already in ``table``.

        Returns:
            Number of rates added
        """
        added = 0
        for source, target in pairs:
            if source.upper() == target.upper() or (source, target) in table:
                continue
            rate = self.fetch_rate(source, target)
            if rate is not None:
                table.set_rate(source, target, rate)
                added += 1
        return added

    def build_rate_table(
        self,
        target_currency: str,
        projects: List[Project],
        users: Optional[List[User]] = None,
        expenses: Optional[List[Expense]] = None,
        table: Optional[RateTable] = None,
    ) -> RateTable:
        """
        Build the rate table needed for a profitability report.

        Project, user and expense currencies get a rate into the target
        currency. Approved expenses in a foreign currency also get a direct
        rate into their project's currency.

        Args:
            target_currency: Reporting currency
            projects: Projects in the report
            users: Users, for profile rate currencies
            expenses: Project expenses
            table: Existing table to extend (its target must match)

        Returns:
            RateTable anchored on ``target_currency``
        """
        if table is None:
            table = RateTable(target_currency)
        users = users or []
        expenses = expenses or []

        currencies = [p.currency for p in projects]
        currencies += [u.ctc_currency for u in users]
        currencies += [e.currency for e in expenses]
        missing = table.missing_sources(currencies)

        project_currency = {p.id: p.currency for p in projects if p.id}
        direct_pairs: List[Tuple[str, str]] = []
        for expense in expenses:
            if not expense.is_approved or not expense.currency:
                continue
            target = project_currency.get(expense.project_id)
            if target and expense.currency != target:
                pair = (expense.currency, target)
                if pair not in direct_pairs:
                    direct_pairs.append(pair)

        added = self.fill(table, [(code, table.target_currency) for code in missing])
        added += self.fill(table, direct_pairs)
        logger.info(
            f"Rate table for {table.target_currency}: {added} rates fetched, "
            f"{len(table)} known"
        )
        return table
