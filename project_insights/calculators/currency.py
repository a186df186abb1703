"""Currency rate lookup.

Rates are fetched from the backend into a sparse RateTable keyed by
``(source, target)``. Every lookup reports whether the result is exact or an
approximation (no rate known, amount passed through unchanged), so callers
and tests can tell precision loss apart from a real conversion.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

ONE = Decimal("1")


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of a rate lookup or amount conversion.

    Attributes:
        amount: Converted amount (equals the input amount when approximate)
        rate: Rate applied
        exact: False when no rate was known and 1 was used instead
        source: Source currency code
        target: Target currency code

    Example:
        >>> ConversionResult(Decimal("10"), ONE, False, "USD", "EUR").is_approximate
        True
    """

    amount: Decimal
    rate: Decimal
    exact: bool
    source: Optional[str]
    target: Optional[str]

    @property
    def is_approximate(self) -> bool:
        return not self.exact


class RateTable:
    """Sparse directed rate table anchored on a target currency.

    The backend only returns rates into the selected target currency, so
    cross rates between two other currencies are derived through it:
    ``rate(A, B) = rate(A, target) / rate(B, target)``.

    Args:
        target_currency: Currency the fetched rates convert into
        rates: Optional initial ``{(source, target): rate}`` mapping

    Example:
        >>> table = RateTable("INR", {("USD", "INR"): Decimal("83")})
        >>> table.convert(Decimal("2"), "USD", "INR").amount
        Decimal('166')
    """

    def __init__(
        self,
        target_currency: str,
        rates: Optional[Dict[Tuple[str, str], Decimal]] = None,
    ):
        self.target_currency = target_currency.upper()
        self._rates: Dict[Tuple[str, str], Decimal] = {}
        for (source, target), rate in (rates or {}).items():
            self.set_rate(source, target, rate)

    def __contains__(self, pair) -> bool:
        source, target = pair
        return (source.upper(), target.upper()) in self._rates

    def __len__(self) -> int:
        return len(self._rates)

    def set_rate(self, source: str, target: str, rate) -> None:
        """Store a positive rate; non-positive rates are ignored."""
        value = Decimal(str(rate))
        if value <= 0:
            logger.warning(f"Ignoring non-positive rate {source}->{target}: {rate}")
            return
        self._rates[(source.upper(), target.upper())] = value

    def lookup(self, source: str, target: str) -> Optional[Decimal]:
        """Return the stored direct rate, or None."""
        return self._rates.get((source.upper(), target.upper()))

    def missing_sources(self, currencies: Iterable[Optional[str]]) -> List[str]:
        """Currencies that still need a rate into the target currency."""
        missing = []
        for currency in currencies:
            if not currency:
                continue
            code = currency.upper()
            if code == self.target_currency or code in missing:
                continue
            if (code, self.target_currency) not in self._rates:
                missing.append(code)
        return sorted(missing)

    def _rate_to_target(self, currency: str) -> Optional[Decimal]:
        if currency == self.target_currency:
            return ONE
        return self._rates.get((currency, self.target_currency))

    def rate(self, source: Optional[str], target: Optional[str]) -> ConversionResult:
        """Resolve the rate from ``source`` to ``target``.

        Identity when the currencies match (or either is missing), then the
        direct pair, then a cross rate through the target currency. When none
        of those is known the rate falls back to 1 and the result is marked
        approximate.

        Args:
            source: Source currency code
            target: Target currency code

        Returns:
            ConversionResult for an amount of 1
        """
        if not source or not target or source.upper() == target.upper():
            return ConversionResult(ONE, ONE, True, source, target)

        src, dst = source.upper(), target.upper()
        direct = self._rates.get((src, dst))
        if direct is not None:
            return ConversionResult(direct, direct, True, src, dst)

        rate_from = self._rate_to_target(src)
        rate_to = self._rate_to_target(dst)
        if rate_from is not None and rate_to is not None:
            cross = rate_from / rate_to
            return ConversionResult(cross, cross, True, src, dst)

        logger.warning(f"No exchange rate for {src}->{dst}, using 1")
        return ConversionResult(ONE, ONE, False, src, dst)

    def convert(
        self, amount: Decimal, source: Optional[str], target: Optional[str]
    ) -> ConversionResult:
        """Convert an amount, falling back to the raw amount when no rate is known."""
        result = self.rate(source, target)
        return ConversionResult(
            amount * result.rate, result.rate, result.exact, result.source, result.target
        )

    def to_target(self, amount: Decimal, source: Optional[str]) -> ConversionResult:
        """Convert an amount into the table's target currency."""
        return self.convert(amount, source, self.target_currency)
