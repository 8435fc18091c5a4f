"""
Cash settlement for the till.

``tender`` works out what a customer handed over in notes and coins,
whether it covers the order, and how much change is due. It touches no
state, so the till can call it on every keypress and order creation can
call it again to settle the stored breakdown.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict, Mapping, Optional, Tuple

from django.conf import settings

from .exceptions import InvalidDenominationError, InvalidTenderError


CENTS = Decimal('0.01')
ZERO = Decimal('0.00')


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    notes: Tuple[Decimal, ...]
    coins: Tuple[Decimal, ...]

    def as_dict(self):
        return {
            'code': self.code,
            'symbol': self.symbol,
            'notes': [denomination_key(value) for value in self.notes],
            'coins': [denomination_key(value) for value in self.coins],
        }


@dataclass(frozen=True)
class TenderResult:
    """Outcome of a tender calculation. Money values are 2dp Decimals."""

    order_total: Decimal
    total_paid: Decimal
    change: Decimal
    sufficient: bool
    shortfall: Decimal
    notes: Dict[str, int] = field(default_factory=dict)
    coins: Dict[str, int] = field(default_factory=dict)

    def as_payment_details(self):
        """JSON stored on the order as ``cash_payment_details``."""
        return {
            'notes': dict(self.notes),
            'coins': dict(self.coins),
            'totalPaid': str(self.total_paid),
            'change': str(self.change),
        }


def denomination_key(value: Decimal) -> str:
    """Canonical string key for a denomination: ``50``, ``0.5``."""
    return format(value.normalize(), 'f')


def _to_money(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidTenderError(f'Invalid amount: {value!r}')
    if not amount.is_finite():
        raise InvalidTenderError(f'Invalid amount: {value!r}')
    return amount.quantize(CENTS)


def _parse_denominations(values) -> Tuple[Decimal, ...]:
    parsed = {Decimal(str(value).strip()) for value in values if str(value).strip()}
    return tuple(sorted(parsed, reverse=True))


def get_currency() -> Currency:
    """Denominations configured in ``LAUNDRY_CURRENCY``, largest first."""
    conf = settings.LAUNDRY_CURRENCY
    return Currency(
        code=conf.get('code', 'ZAR'),
        symbol=conf.get('symbol', 'R'),
        notes=_parse_denominations(conf.get('notes', ())),
        coins=_parse_denominations(conf.get('coins', ())),
    )


def _parse_quantity(denomination, quantity) -> int:
    if isinstance(quantity, bool):
        raise InvalidTenderError(f'Quantity for {denomination} must be a whole number')
    try:
        parsed = Decimal(str(quantity).strip())
    except (InvalidOperation, ValueError):
        raise InvalidTenderError(f'Quantity for {denomination} must be a whole number')
    if not parsed.is_finite() or parsed != parsed.to_integral_value():
        raise InvalidTenderError(f'Quantity for {denomination} must be a whole number')
    if parsed < 0:
        raise InvalidTenderError(f'Quantity for {denomination} cannot be negative')
    return int(parsed)


def _count(tendered: Optional[Mapping], allowed: Tuple[Decimal, ...], kind: str):
    """
    Validate one breakdown and return ``(subtotal, normalized)``.

    ``normalized`` is keyed by canonical denomination and omits zero counts.
    Keys given twice in different spellings (``50`` and ``"50.00"``) add up.
    """
    if tendered is None:
        return ZERO, {}
    if not isinstance(tendered, Mapping):
        raise InvalidTenderError(f'{kind.capitalize()} must be an object of denomination: quantity')

    subtotal = ZERO
    normalized = {}
    for raw_key, raw_quantity in tendered.items():
        try:
            denomination = Decimal(str(raw_key).strip())
        except (InvalidOperation, ValueError):
            raise InvalidDenominationError(f'Unknown {kind[:-1]} denomination: {raw_key}')
        if not denomination.is_finite() or denomination not in allowed:
            raise InvalidDenominationError(f'Unknown {kind[:-1]} denomination: {raw_key}')

        quantity = _parse_quantity(raw_key, raw_quantity)
        if quantity == 0:
            continue

        key = denomination_key(denomination)
        normalized[key] = normalized.get(key, 0) + quantity
        subtotal += denomination * quantity

    # Largest denomination first, like the till drawer
    ordered = dict(sorted(normalized.items(), key=lambda item: Decimal(item[0]), reverse=True))
    return subtotal, ordered


def tender(order_total, notes=None, coins=None, currency: Optional[Currency] = None) -> TenderResult:
    """
    Settle a cash payment against an order total.

    Args:
        order_total: Amount due (Decimal, int, float or numeric string)
        notes: Mapping of note denomination to count, e.g. ``{"50": 2}``
        coins: Mapping of coin denomination to count
        currency: Denominations to accept; defaults to settings

    Returns:
        TenderResult with total paid, change, sufficiency and shortfall

    Raises:
        InvalidDenominationError: Unknown note or coin
        InvalidTenderError: Negative or non-integer quantity, bad total

    Example:
        >>> tender(Decimal('137.50'), {'100': 1, '20': 1}, {'5': 1}).shortfall
        Decimal('12.50')
    """
    currency = currency or get_currency()
    total = _to_money(order_total)
    if total < 0:
        raise InvalidTenderError('Order total cannot be negative')

    notes_paid, notes_normalized = _count(notes, currency.notes, 'notes')
    coins_paid, coins_normalized = _count(coins, currency.coins, 'coins')

    total_paid = (notes_paid + coins_paid).quantize(CENTS)
    sufficient = total_paid >= total

    return TenderResult(
        order_total=total,
        total_paid=total_paid,
        change=max(total_paid - total, ZERO).quantize(CENTS),
        sufficient=sufficient,
        shortfall=max(total - total_paid, ZERO).quantize(CENTS),
        notes=notes_normalized,
        coins=coins_normalized,
    )
