from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal
from typing import Union

# Type alias for money values
Money = Decimal
MoneyInput = Union[Decimal, float, int, str, None]

THOUSAND = Decimal("1000")
LAKH = Decimal("100000")
CRORE = Decimal("10000000")

# (threshold, divisor, decimal places, suffix); first band whose threshold the magnitude reaches wins.
CurrencyBand = tuple[Decimal, Decimal, int, str]

COMPACT_BANDS: tuple[CurrencyBand, ...] = (
    (Decimal("100000000"), CRORE, 1, "Cr"),
    (CRORE, CRORE, 2, "Cr"),
    (LAKH, LAKH, 1, "L"),
    (THOUSAND, THOUSAND, 0, "K"),
)

FULL_BANDS: tuple[CurrencyBand, ...] = (
    (Decimal("10000000000"), CRORE, 1, "Cr"),
    (Decimal("1000000000"), CRORE, 2, "Cr"),
    (Decimal("100000000"), CRORE, 1, "Cr"),
    (CRORE, CRORE, 2, "Cr"),
)


def to_decimal(value: MoneyInput) -> Decimal:
    """Exact Decimal for a stored or user-supplied amount. None counts as zero; floats go through str."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(value: MoneyInput) -> Decimal:
    """
    Round monetary value to 2 decimal places using ROUND_HALF_UP.

    Examples:
        >>> round_money(10.125)
        Decimal('10.13')
        >>> round_money("100.5")
        Decimal('100.50')
    """
    value = to_decimal(value)
    if value < 0:
        return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_DOWN)
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_indian_number(value: MoneyInput) -> str:
    """
    Digit grouping in the Indian convention (last three digits, then pairs).

    Trailing zero decimals are dropped: 1234567.50 -> '12,34,567.5', 100000 -> '1,00,000'.
    """
    amount = round_money(value)
    sign = "-" if amount < 0 else ""
    integer_part, _, fraction = f"{abs(amount):.2f}".partition(".")
    fraction = fraction.rstrip("0")

    if len(integer_part) > 3:
        head, tail = integer_part[:-3], integer_part[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        integer_part = ",".join(groups + [tail])

    if fraction:
        return f"{sign}{integer_part}.{fraction}"
    return f"{sign}{integer_part}"


def format_banded(value: MoneyInput, bands: tuple[CurrencyBand, ...]) -> str:
    """Abbreviate by magnitude using the given bands; below every threshold use full Indian grouping."""
    amount = to_decimal(value)
    magnitude = abs(amount)
    for threshold, divisor, places, suffix in bands:
        if magnitude >= threshold:
            scaled = (magnitude / divisor).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
            sign = "-" if amount < 0 else ""
            return f"{sign}{scaled} {suffix}"
    return format_indian_number(amount)


def format_compact_currency(value: MoneyInput) -> str:
    """Dashboard style: 1500 -> '2 K', 250000 -> '2.5 L', 12345678 -> '1.23 Cr'."""
    return format_banded(value, COMPACT_BANDS)


def format_full_currency(value: MoneyInput) -> str:
    """Document style: full grouping below one crore, crores above."""
    return format_banded(value, FULL_BANDS)


def format_quantity(value: MoneyInput) -> str:
    """Unit counts: integral values without decimals, otherwise up to two places."""
    quantity = to_decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    text = f"{quantity:.2f}".rstrip("0").rstrip(".")
    return text or "0"
