"""
Shared field types for provider payloads.

Provider payloads are loosely typed: amounts arrive as numbers, numeric
strings, nulls or garbage. Every coercion happens here, once, at the model
boundary, so the rest of the service only ever sees clean values.
"""
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

ZERO = Decimal("0")

# Amounts at or beyond 10**15 are treated as garbage; sums of many such
# values stay well inside the default decimal context.
MAX_AMOUNT_EXPONENT = 15
MAX_DAY_COUNT = 10 ** 9


def coerce_amount(value: Any) -> Decimal:
    """Coerce a money value to Decimal; anything non-numeric becomes zero."""
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            return ZERO
    else:
        return ZERO

    if not amount.is_finite() or amount.adjusted() >= MAX_AMOUNT_EXPONENT:
        return ZERO
    return amount


def coerce_non_negative_amount(value: Any) -> Decimal:
    """Coerce a money value and clamp it at zero."""
    return max(ZERO, coerce_amount(value))


def coerce_optional_amount(value: Any) -> Optional[Decimal]:
    """Like coerce_amount, but keeps an explicit null as absent."""
    if value is None:
        return None
    return coerce_amount(value)


def coerce_day_count(value: Any) -> Optional[int]:
    """Coerce a day count to a non-negative int; unusable input is absent."""
    if value is None or isinstance(value, bool):
        return None
    try:
        days = float(value)
    except (TypeError, ValueError):
        return None
    if days != days or abs(days) >= MAX_DAY_COUNT:
        return None
    return max(0, int(days))


def coerce_date(value: Any) -> Optional[date]:
    """Parse ISO dates and datetimes; unparseable input is absent."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip().replace("Z", "+00:00")
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            try:
                return date.fromisoformat(text[:10])
            except ValueError:
                return None
    return None


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Parse ISO timestamps; a bare date is read as midnight, garbage is absent."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip().replace("Z", "+00:00")
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            day = coerce_date(text)
            return datetime(day.year, day.month, day.day) if day else None
    return None


def coerce_identifier(value: Any) -> Optional[str]:
    """Provider ids may be ints or strings; normalise to str."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


def coerce_count(value: Any) -> int:
    """Counts reported by providers; unusable input counts as zero."""
    return coerce_day_count(value) or 0


def coerce_label(value: Any) -> Optional[str]:
    """Free-text labels (room numbers, month names) may arrive as numbers."""
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


def coerce_list(value: Any) -> list:
    """Non-list payloads for a collection become an empty collection."""
    if isinstance(value, (list, tuple)):
        return [item for item in value if item is not None]
    return []


_serialize_money = PlainSerializer(float, return_type=float, when_used="json")

Amount = Annotated[Decimal, BeforeValidator(coerce_amount), _serialize_money]
NonNegativeAmount = Annotated[Decimal, BeforeValidator(coerce_non_negative_amount), _serialize_money]
OptionalAmount = Annotated[
    Optional[Decimal],
    BeforeValidator(coerce_optional_amount),
    PlainSerializer(lambda v: None if v is None else float(v), when_used="json"),
]
DayCount = Annotated[Optional[int], BeforeValidator(coerce_day_count)]
Count = Annotated[int, BeforeValidator(coerce_count)]
Label = Annotated[Optional[str], BeforeValidator(coerce_label)]
LenientDate = Annotated[Optional[date], BeforeValidator(coerce_date)]
LenientDateTime = Annotated[Optional[datetime], BeforeValidator(coerce_datetime)]
OptionalCount = Annotated[Optional[int], BeforeValidator(coerce_day_count)]
Identifier = Annotated[Optional[str], BeforeValidator(coerce_identifier)]
RequiredIdentifier = Annotated[str, BeforeValidator(coerce_identifier)]


class ProviderModel(BaseModel):
    """Base for provider payloads: camelCase on the wire, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ResponseModel(BaseModel):
    """Base for payloads handed to the presentation layer, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
