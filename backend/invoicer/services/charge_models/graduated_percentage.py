from decimal import Decimal, InvalidOperation
from typing import Any

from invoicer.core.errors import InvalidChargeRangesError

RANGES_KEY = "graduated_percentage_ranges"
_MONETARY_FIELDS = ("flat_amount", "fixed_amount", "rate")


def calculate(units: Decimal, properties: dict[str, Any], events_count: int = 0) -> Decimal:
    """Price ``units`` through tiered percentage ranges.

    Each range touched adds its ``flat_amount`` (only when there is usage) and
    ``rate`` percent of the units billable inside it. The range where usage
    stops is the terminating one: its ``fixed_amount`` is charged once per
    event and no further range is evaluated.
    """
    ranges = validate_ranges(properties.get(RANGES_KEY))

    total = Decimal(0)
    for r in ranges:
        from_value = int(r["from_value"])
        to_value = r.get("to_value")

        if units != 0:
            total += _decimal(r["flat_amount"])

        range_units = _range_units(from_value, to_value, units)
        total += range_units * _decimal(r["rate"]) / Decimal(100)

        if to_value is None or int(to_value) >= units:
            return total + Decimal(events_count) * _decimal(r["fixed_amount"])

    # validate_ranges guarantees an unbounded last range
    raise InvalidChargeRangesError("Usage exceeds every range upper bound")


def _range_units(from_value: int, to_value: Any, units: Decimal) -> Decimal:
    """Number of units billed inside one range.

    Both bounds are inclusive and the first range counts from unit 1, so a
    usage value equal to a shared boundary is billed in the two ranges that
    meet there.
    """
    if to_value is not None and units >= int(to_value):
        return Decimal(int(to_value) - (1 if from_value == 0 else from_value) + 1)

    if from_value == 0:
        return units

    return units - from_value + 1


def validate_ranges(ranges: Any) -> list[dict[str, Any]]:
    """Check ranges are numeric, ascending, contiguous and end unbounded.

    Returns the ranges sorted by ``from_value``.
    """
    if not ranges or not isinstance(ranges, list):
        raise InvalidChargeRangesError(f"'{RANGES_KEY}' must be a non-empty list")

    for r in ranges:
        if not isinstance(r, dict):
            raise InvalidChargeRangesError("Each range must be an object")
        for field in _MONETARY_FIELDS:
            if field not in r or r[field] is None:
                raise InvalidChargeRangesError(f"Range is missing '{field}'")
            _decimal(r[field])
        _bound(r.get("from_value"), "from_value")
        if r.get("to_value") is not None:
            _bound(r["to_value"], "to_value")

    ordered = sorted(ranges, key=lambda x: int(x["from_value"]))

    if int(ordered[0]["from_value"]) != 0:
        raise InvalidChargeRangesError("First range must start at 0")

    previous_to: int | None = None
    for index, r in enumerate(ordered):
        from_value = int(r["from_value"])
        to_value = r.get("to_value")
        is_last = index == len(ordered) - 1

        if index > 0:
            if previous_to is None:
                raise InvalidChargeRangesError("Only the last range can be unbounded")
            if from_value not in (previous_to, previous_to + 1):
                raise InvalidChargeRangesError(
                    f"Range starting at {from_value} does not follow range ending at "
                    f"{previous_to}"
                )

        if to_value is None:
            if not is_last:
                raise InvalidChargeRangesError("Only the last range can be unbounded")
        else:
            if int(to_value) <= from_value:
                raise InvalidChargeRangesError(
                    f"Range upper bound {to_value} must be greater than {from_value}"
                )
            if is_last:
                raise InvalidChargeRangesError("Last range must be unbounded")

        previous_to = None if to_value is None else int(to_value)

    return ordered


def _decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise InvalidChargeRangesError(f"Invalid amount: {value!r}")
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise InvalidChargeRangesError(f"Invalid amount: {value!r}") from None
    if not result.is_finite():
        raise InvalidChargeRangesError(f"Invalid amount: {value!r}")
    return result


def _bound(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise InvalidChargeRangesError(f"'{field}' must be an integer, got {value!r}")
    try:
        bound = int(value)
    except ValueError:
        raise InvalidChargeRangesError(f"'{field}' must be an integer, got {value!r}") from None
    if bound < 0:
        raise InvalidChargeRangesError(f"'{field}' must not be negative")
    return bound
