import math
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from services.exchange.currencies import CURRENCY_BY_CODE, CurrencyInfo
from services.exchange.state import DisplayCurrency

DEFAULT_AMOUNT = 1.0
MISSING_VALUE = "---"


def parse_amount(text: Optional[str]) -> float:
    """Parse the raw amount input, falling back to 1.0 for anything unusable."""
    if text is None:
        return DEFAULT_AMOUNT
    cleaned = text.strip()
    if not cleaned or "_" in cleaned:
        return DEFAULT_AMOUNT
    try:
        value = float(cleaned)
    except ValueError:
        return DEFAULT_AMOUNT
    if not math.isfinite(value):
        return DEFAULT_AMOUNT
    return value


def _distinct_by_code(currencies: Iterable[DisplayCurrency]) -> List[DisplayCurrency]:
    seen = set()
    result = []
    for currency in currencies:
        if currency.code in seen:
            continue
        seen.add(currency.code)
        result.append(currency)
    return result


def order_currencies(currencies: Sequence[DisplayCurrency], order: Sequence[str]) -> List[DisplayCurrency]:
    """Known codes follow ``order``; the rest keep their arrival order at the end."""
    pending = _distinct_by_code(currencies)
    by_code = {currency.code: currency for currency in pending}
    ordered = []
    for code in order:
        currency = by_code.pop(code, None)
        if currency is not None:
            ordered.append(currency)
    ordered.extend(currency for currency in pending if currency.code in by_code)
    return ordered


def project(
    base_code: str,
    amount: float,
    rates: Mapping[str, float],
    registry: Mapping[str, CurrencyInfo] = CURRENCY_BY_CODE,
    prior_order: Sequence[str] = (),
) -> List[DisplayCurrency]:
    pending = []
    base_info = registry.get(base_code)
    if base_info is not None:
        pending.append(DisplayCurrency(info=base_info, relative_rate=1.0, converted_amount=amount * 1.0))
    for code, rate in rates.items():
        info = registry.get(code)
        if info is None:
            continue
        pending.append(DisplayCurrency(info=info, relative_rate=rate, converted_amount=amount * rate))
    return order_currencies(pending, prior_order)


def merge_order(primary: Sequence[str], extra: Sequence[str]) -> Tuple[str, ...]:
    """``primary`` first, then codes from ``extra`` not already listed."""
    merged: List[str] = []
    for code in list(primary) + list(extra):
        if code not in merged:
            merged.append(code)
    return tuple(merged)


def shape_history(rates_by_date: Optional[Mapping[str, Mapping[str, float]]], target_code: str) -> Dict[str, float]:
    if not rates_by_date:
        return {}
    shaped = {}
    for day, by_code in rates_by_date.items():
        rate = by_code.get(target_code)
        if rate is not None:
            shaped[day] = rate
    return shaped


def history_series(data: Optional[Mapping[str, float]]) -> List[Tuple[str, float]]:
    if not data:
        return []
    parsed = []
    for day, rate in data.items():
        try:
            parsed.append((date.fromisoformat(day), day, rate))
        except ValueError:
            continue
    parsed.sort(key=lambda entry: entry[0])
    return [(day, rate) for _, day, rate in parsed]


def history_bounds(data: Optional[Mapping[str, float]]) -> Optional[Tuple[float, float]]:
    if not data:
        return None
    values = list(data.values())
    return min(values), max(values)


def format_rate(value: Optional[float]) -> str:
    if value is None:
        return MISSING_VALUE
    return f"{value:.4f}"


def format_amount(value: Optional[float]) -> str:
    if value is None:
        return MISSING_VALUE
    return f"{value:.2f}"
