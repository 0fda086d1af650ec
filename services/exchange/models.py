from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from services.exchange.errors import MalformedResponseError


def _optional_str(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedResponseError(f"Field '{key}' must be a string, got {type(value).__name__}")
    return value


def _rate_map(raw: Any, context: str, skip_nulls: bool = False) -> Dict[str, float]:
    if not isinstance(raw, dict):
        raise MalformedResponseError(f"{context} must be an object, got {type(raw).__name__}")
    rates: Dict[str, float] = {}
    for code, value in raw.items():
        if value is None and skip_nulls:
            continue
        if isinstance(value, bool):
            raise MalformedResponseError(f"{context}[{code}] is not a number: {value!r}")
        try:
            rates[str(code)] = float(value)
        except (TypeError, ValueError) as exc:
            raise MalformedResponseError(f"{context}[{code}] is not a number: {value!r}") from exc
    return rates


@dataclass(frozen=True)
class LatestRatesResponse:
    amount: Optional[float]
    base: Optional[str]
    date: Optional[str]
    rates: Optional[Dict[str, float]]

    @classmethod
    def from_payload(cls, payload: Any) -> "LatestRatesResponse":
        if not isinstance(payload, dict):
            raise MalformedResponseError("Latest rates payload must be a JSON object.")
        amount = payload.get("amount")
        if amount is not None:
            try:
                amount = float(amount)
            except (TypeError, ValueError) as exc:
                raise MalformedResponseError(f"Field 'amount' is not a number: {amount!r}") from exc
        raw_rates = payload.get("rates")
        return cls(
            amount=amount,
            base=_optional_str(payload, "base"),
            date=_optional_str(payload, "date"),
            rates=_rate_map(raw_rates, "rates") if raw_rates is not None else None,
        )


@dataclass(frozen=True)
class HistoricalRatesResponse:
    base: Optional[str]
    start_date: Optional[str]
    end_date: Optional[str]
    # date -> (code -> rate)
    rates: Optional[Dict[str, Dict[str, float]]]

    @classmethod
    def from_payload(cls, payload: Any) -> "HistoricalRatesResponse":
        if not isinstance(payload, dict):
            raise MalformedResponseError("Historical rates payload must be a JSON object.")
        raw_rates = payload.get("rates")
        rates = None
        if raw_rates is not None:
            if not isinstance(raw_rates, dict):
                raise MalformedResponseError("Field 'rates' must be an object keyed by date.")
            rates = {
                str(day): _rate_map(by_code, f"rates[{day}]", skip_nulls=True) for day, by_code in raw_rates.items()
            }
        return cls(
            base=_optional_str(payload, "base"),
            start_date=_optional_str(payload, "start_date"),
            end_date=_optional_str(payload, "end_date"),
            rates=rates,
        )
