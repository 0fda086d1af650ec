from typing import Any, Dict, Optional, Sequence, Union

import httpx

from config.logging import get_logger
from config.settings import EXCHANGE_BASE_URL, EXCHANGE_TIMEOUT_SEC
from services.exchange.errors import MalformedResponseError, NetworkError, ProtocolError
from services.exchange.models import HistoricalRatesResponse, LatestRatesResponse

logger = get_logger("FrankfurterClient")

Symbols = Union[str, Sequence[str], None]


def _join_symbols(symbols: Symbols) -> Optional[str]:
    if symbols is None:
        return None
    if isinstance(symbols, str):
        return symbols or None
    joined = ",".join(code.upper() for code in symbols)
    return joined or None


def date_range_from(start_date: str) -> str:
    """Open-ended range understood by Frankfurter: ``2024-01-01..`` means "until today"."""
    return f"{start_date}.."


class FrankfurterClient:
    def __init__(
        self,
        base_url: str = EXCHANGE_BASE_URL,
        timeout: float = EXCHANGE_TIMEOUT_SEC,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def _request(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s params=%s", url, params)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as exc:
            message = exc.response.reason_phrase or exc.response.text
            raise ProtocolError(exc.response.status_code, message) from exc
        except httpx.RequestError as exc:
            raise NetworkError(f"Request to {url} failed: {exc}") from exc
        except ValueError as exc:
            raise MalformedResponseError(f"Response from {url} is not valid JSON") from exc

    async def get_latest_rates(self, base: str, symbols: Symbols = None) -> LatestRatesResponse:
        params = {"from": base.upper()}
        joined = _join_symbols(symbols)
        if joined:
            params["to"] = joined
        payload = await self._request("/latest", params=params)
        return LatestRatesResponse.from_payload(payload)

    async def get_historical_rates(self, date_range: str, from_code: str, symbols: str) -> HistoricalRatesResponse:
        params = {"from": from_code.upper(), "symbols": symbols.upper()}
        payload = await self._request(f"/{date_range}", params=params)
        return HistoricalRatesResponse.from_payload(payload)
