import asyncio
from dataclasses import replace
from datetime import date, timedelta
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from config.logging import get_logger
from config.settings import DEFAULT_BASE_AMOUNT, DEFAULT_BASE_CURRENCY, HISTORY_DAYS
from services.exchange.currencies import CURRENCY_BY_CODE, TRACKED_SYMBOLS, CurrencyInfo
from services.exchange.errors import (
    EmptyResponseError,
    MalformedResponseError,
    NetworkError,
    ProtocolError,
)
from services.exchange.exchange_rates import FrankfurterClient, date_range_from
from services.exchange.projection import merge_order, order_currencies, parse_amount, project, shape_history
from services.exchange.state import ConversionState, HistoricalState

logger = get_logger("CurrencyViewModel")

EMPTY_RESPONSE_MESSAGE = "API response is empty or invalid."
NETWORK_ERROR_MESSAGE = "Network error. Please check your connection."

StateListener = Callable[[ConversionState], None]
HistoryListener = Callable[[HistoricalState], None]


def error_message_for(exc: Exception) -> str:
    if isinstance(exc, (EmptyResponseError, MalformedResponseError)):
        return EMPTY_RESPONSE_MESSAGE
    if isinstance(exc, NetworkError):
        return NETWORK_ERROR_MESSAGE
    if isinstance(exc, ProtocolError):
        return f"API error: {exc.status} - {exc.message}"
    return f"An unexpected error occurred: {exc}"


class CurrencyViewModel:
    def __init__(
        self,
        client: Optional[FrankfurterClient] = None,
        registry: Mapping[str, CurrencyInfo] = CURRENCY_BY_CODE,
        tracked_symbols: Sequence[str] = TRACKED_SYMBOLS,
        base_currency: str = DEFAULT_BASE_CURRENCY,
        base_amount: str = DEFAULT_BASE_AMOUNT,
        history_days: int = HISTORY_DAYS,
        today: Callable[[], date] = date.today,
    ):
        self.client = client or FrankfurterClient()
        self.registry = registry
        self.tracked_symbols = tuple(tracked_symbols)
        self.history_days = history_days
        self.today = today

        self._state = ConversionState(
            base_currency_code=base_currency.upper(),
            base_amount_text=base_amount,
            display_order=merge_order(self.tracked_symbols, [base_currency.upper()]),
        )
        self._history = HistoricalState()
        self._listeners: List[StateListener] = []
        self._history_listeners: List[HistoryListener] = []

        self._generation = 0
        self._refresh_task: Optional[asyncio.Task] = None
        # Last successful snapshot and the base it belongs to.
        self._rates: Optional[Dict[str, float]] = None
        self._rates_base: Optional[str] = None

        self._history_generation = 0
        self._history_task: Optional[asyncio.Task] = None

    @property
    def state(self) -> ConversionState:
        return self._state

    @property
    def history(self) -> HistoricalState:
        return self._history

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def subscribe_history(self, listener: HistoryListener) -> Callable[[], None]:
        self._history_listeners.append(listener)
        return lambda: self._history_listeners.remove(listener)

    def _notify(self, listeners, snapshot) -> None:
        for listener in list(listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("State listener %r failed", listener)

    def _publish(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        self._notify(self._listeners, self._state)

    def _publish_history(self, history: HistoricalState) -> None:
        self._history = history
        self._notify(self._history_listeners, history)

    async def start(self) -> None:
        self._schedule_refresh()
        await self.wait_idle()

    def set_base_currency(self, code: str) -> Optional[asyncio.Task]:
        code = code.upper()
        if code == self._state.base_currency_code:
            return None
        self._publish(base_currency_code=code)
        return self._schedule_refresh()

    def set_base_amount(self, text: str) -> None:
        self._publish(base_amount_text=text)
        if self._rates is None or self._rates_base != self._state.base_currency_code:
            # A fetch in flight picks up the new amount when it lands; otherwise retry the failed one.
            if self._refresh_task is None or self._refresh_task.done():
                self._schedule_refresh()
            return
        self._publish(display_currencies=tuple(self._project(self._rates)))

    def reorder(self, new_order: Sequence[str]) -> None:
        order = merge_order([code.upper() for code in new_order], self._state.display_order)
        currencies = order_currencies(self._state.display_currencies, order)
        self._publish(display_order=order, display_currencies=tuple(currencies))

    def fetch_history(self, base_code: str, target_code: str) -> asyncio.Task:
        self._history_generation += 1
        generation = self._history_generation
        self._publish_history(
            HistoricalState(
                data=None,
                is_loading=True,
                base_currency_code=base_code.upper(),
                target_currency_code=target_code.upper(),
            )
        )
        self._history_task = asyncio.create_task(
            self._load_history(generation, base_code.upper(), target_code.upper())
        )
        return self._history_task

    def clear_history(self) -> None:
        self._history_generation += 1
        self._publish_history(HistoricalState())
        logger.debug("Historical data cleared.")

    async def wait_idle(self) -> None:
        while self._refresh_task is not None and not self._refresh_task.done():
            await asyncio.gather(self._refresh_task, return_exceptions=True)

    async def wait_history(self) -> None:
        while self._history_task is not None and not self._history_task.done():
            await asyncio.gather(self._history_task, return_exceptions=True)

    async def close(self) -> None:
        for task in (self._refresh_task, self._history_task):
            if task is not None and not task.done():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)

    def _tracked_symbols(self, base_code: str) -> List[str]:
        symbols = []
        for code in list(self.tracked_symbols) + [base_code]:
            if code != base_code and code not in symbols:
                symbols.append(code)
        return symbols

    def _project(self, rates: Mapping[str, float]):
        return project(
            self._state.base_currency_code,
            parse_amount(self._state.base_amount_text),
            rates,
            self.registry,
            self._state.display_order,
        )

    def _schedule_refresh(self) -> asyncio.Task:
        if self._refresh_task is not None and not self._refresh_task.done():
            self._refresh_task.cancel()
        self._generation += 1
        self._refresh_task = asyncio.create_task(
            self.refresh(self._generation, self._state.base_currency_code)
        )
        return self._refresh_task

    async def refresh(self, generation: int, base_code: str) -> None:
        if generation == self._generation:
            self._publish(is_loading=True, error_message=None)
        try:
            symbols = self._tracked_symbols(base_code)
            logger.info("Fetching rates for base: %s, to: %s", base_code, ",".join(symbols))
            response = await self.client.get_latest_rates(base_code, symbols or None)
            if generation != self._generation:
                logger.debug("Discarding stale rates for %s", base_code)
                return
            if response.rates is None:
                raise EmptyResponseError(f"No rates in response for base {base_code}")
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if generation != self._generation:
                return
            logger.error("Rate fetch for %s failed: %s", base_code, exc)
            self._rates = None
            self._rates_base = None
            self._publish(error_message=error_message_for(exc), display_currencies=())
        else:
            logger.debug("Rates received: %s", response.rates)
            self._rates = dict(response.rates)
            self._rates_base = base_code
            currencies = self._project(self._rates)
            self._publish(
                display_currencies=tuple(currencies),
                display_order=merge_order(self._state.display_order, [c.code for c in currencies]),
            )
        finally:
            if generation == self._generation:
                self._publish(is_loading=False)

    async def _load_history(self, generation: int, base_code: str, target_code: str) -> None:
        start = self.today() - timedelta(days=self.history_days - 1)
        date_range = date_range_from(start.isoformat())
        logger.info(
            "Requesting historical data for range: %s, from: %s, symbols: %s",
            date_range,
            base_code,
            target_code,
        )
        try:
            response = await self.client.get_historical_rates(date_range, base_code, target_code)
            data = shape_history(response.rates, target_code)
            if not data and response.rates:
                logger.warning("Historical data received, but no rates found for %s", target_code)
            elif response.rates is None:
                logger.warning(
                    "Historical rates missing. Base: %s, Start: %s, End: %s",
                    response.base,
                    response.start_date,
                    response.end_date,
                )
            else:
                logger.debug("Historical data processed: %s entries", len(data))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("Error fetching historical data for %s to %s: %s", base_code, target_code, exc)
            data = {}
        if generation != self._history_generation:
            return
        self._publish_history(
            HistoricalState(
                data=data,
                is_loading=False,
                base_currency_code=base_code,
                target_currency_code=target_code,
            )
        )
