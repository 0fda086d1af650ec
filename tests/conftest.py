import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from services.exchange.models import HistoricalRatesResponse, LatestRatesResponse


class FakeRatesClient:
    """In-memory stand-in for FrankfurterClient.

    ``gates`` lets a test hold a base's request open until it sets the event.
    """

    def __init__(self, rates: Optional[Dict[str, Optional[Dict[str, float]]]] = None):
        self.rates = rates or {}
        self.errors: Dict[str, Exception] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.latest_calls: List[tuple] = []

        self.history_rates: Optional[Dict[str, Dict[str, float]]] = None
        self.history_error: Optional[Exception] = None
        self.history_gates: Dict[str, asyncio.Event] = {}
        self.history_calls: List[tuple] = []

    async def get_latest_rates(self, base, symbols=None):
        self.latest_calls.append((base, symbols))
        gate = self.gates.get(base)
        if gate is not None:
            await gate.wait()
        if base in self.errors:
            raise self.errors[base]
        return LatestRatesResponse(amount=1.0, base=base, date="2024-01-30", rates=self.rates.get(base))

    async def get_historical_rates(self, date_range, from_code, symbols):
        self.history_calls.append((date_range, from_code, symbols))
        gate = self.history_gates.get(symbols)
        if gate is not None:
            await gate.wait()
        if self.history_error is not None:
            raise self.history_error
        return HistoricalRatesResponse(
            base=from_code,
            start_date=date_range.rstrip("."),
            end_date="2024-01-30",
            rates=self.history_rates,
        )


@pytest.fixture
def fake_client():
    return FakeRatesClient(
        rates={
            "USD": {"EUR": 0.92, "TRY": 32.5},
            "EUR": {"USD": 1.08, "TRY": 35.0},
            "GBP": {"USD": 1.27, "EUR": 1.16},
        }
    )
