from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import List, Optional

from fastapi import Body, FastAPI, HTTPException, Query

from config.logging import get_logger
from services.exchange.currencies import CURRENCIES, get_currency
from services.exchange.projection import format_amount, format_rate, history_bounds, history_series
from services.exchange.state import ConversionState, HistoricalState
from services.exchange.view_model import CurrencyViewModel

logger = get_logger("ConverterUI")


def _state_payload(state: ConversionState) -> dict:
    return {
        "base_currency_code": state.base_currency_code,
        "base_amount_text": state.base_amount_text,
        "display_order": list(state.display_order),
        "is_loading": state.is_loading,
        "error_message": state.error_message,
        "currencies": [
            {
                "code": currency.code,
                "name": currency.info.display_name,
                "flag": currency.info.flag,
                "relative_rate": currency.relative_rate,
                "converted_amount": currency.converted_amount,
                "rate_text": format_rate(currency.relative_rate),
                "amount_text": format_amount(currency.converted_amount),
            }
            for currency in state.display_currencies
        ],
    }


def _history_payload(history: HistoricalState) -> dict:
    bounds = history_bounds(history.data)
    return {
        "base": history.base_currency_code,
        "target": history.target_currency_code,
        "is_loading": history.is_loading,
        "data": history.data,
        "series": [{"date": day, "rate": rate} for day, rate in history_series(history.data)],
        "min": bounds[0] if bounds else None,
        "max": bounds[1] if bounds else None,
    }


def _require_currency(code: str) -> str:
    info = get_currency(code)
    if info is None:
        raise HTTPException(status_code=404, detail=f"Unknown currency: {code}")
    return info.code


def create_app(view_model: Optional[CurrencyViewModel] = None) -> FastAPI:
    vm = view_model or CurrencyViewModel()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await vm.start()
        logger.info("Converter ready, base=%s", vm.state.base_currency_code)
        yield
        await vm.close()

    app = FastAPI(title="Currency Converter", lifespan=lifespan)
    app.state.view_model = vm

    @app.get("/api/currencies")
    async def list_currencies():
        return [asdict(info) for info in CURRENCIES]

    @app.get("/api/state")
    async def get_state():
        return _state_payload(vm.state)

    @app.put("/api/base")
    async def set_base(code: str = Query(..., description="ISO 4217 code")):
        vm.set_base_currency(_require_currency(code))
        await vm.wait_idle()
        return _state_payload(vm.state)

    @app.put("/api/amount")
    async def set_amount(value: str = Query(..., description="Raw amount input")):
        vm.set_base_amount(value)
        await vm.wait_idle()
        return _state_payload(vm.state)

    @app.put("/api/order")
    async def set_order(order: List[str] = Body(...)):
        vm.reorder(order)
        return _state_payload(vm.state)

    @app.get("/api/history")
    async def get_history(target: str = Query(..., description="Target currency code")):
        target_code = _require_currency(target)
        vm.fetch_history(vm.state.base_currency_code, target_code)
        await vm.wait_history()
        return _history_payload(vm.history)

    @app.delete("/api/history")
    async def delete_history():
        vm.clear_history()
        return _history_payload(vm.history)

    return app


app = create_app()
