import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Demo script for the currency converter.
# Talks to the public Frankfurter API; override EXCHANGE_API_BASE to point elsewhere.

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

load_dotenv(dotenv_path=ROOT_DIR / ".env")

from services.exchange.projection import format_amount, format_rate, history_bounds
from services.exchange.view_model import CurrencyViewModel


async def main() -> None:
    base = os.getenv("DEMO_BASE", "USD")
    amount = os.getenv("DEMO_AMOUNT", "100")
    target = os.getenv("DEMO_TARGET", "EUR")

    vm = CurrencyViewModel(base_currency=base, base_amount=amount)
    await vm.start()
    state = vm.state
    if state.error_message:
        print(state.error_message)
        return

    for currency in state.display_currencies:
        print(
            f"{currency.info.flag} {currency.code:<4} {currency.info.display_name:<20}"
            f" {format_rate(currency.relative_rate):>12} {format_amount(currency.converted_amount):>14}"
        )

    vm.fetch_history(state.base_currency_code, target)
    await vm.wait_history()
    bounds = history_bounds(vm.history.data)
    if bounds:
        print(f"\n{state.base_currency_code} / {target} (last {vm.history_days} days): "
              f"Min: {bounds[0]:.4f} - Max: {bounds[1]:.4f}")
    else:
        print(f"\nNo historical data for {state.base_currency_code} / {target}.")
    await vm.close()


if __name__ == "__main__":
    asyncio.run(main())
