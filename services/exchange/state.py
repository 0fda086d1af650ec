from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from services.exchange.currencies import CurrencyInfo


@dataclass(frozen=True)
class DisplayCurrency:
    info: CurrencyInfo
    relative_rate: Optional[float] = None
    converted_amount: Optional[float] = None

    @property
    def code(self) -> str:
        return self.info.code


@dataclass(frozen=True)
class ConversionState:
    base_currency_code: str
    base_amount_text: str
    display_order: Tuple[str, ...] = ()
    display_currencies: Tuple[DisplayCurrency, ...] = ()
    is_loading: bool = False
    error_message: Optional[str] = None


@dataclass(frozen=True)
class HistoricalState:
    # None means "not requested" (or still loading when is_loading is set);
    # an empty dict means the fetch finished with no data.
    data: Optional[Dict[str, float]] = None
    is_loading: bool = False
    base_currency_code: Optional[str] = None
    target_currency_code: Optional[str] = None
