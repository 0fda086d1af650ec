from dataclasses import dataclass
from typing import Dict, Optional, Tuple

UNKNOWN_FLAG = "🏳️"


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    display_name: str
    flag: str = UNKNOWN_FLAG


CURRENCIES: Tuple[CurrencyInfo, ...] = (
    CurrencyInfo("USD", "US Dollar", "🇺🇸"),
    CurrencyInfo("TRY", "Turkish Lira", "🇹🇷"),
    CurrencyInfo("EUR", "Euro", "🇪🇺"),
    CurrencyInfo("JPY", "Japanese Yen", "🇯🇵"),
    CurrencyInfo("GBP", "British Pound", "🇬🇧"),
    CurrencyInfo("AUD", "Australian Dollar", "🇦🇺"),
    CurrencyInfo("CAD", "Canadian Dollar", "🇨🇦"),
    CurrencyInfo("CHF", "Swiss Franc", "🇨🇭"),
    CurrencyInfo("CNY", "Chinese Yuan", "🇨🇳"),
    CurrencyInfo("SEK", "Swedish Krona", "🇸🇪"),
    CurrencyInfo("NZD", "New Zealand Dollar", "🇳🇿"),
)

CURRENCY_BY_CODE: Dict[str, CurrencyInfo] = {info.code: info for info in CURRENCIES}
# Symbols requested on every refresh; also the first-load display order.
TRACKED_SYMBOLS: Tuple[str, ...] = ("USD", "EUR", "TRY", "GBP", "JPY", "AUD", "CAD", "CHF", "CNY", "SEK", "NZD")


def get_currency(code: str) -> Optional[CurrencyInfo]:
    return CURRENCY_BY_CODE.get(code.upper())


def flag_for(code: str) -> str:
    info = get_currency(code)
    return info.flag if info else UNKNOWN_FLAG
