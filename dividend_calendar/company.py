from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Set

NEW_TAG = "NEW"
FAVOURITE_TAG = "FAVOURITE"

# formato usado no companies.json (ex.: "05 Mar 2025")
CACHE_DATE_FORMAT = "%d %b %Y"
DISPLAY_DATE_FORMAT = "%d %B %Y"

_MULTIPLIERS = {
    "T": Decimal(10) ** 12,
    "B": Decimal(10) ** 9,
    "M": Decimal(10) ** 6,
}
_SUFFIXES = ["", "K", "M", "B", "T"]
_THOUSAND = Decimal(1000)


class MarketCapParseError(ValueError):
    pass


def parse_market_cap(text: str) -> Decimal:
    """
    "2.5B" -> 2500000000, "750M" -> 750000000, "1.2T" -> 1200000000000.
    Sem sufixo o multiplicador é 1.
    """
    raw = (text or "").strip().upper()
    multiplier = Decimal(1)

    if raw and raw[-1] in _MULTIPLIERS:
        multiplier = _MULTIPLIERS[raw[-1]]
        raw = raw[:-1].strip()

    try:
        value = Decimal(raw.replace(",", ""))
    except InvalidOperation:
        raise MarketCapParseError(f"invalid market cap: {text!r}") from None

    if not value.is_finite():
        raise MarketCapParseError(f"invalid market cap: {text!r}")

    return value * multiplier


def format_market_cap(value: Decimal) -> str:
    index = 0
    while value >= _THOUSAND and index < len(_SUFFIXES) - 1:
        value = value / _THOUSAND
        index += 1

    value = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{value}{_SUFFIXES[index]}"


@dataclass
class Company:
    """Uma linha do calendário de dividendos, mais os campos do enriquecimento."""

    name: str
    full_name: str
    sector: str
    ex_dividend_date: date
    dividend_date: date
    detail_link: str
    dividend_per_share: float
    price: float = 0.0
    market_cap: Decimal = Decimal(0)
    tags: Set[str] = field(default_factory=set)

    @property
    def is_enriched(self) -> bool:
        return self.price != 0

    @property
    def dividend_yield(self) -> float:
        if self.price == 0:
            return 0.0
        return self.dividend_per_share / self.price

    @property
    def market_cap_string(self) -> str:
        return format_market_cap(self.market_cap)

    @property
    def ex_dividend_date_string(self) -> str:
        return self.ex_dividend_date.strftime(DISPLAY_DATE_FORMAT)

    @property
    def dividend_date_string(self) -> str:
        return self.dividend_date.strftime(DISPLAY_DATE_FORMAT)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "fullName": self.full_name,
            "sector": self.sector,
            "exDividendDate": self.ex_dividend_date.strftime(CACHE_DATE_FORMAT),
            "dividendDate": self.dividend_date.strftime(CACHE_DATE_FORMAT),
            "price": self.price,
            "marketHref": self.detail_link,
            "dividendPerShare": self.dividend_per_share,
            "marketCap": format(self.market_cap, "f"),
            "tags": sorted(self.tags),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Company":
        dividend_per_share = float(data["dividendPerShare"])
        price = float(data.get("price") or 0)
        if not (math.isfinite(dividend_per_share) and math.isfinite(price)):
            raise ValueError(f"non-finite number in {data.get('fullName')!r}")

        return cls(
            name=data["name"],
            full_name=data["fullName"],
            sector=data.get("sector") or "",
            ex_dividend_date=datetime.strptime(data["exDividendDate"], CACHE_DATE_FORMAT).date(),
            dividend_date=datetime.strptime(data["dividendDate"], CACHE_DATE_FORMAT).date(),
            detail_link=data["marketHref"],
            dividend_per_share=dividend_per_share,
            price=price,
            market_cap=Decimal(str(data.get("marketCap") or 0)),
            tags=set(data.get("tags") or []),
        )
