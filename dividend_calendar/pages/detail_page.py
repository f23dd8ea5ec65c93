from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from dividend_calendar.company import MarketCapParseError, parse_market_cap
from dividend_calendar.http_client import FetchError
from dividend_calendar.parser import parse_document, text_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetailLocators:
    PRICE = "span[data-automation-id=AssetShortInfoPrice]"
    STATS_ANCHOR = "#stats"
    STATS_ROWS = ".Table_row___1rR3"
    STATS_LABEL = "div.ets-plain-text"
    STATS_VALUE = "div.ets-number"

    MARKET_CAP_LABEL = "market cap"


@dataclass(frozen=True)
class Enrichment:
    price: float
    market_cap: Decimal

    @classmethod
    def failed(cls) -> "Enrichment":
        return cls(0.0, Decimal(0))

    @property
    def ok(self) -> bool:
        return self.price != 0


class DetailPage:
    BASE_URL = "https://www.etoro.com"

    def __init__(self, client, base_url: str = BASE_URL, timeout: float = 10.0):
        self.client = client
        self.base_url = base_url
        self.timeout = timeout

    def url_for(self, detail_link: str) -> str:
        return urljoin(self.base_url, detail_link)

    def enrich(self, detail_link: str, company_key: str) -> Enrichment:
        """
        Busca a página de detalhe e extrai preço e market cap.
        Qualquer falha devolve (0, 0); não há retry dentro da mesma execução.
        """
        url = self.url_for(detail_link)

        try:
            raw = self.client.fetch(url, self.timeout, wait_for=DetailLocators.PRICE)
        except FetchError as e:
            logger.warning("Couldn't connect to %s (%s)", url, e)
            return Enrichment.failed()

        try:
            document = parse_document(raw)
            price = self.extract_price(document)
        except Exception as e:
            logger.warning("Failed to fetch %s details! %s", company_key, e)
            return Enrichment.failed()

        return Enrichment(price, self.extract_market_cap(document, company_key))

    @staticmethod
    def extract_price(document: BeautifulSoup) -> float:
        node = document.select_one(DetailLocators.PRICE)
        if node is None:
            raise ValueError("price element not found")
        price = float(text_of(node).replace(",", ""))
        if not math.isfinite(price):
            raise ValueError(f"invalid price: {price}")
        return price

    @staticmethod
    def extract_market_cap(document: BeautifulSoup, company_key: str = "") -> Decimal:
        anchor = document.select_one(DetailLocators.STATS_ANCHOR)
        if anchor is None or anchor.parent is None:
            logger.debug("%s: stats block not found", company_key)
            return Decimal(0)

        for row in anchor.parent.select(DetailLocators.STATS_ROWS):
            label = row.select_one(DetailLocators.STATS_LABEL)
            if label is None or text_of(label).lower() != DetailLocators.MARKET_CAP_LABEL:
                continue

            value = row.select_one(DetailLocators.STATS_VALUE)
            if value is None:
                break

            try:
                return parse_market_cap(text_of(value))
            except MarketCapParseError as e:
                logger.warning("%s: %s", company_key, e)
                break

        return Decimal(0)
