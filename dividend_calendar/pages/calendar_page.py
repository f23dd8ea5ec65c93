from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Union

from bs4.element import Tag

from dividend_calendar.company import NEW_TAG, Company
from dividend_calendar.http_client import FetchError
from dividend_calendar.parser import parse_document, text_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalendarLocators:
    # ------------------ Table ------------------
    ROWS = "tbody.ec-reports-container tr"
    CELLS = "td"
    COMPANY_KEY_CELL = "td[data-company-name]"

    # ------------------ Cells ------------------
    COMPANY_NAME = "span.ec-company__name"
    DETAIL_LINK = "a"

    # ------------------ Attributes ------------------
    FULL_NAME_ATTR = "data-company-name"
    SECTOR_ATTR = "data-sector-name"
    EX_DIVIDEND_ATTR = "data-exdividend-date"
    PAYMENT_DATE_ATTR = "data-payment-date"
    NET_DIVIDEND_ATTR = "data-net-dividend"


@dataclass(frozen=True)
class ParseFailure:
    reason: str


class CalendarPage:
    URL = "https://www.etoro.com/investing/dividend-calendar/"
    MIN_CELLS = 6

    def __init__(self, client, url: str = URL, timeout: float = 30.0):
        self.client = client
        self.url = url
        self.timeout = timeout

    # ------------------ public ------------------

    def fetch_rows(self) -> List[Tag]:
        """Linhas cruas do calendário; lista vazia se a página não pôde ser buscada."""
        try:
            raw = self.client.fetch(self.url, self.timeout, wait_for=CalendarLocators.ROWS)
        except FetchError as e:
            logger.warning("Couldn't connect to %s (%s)", self.url, e)
            return []

        rows = parse_document(raw).select(CalendarLocators.ROWS)
        logger.debug("fetch_rows(): %d rows in calendar", len(rows))
        return rows

    @staticmethod
    def row_key(row: Tag) -> str:
        cell = row.select_one(CalendarLocators.COMPANY_KEY_CELL)
        if cell is None:
            return ""
        return (cell.get(CalendarLocators.FULL_NAME_ATTR) or "").strip()

    def parse_row(self, row: Tag) -> Union[Company, ParseFailure]:
        cells = row.select(CalendarLocators.CELLS)
        if len(cells) < self.MIN_CELLS:
            return ParseFailure(f"expected {self.MIN_CELLS} cells, got {len(cells)}")

        name = text_of(cells[0].select_one(CalendarLocators.COMPANY_NAME))
        full_name = (cells[0].get(CalendarLocators.FULL_NAME_ATTR) or "").strip()
        sector = cells[1].get(CalendarLocators.SECTOR_ATTR)
        link = cells[0].select_one(CalendarLocators.DETAIL_LINK)
        detail_link = (link.get("href") or "").strip() if link is not None else ""

        if not name:
            return ParseFailure("missing company name")
        if not full_name:
            return ParseFailure(f"{name}: missing full name")
        if sector is None:
            return ParseFailure(f"{full_name}: missing sector")
        if not detail_link:
            return ParseFailure(f"{full_name}: missing detail link")

        ex_dividend_date = self._parse_date(cells[2].get(CalendarLocators.EX_DIVIDEND_ATTR))
        dividend_date = self._parse_date(cells[3].get(CalendarLocators.PAYMENT_DATE_ATTR))
        if ex_dividend_date is None or dividend_date is None:
            return ParseFailure(f"{full_name}: missing or malformed dividend dates")

        dividend_per_share = self._parse_float(cells[5].get(CalendarLocators.NET_DIVIDEND_ATTR))
        if dividend_per_share is None:
            return ParseFailure(f"{full_name}: missing or malformed dividend per share")

        return Company(
            name=name,
            full_name=full_name,
            sector=sector.strip(),
            ex_dividend_date=ex_dividend_date,
            dividend_date=dividend_date,
            detail_link=detail_link,
            dividend_per_share=dividend_per_share,
            tags={NEW_TAG},
        )

    # ------------------ helpers ------------------

    @staticmethod
    def _parse_date(value: Optional[str]) -> Optional[date]:
        try:
            return date.fromisoformat((value or "").strip())
        except ValueError:
            return None

    @staticmethod
    def _parse_float(value: Optional[str]) -> Optional[float]:
        try:
            number = float((value or "").strip())
        except ValueError:
            return None
        return number if math.isfinite(number) else None
