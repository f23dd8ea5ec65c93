from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional

from dividend_calendar.company import Company
from dividend_calendar.pages.detail_page import Enrichment

logger = logging.getLogger(__name__)


class CompanyRegistry:
    """
    Mapa fullName -> Company (ordem de inserção preservada) com um lock.

    Inserções e remoções acontecem na thread coordenadora; as threads de
    enriquecimento só usam apply_enrichment.
    """

    def __init__(self, companies: Optional[Dict[str, Company]] = None):
        self._companies: Dict[str, Company] = dict(companies or {})
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._companies)

    def __contains__(self, full_name: str) -> bool:
        with self._lock:
            return full_name in self._companies

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._companies)

    def get(self, full_name: str) -> Optional[Company]:
        with self._lock:
            return self._companies.get(full_name)

    def put(self, company: Company) -> None:
        with self._lock:
            self._companies[company.full_name] = company

    def remove_expired(self, today: date) -> List[str]:
        with self._lock:
            expired = [key for key, c in self._companies.items() if c.dividend_date < today]
            for key in expired:
                del self._companies[key]
        return expired

    def discard_tag(self, full_name: str, tag: str) -> None:
        with self._lock:
            company = self._companies.get(full_name)
            if company is not None:
                company.tags.discard(tag)

    def apply_enrichment(self, full_name: str, company: Company, result: Enrichment) -> bool:
        """
        Aplica preço/market cap ao registro. Ignora o resultado se a entrada
        foi removida ou substituída, ou se um (0, 0) sobrescreveria um preço já obtido.
        """
        with self._lock:
            current = self._companies.get(full_name)
            if current is not company:
                logger.debug("%s: entry replaced or removed, dropping result", full_name)
                return False
            if not result.ok and current.is_enriched:
                return False

            current.price = result.price
            current.market_cap = result.market_cap
            return True

    def snapshot(self) -> Dict[str, Company]:
        # cópias independentes: escritas tardias não chegam em quem lê
        with self._lock:
            return {key: replace(c, tags=set(c.tags)) for key, c in self._companies.items()}
