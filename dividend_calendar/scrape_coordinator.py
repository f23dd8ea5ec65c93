from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import date
from enum import Enum
from typing import Callable, Dict, List, Optional

from dividend_calendar.cache_store import CacheLoadError
from dividend_calendar.company import NEW_TAG, Company
from dividend_calendar.company_registry import CompanyRegistry
from dividend_calendar.pages.calendar_page import ParseFailure
from dividend_calendar.pages.detail_page import Enrichment
from dividend_calendar.progress_tracker import ProgressTracker

logger = logging.getLogger(__name__)

ApplyResult = Callable[[str, Company, Enrichment], bool]


class RunMode(Enum):
    COLD_EXTRACT = "cold_extract"
    WARM_UPDATE = "warm_update"
    IDLE = "idle"


def enrich_company(detail_page, apply_result: ApplyResult, tracker: ProgressTracker, company: Company) -> None:
    """Corpo de uma tarefa do pool: sempre aplica um resultado e avisa o tracker uma vez."""
    try:
        result = detail_page.enrich(company.detail_link, company.full_name)
    except Exception:
        logger.exception("Unexpected error enriching %s", company.full_name)
        result = Enrichment.failed()

    try:
        apply_result(company.full_name, company, result)
    except Exception:
        logger.exception("Unexpected error applying result for %s", company.full_name)
    finally:
        tracker.record_completion()


class ScrapeCoordinator:
    """
    Extração completa (sem cache) ou atualização incremental (com cache)
    do calendário de dividendos, seguida da gravação do cache.
    """

    def __init__(
        self,
        calendar_page,
        detail_page,
        store,
        max_workers: int = 10,
        wait_timeout: float = 60.0,
        progress_alpha: float = 0.6,
        today: Callable[[], date] = date.today,
    ):
        self.calendar_page = calendar_page
        self.detail_page = detail_page
        self.store = store
        self.max_workers = max_workers
        self.wait_timeout = wait_timeout
        self.progress_alpha = progress_alpha
        self.today = today

        self.registry = CompanyRegistry()
        self.state = RunMode.IDLE
        self.last_mode: Optional[RunMode] = None
        self.progress_tracker: Optional[ProgressTracker] = None

    # ------------------ public ------------------

    def run(self) -> Dict[str, Company]:
        try:
            companies = self.store.load()
        except CacheLoadError as e:
            logger.info("Failed to load companies from file! (%s)", e)
            companies = {}

        if not companies:
            return self.run_cold_extract()
        return self.run_warm_update(companies)

    def run_cold_extract(self) -> Dict[str, Company]:
        self._enter(RunMode.COLD_EXTRACT)
        self.registry = CompanyRegistry()

        today = self.today()
        logger.info("Extracting companies...")
        rows = self.calendar_page.fetch_rows()
        tracker = self._new_tracker(len(rows))

        executor = self._new_pool()
        futures: List[Future] = []

        for row in rows:
            outcome = self.calendar_page.parse_row(row)
            if isinstance(outcome, ParseFailure):
                logger.warning("Couldn't extract company! %s", outcome.reason)
                continue

            if outcome.dividend_date < today:
                logger.info("Skipping %s, dividend date already passed.", outcome.full_name)
                tracker.record_completion()
                continue

            if outcome.full_name in self.registry:
                logger.debug("Duplicate row for %s, skipping", outcome.full_name)
                tracker.record_completion()
                continue

            self.registry.put(outcome)
            futures.append(self._schedule(executor, tracker, outcome))

        self._await(executor, futures)
        logger.info("Extraction completed.")
        return self._finish()

    def run_warm_update(self, companies: Optional[Dict[str, Company]] = None) -> Dict[str, Company]:
        self._enter(RunMode.WARM_UPDATE)
        if companies is not None:
            self.registry = CompanyRegistry(companies)

        logger.info("Updating companies...")
        rows = self.calendar_page.fetch_rows()

        logger.info("Removing outdated companies...")
        today = self.today()
        removed = self.registry.remove_expired(today)
        logger.info("Removed %d outdated companies.", len(removed))

        # total = linhas do calendário atual, não o tamanho do cache após a limpeza
        tracker = self._new_tracker(len(rows))

        executor = self._new_pool()
        futures: List[Future] = []
        scheduled = set()

        for row in rows:
            key = self.calendar_page.row_key(row)
            existing = self.registry.get(key) if key else None

            if key and key in scheduled:
                logger.debug("Duplicate row for %s, skipping", key)
                tracker.record_completion()
                continue

            if existing is not None and existing.is_enriched:
                self.registry.discard_tag(key, NEW_TAG)
                tracker.record_completion()
                continue

            outcome = self.calendar_page.parse_row(row)
            if isinstance(outcome, ParseFailure):
                logger.warning("Couldn't extract company! %s", outcome.reason)
                continue

            if outcome.dividend_date < today:
                logger.info("Skipping %s, dividend date already passed.", outcome.full_name)
                tracker.record_completion()
                continue

            previous = self.registry.get(outcome.full_name)
            if previous is not None:
                # re-enriquecer sem perder tags de fora do pipeline (ex.: FAVOURITE)
                outcome.tags |= previous.tags
                logger.info("Refreshing %s...", outcome.full_name)
            else:
                logger.info("Adding %s to companies...", outcome.full_name)

            scheduled.add(key)
            scheduled.add(outcome.full_name)
            self.registry.put(outcome)
            futures.append(self._schedule(executor, tracker, outcome))

        self._await(executor, futures)
        logger.info("Update completed.")
        return self._finish()

    # ------------------ helpers ------------------

    def _enter(self, mode: RunMode) -> None:
        self.state = mode
        self.last_mode = mode

    def _new_tracker(self, total: int) -> ProgressTracker:
        self.progress_tracker = ProgressTracker(total, alpha=self.progress_alpha)
        return self.progress_tracker

    def _new_pool(self) -> ThreadPoolExecutor:
        return ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="enrich")

    def _schedule(self, executor: ThreadPoolExecutor, tracker: ProgressTracker, company: Company) -> Future:
        return executor.submit(
            enrich_company, self.detail_page, self.registry.apply_enrichment, tracker, company
        )

    def _await(self, executor: ThreadPoolExecutor, futures: List[Future]) -> None:
        try:
            _, pending = wait(futures, timeout=self.wait_timeout)
            if pending:
                logger.warning(
                    "Could not fetch all prices in time! %d task(s) still running.", len(pending)
                )
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _finish(self) -> Dict[str, Company]:
        companies = self.registry.snapshot()
        self.store.save(companies)
        self.state = RunMode.IDLE
        return companies
