from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

REPORT_STEP = 5


class ProgressTracker:
    """
    Conta as tarefas de enriquecimento concluídas de um total conhecido e
    estima o tempo restante com uma média móvel exponencial por item.

    Pode ser chamado de várias threads ao mesmo tempo: todo o estado
    (contador, relógio, média e último percentual) muda dentro de um único lock.
    """

    def __init__(
        self,
        total: int,
        alpha: float = 0.6,
        clock: Callable[[], float] = time.monotonic,
        on_report: Optional[Callable[[int, int, float], None]] = None,
    ):
        self.total = total
        self.alpha = alpha
        self.completed = 0
        self.average_duration = 0.0
        self.last_reported_percent = 0

        self._clock = clock
        self._on_report = on_report or self._log_status
        self._last_tick = clock()
        self._lock = threading.Lock()

    def record_completion(self) -> None:
        with self._lock:
            self.completed += 1

            now = self._clock()
            elapsed = now - self._last_tick
            self._last_tick = now

            if self.completed == 1:
                self.average_duration = elapsed
            else:
                self.average_duration = elapsed * self.alpha + (1 - self.alpha) * self.average_duration

            if self.total <= 0:
                return

            percent = self.completed * 100 // self.total
            if percent >= REPORT_STEP and percent % REPORT_STEP == 0 and percent != self.last_reported_percent:
                self.last_reported_percent = percent
                self._on_report(percent, self.completed, self.remaining_seconds())

    def remaining_seconds(self) -> float:
        return max(self.total - self.completed, 0) * self.average_duration

    @staticmethod
    def format_remaining(seconds: float) -> str:
        seconds = int(seconds)
        return f"{seconds // 60}:{seconds % 60:02d}"

    def _log_status(self, percent: int, completed: int, remaining: float) -> None:
        logger.info("Processed %d/%d companies (%d%%)", completed, self.total, percent)
        logger.info("Remaining time: %s", self.format_remaining(remaining))
