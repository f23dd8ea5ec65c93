"""Configuração do scraper (valores padrão + overrides por variável de ambiente)."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Mapping, Optional

ENV_PREFIX = "DIVIDEND_CALENDAR_"
FETCHERS = ("http", "browser")


@dataclass
class ScraperConfig:
    # Site
    base_url: str = "https://www.etoro.com"
    calendar_url: str = "https://www.etoro.com/investing/dividend-calendar/"

    # Cache
    cache_path: Path = Path("companies.json")

    # Pool de enriquecimento
    max_workers: int = 10
    wait_timeout: float = 60.0

    # Timeouts por requisição (s)
    calendar_timeout: float = 30.0
    detail_timeout: float = 10.0

    # "http" (requests) ou "browser" (selenium)
    fetcher: str = "http"

    # Peso da média móvel do tempo por item
    progress_alpha: float = 0.6

    def __post_init__(self) -> None:
        self.cache_path = Path(self.cache_path)

        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        for name in ("wait_timeout", "calendar_timeout", "detail_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.fetcher not in FETCHERS:
            raise ValueError(f"fetcher must be one of {FETCHERS}, got {self.fetcher!r}")
        if not 0 < self.progress_alpha <= 1:
            raise ValueError(f"progress_alpha must be in (0, 1], got {self.progress_alpha}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "ScraperConfig":
        environ = os.environ if environ is None else environ
        values = {}

        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            default = getattr(cls, f.name)
            if isinstance(default, Path):
                values[f.name] = Path(raw)
            elif isinstance(default, (int, float)):
                values[f.name] = type(default)(raw.strip())
            else:
                values[f.name] = raw

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
