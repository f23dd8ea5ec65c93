import json
import logging
import os
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Dict, Union

from dividend_calendar.company import Company

logger = logging.getLogger(__name__)


class CacheLoadError(Exception):
    pass


class CacheStore:
    DEFAULT_PATH = Path("companies.json")

    def __init__(self, path: Union[str, Path] = DEFAULT_PATH):
        self.path = Path(path)

    def load(self) -> Dict[str, Company]:
        logger.info("Loading companies...")
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f, parse_float=Decimal)
        except (OSError, ValueError) as e:
            raise CacheLoadError(f"{self.path}: {e}") from e

        if not isinstance(data, dict):
            raise CacheLoadError(f"{self.path}: expected a JSON object")

        companies: Dict[str, Company] = {}
        for key, entry in data.items():
            try:
                company = Company.from_dict(entry)
            except (KeyError, TypeError, ValueError, ArithmeticError) as e:
                raise CacheLoadError(f"{self.path}: bad entry {key!r}: {e!r}") from e
            companies[company.full_name] = company

        logger.info("Companies successfully loaded (%d).", len(companies))
        return companies

    def save(self, companies: Dict[str, Company]) -> bool:
        """
        Grava o mapa inteiro de uma vez (arquivo temporário + os.replace).
        Uma falha só é logada: o estado em memória não muda.
        """
        logger.info("Saving companies to file...")
        payload = {key: company.to_dict() for key, company in companies.items()}
        directory = self.path.parent

        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=directory, suffix=".tmp", delete=False
            ) as f:
                tmp_name = f.name
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError as e:
            logger.error("Failed to save companies to file! %s", e)
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            return False

        logger.info("Companies successfully saved.")
        return True
