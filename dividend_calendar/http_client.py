from typing import Optional

import requests


class FetchError(Exception):
    """Falha de transporte ao buscar uma página (conexão, timeout, status HTTP)."""


class HttpClient:
    HEADERS = {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
    }

    def __init__(self, session: Optional[requests.Session] = None):
        # a mesma sessão é compartilhada pelo pool inteiro (só GETs simples)
        self.session = session or requests.Session()
        self.session.headers.update(self.HEADERS)

    def fetch(self, url: str, timeout: float, wait_for: Optional[str] = None) -> bytes:
        # uma tentativa só, sem retry; wait_for só faz sentido no SeleniumClient
        try:
            response = self.session.get(url, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"{url}: {e}") from e

        return response.content

    def close(self):
        self.session.close()
