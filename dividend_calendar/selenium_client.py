import threading
from typing import Optional

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.common.by import By
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from dividend_calendar.http_client import FetchError


class SeleniumClient:
    """
    Alternativa ao HttpClient para páginas renderizadas via JS.
    Uma única sessão do WebDriver: as chamadas de fetch são serializadas.
    """

    def __init__(self, headless: bool = True, ready_selector: str = "body", driver=None):
        if driver is None:
            options = Options()

            if headless:
                options.add_argument("--headless=new")

            # ESSENCIAIS para WSL / containers / servidores
            options.add_argument("--no-sandbox")
            options.add_argument("--disable-dev-shm-usage")
            options.add_argument("--disable-gpu")
            options.add_argument("--window-size=1920,1080")
            options.add_argument("--disable-blink-features=AutomationControlled")

            driver = webdriver.Chrome(options=options)

        self.driver = driver
        self.ready_selector = ready_selector
        self._lock = threading.Lock()

    def fetch(self, url: str, timeout: float, wait_for: Optional[str] = None) -> bytes:
        with self._lock:
            try:
                self.driver.set_page_load_timeout(timeout)
                self.driver.get(url)
                WebDriverWait(self.driver, timeout).until(
                    EC.presence_of_element_located((By.CSS_SELECTOR, wait_for or self.ready_selector))
                )
                return self.driver.page_source.encode("utf-8")
            except WebDriverException as e:
                raise FetchError(f"{url}: {e.msg or e.__class__.__name__}") from e

    def close(self):
        self.driver.quit()
