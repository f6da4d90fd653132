"""Browser engine - Selenium Firefox sessions seeded from stored cookies

A session is a Firefox WebDriver. Stored session state is the JSON document
written by export_storage_state():

    {"exported_at": "2025-02-05T14:30:22Z", "cookies": [{name, value, domain, ...}]}

Cookies can only be added for the domain the browser is currently on, so
seeding visits each cookie domain once before adding its cookies.
"""
import json
import logging
import time
from typing import Any, Dict, List, Optional

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.firefox.options import Options as FirefoxOptions
from selenium.webdriver.firefox.service import Service as FirefoxService
from selenium.webdriver.remote.webdriver import WebDriver

from .config import SearchConfig
from .search_logging import log

logger = logging.getLogger(__name__)


class LoginError(Exception):
    """Raised when a platform login flow cannot be completed"""
    pass


def _selenium_cookie(cookie: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the fields WebDriver.add_cookie accepts."""
    selenium_cookie = {
        'name': cookie['name'],
        'value': cookie['value'],
        'path': cookie.get('path', '/'),
        'secure': cookie.get('secure', True),
    }
    if cookie.get('domain'):
        selenium_cookie['domain'] = cookie['domain']
    if cookie.get('httpOnly') is not None:
        selenium_cookie['httpOnly'] = cookie['httpOnly']
    if 'expiry' in cookie:
        selenium_cookie['expiry'] = int(cookie['expiry'])
    return selenium_cookie


def type_slowly(element, text: str, delay: float) -> None:
    """Send keys one character at a time, like a person typing."""
    for char in text:
        element.send_keys(char)
        if delay:
            time.sleep(delay)


def export_storage_state(driver: WebDriver) -> str:
    """Serialize a session's cookies as storage state."""
    return json.dumps({
        'exported_at': time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        'cookies': driver.get_cookies(),
    })


def cookies_by_domain(cookies: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """Group cookies by host (leading dot stripped), keeping first-seen order."""
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for cookie in cookies:
        host = cookie.get('domain', '').lstrip('.')
        if host:
            grouped.setdefault(host, []).append(cookie)
    return grouped


class BrowserEngine:
    """Creates Firefox sessions and moves their state in and out"""

    def __init__(self, config: Optional[SearchConfig] = None):
        self.config = config or SearchConfig()

    def _launch(self) -> WebDriver:
        options = FirefoxOptions()
        if self.config.headless:
            options.add_argument("--headless")

        service = FirefoxService(executable_path=self.config.geckodriver_path)
        driver = webdriver.Firefox(service=service, options=options)
        driver.set_page_load_timeout(self.config.navigation_timeout)

        mode = "headless" if self.config.headless else "GUI"
        log.info(logger, "browser", "session_created", f"Browser created ({mode} mode)", mode=mode)
        return driver

    def new_session(self) -> WebDriver:
        """Fresh session with no cookies."""
        return self._launch()

    def new_session_with_state(self, storage_state: str) -> WebDriver:
        """
        Fresh session seeded with cookies from stored state.

        Raises:
            ValueError: storage_state is not valid JSON
        """
        state = json.loads(storage_state)
        if not isinstance(state, dict):
            state = {}
        cookies = state.get('cookies', [])

        driver = self._launch()
        try:
            added = 0
            failed = 0
            for host, host_cookies in cookies_by_domain(cookies).items():
                driver.get(f"https://{host}")
                for cookie in host_cookies:
                    try:
                        driver.add_cookie(_selenium_cookie(cookie))
                        added += 1
                    except WebDriverException as e:
                        failed += 1
                        log.debug(logger, "browser", "cookie_rejected", "Cookie rejected",
                                  cookie=cookie.get('name'), domain=host, error=str(e))
        except Exception:
            self.close(driver)
            raise

        log.info(logger, "browser", "session_seeded", f"Added {added} cookies ({failed} failed)",
                 added=added, failed=failed, exported_at=state.get('exported_at'))
        return driver

    def close(self, driver: WebDriver) -> None:
        """Quit the browser, ignoring an already dead session."""
        try:
            driver.quit()
        except WebDriverException as e:
            log.warning(logger, "browser", "close_failed", "Browser quit failed",
                        error=str(e))
