"""Instagram login flow and keyword search URLs"""
import logging
import time
from urllib.parse import quote

from selenium.common.exceptions import NoSuchElementException, TimeoutException
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from .browser import LoginError, export_storage_state, type_slowly
from .config import SearchConfig
from .models import Credential
from .search_logging import log

logger = logging.getLogger(__name__)

INSTAGRAM_LOGIN_URL = "https://www.instagram.com/accounts/login/"
INSTAGRAM_SEARCH_URL = "https://www.instagram.com/explore/search/keyword/"


def get_storage_state_after_instagram_login(
    credential: Credential,
    driver: WebDriver,
    config: SearchConfig,
) -> str:
    """Log into Instagram in `driver` and return its serialized storage state

    Raises:
        LoginError: Login form missing or the page never left the login URL
    """
    log.info(logger, "login", "login_started", "Logging into Instagram",
             platform="instagram", credential_key=credential.key)

    try:
        driver.get(INSTAGRAM_LOGIN_URL)

        username_input = WebDriverWait(driver, config.navigation_timeout).until(
            EC.presence_of_element_located((By.NAME, "username"))
        )
        type_slowly(username_input, credential.username, config.typing_delay)

        password_input = driver.find_element(By.NAME, "password")
        type_slowly(password_input, credential.password, config.typing_delay)

        login_page_url = driver.current_url
        driver.find_element(By.CSS_SELECTOR, "button[type='submit']").click()

        WebDriverWait(driver, config.navigation_timeout).until(EC.url_changes(login_page_url))
    except (TimeoutException, NoSuchElementException) as e:
        raise LoginError(f"Instagram login failed for {credential.key}: {e.msg or type(e).__name__}") from e

    time.sleep(config.post_login_wait)

    storage_state = export_storage_state(driver)
    log.info(logger, "login", "login_complete", "Instagram login complete",
             platform="instagram", credential_key=credential.key, landed_on=driver.current_url)
    return storage_state


def create_instagram_url_for_search(search_string: str) -> str:
    return f"{INSTAGRAM_SEARCH_URL}?q={quote(search_string, safe='')}"
