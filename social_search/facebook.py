"""Facebook login flow and post search URLs"""
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

FACEBOOK_LOGIN_URL = "https://www.facebook.com/login"
FACEBOOK_SEARCH_URL = "https://www.facebook.com/search/posts"

# Same set of characters encodeURIComponent leaves alone
_URL_SAFE = "-_.!~*'()"


def get_storage_state_after_facebook_login(
    credential: Credential,
    driver: WebDriver,
    config: SearchConfig,
) -> str:
    """Log into Facebook in `driver` and return its serialized storage state

    Args:
        credential: Facebook account
        driver: Fresh browser session (stays logged in afterwards)
        config: Timeouts and typing delay

    Returns:
        Storage state JSON string

    Raises:
        LoginError: Login form missing or the page never left the login URL
    """
    log.info(logger, "login", "login_started", "Logging into Facebook",
             platform="facebook", credential_key=credential.key)

    try:
        driver.get(FACEBOOK_LOGIN_URL)

        email_input = WebDriverWait(driver, config.navigation_timeout).until(
            EC.presence_of_element_located((By.ID, "email"))
        )
        type_slowly(email_input, credential.username, config.typing_delay)

        password_input = driver.find_element(By.ID, "pass")
        type_slowly(password_input, credential.password, config.typing_delay)

        login_page_url = driver.current_url
        driver.find_element(By.ID, "loginbutton").click()

        WebDriverWait(driver, config.navigation_timeout).until(EC.url_changes(login_page_url))
    except (TimeoutException, NoSuchElementException) as e:
        raise LoginError(f"Facebook login failed for {credential.key}: {e.msg or type(e).__name__}") from e

    # Facebook keeps setting cookies for a while after the redirect
    time.sleep(config.post_login_wait)

    storage_state = export_storage_state(driver)
    log.info(logger, "login", "login_complete", "Facebook login complete",
             platform="facebook", credential_key=credential.key, landed_on=driver.current_url)
    return storage_state


def create_facebook_url_for_search(search_string: str, filters: str = "") -> str:
    """Post search URL; `filters` is appended verbatim (e.g. '&filters=...')."""
    return f"{FACEBOOK_SEARCH_URL}?q={quote(search_string, safe=_URL_SAFE)}{filters}"
