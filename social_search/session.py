"""Session provider - one authenticated browser session per credential

Authentication flow per credential:
1. Stored state exists → open a session seeded with it (no liveness check)
2. No stored state → open a fresh session, run the platform login, store the state
3. No login routine for the platform → hand back the fresh, anonymous session

Sessions for all credentials are set up concurrently. Blocking Selenium and
file calls run in worker threads so one slow login doesn't hold up the others.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from selenium.webdriver.remote.webdriver import WebDriver

from .browser import BrowserEngine
from .config import SearchConfig
from .facebook import get_storage_state_after_facebook_login
from .instagram import get_storage_state_after_instagram_login
from .models import Credential, PlatformType
from .search_logging import log
from .storage import SessionStateStore, storage_state_name

logger = logging.getLogger(__name__)

LoginRoutine = Callable[[Credential, WebDriver, SearchConfig], str]

LOGIN_ROUTINES: Dict[PlatformType, LoginRoutine] = {
    PlatformType.FACEBOOK: get_storage_state_after_facebook_login,
    PlatformType.INSTAGRAM: get_storage_state_after_instagram_login,
}


@dataclass
class SessionResult:
    """Outcome of setting up one credential's session"""
    credential: Credential
    session: Optional[Any] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def get_session(
    credential: Credential,
    engine: BrowserEngine,
    store: SessionStateStore,
    login_routines: Optional[Mapping[PlatformType, LoginRoutine]] = None,
):
    """Get a logged-in session for one credential, reusing stored state

    Args:
        credential: Account to authenticate
        engine: Creates browser sessions
        store: Where session state is persisted
        login_routines: Platform -> login routine (defaults to LOGIN_ROUTINES)

    Returns:
        Browser session

    Raises:
        Whatever the login routine raises (LoginError, WebDriverException, ...)
    """
    routines = LOGIN_ROUTINES if login_routines is None else login_routines
    name = storage_state_name(credential)

    storage_state = await asyncio.to_thread(store.read, credential)

    if storage_state:
        # TODO: verify the stored session is still logged in before reusing it
        log.info(logger, "session", "session_reused", f"Reusing {name}",
                 credential_key=credential.key)
        return await asyncio.to_thread(engine.new_session_with_state, storage_state)

    session = await asyncio.to_thread(engine.new_session)

    login = routines.get(credential.type)
    if login is None:
        log.warning(logger, "session", "no_login_routine",
                    f"No login routine for {credential.type.value} - session is anonymous",
                    credential_key=credential.key, platform=credential.type.value)
        return session

    try:
        storage_state = await asyncio.to_thread(login, credential, session, engine.config)
        await asyncio.to_thread(store.write, credential, storage_state)
    except BaseException:
        await asyncio.to_thread(engine.close, session)
        raise

    log.info(logger, "session", "session_created", f"Logged in and saved {name}",
             credential_key=credential.key)
    return session


async def _setup_all(
    engine: BrowserEngine,
    credentials: Sequence[Credential],
    store: SessionStateStore,
    login_routines: Optional[Mapping[PlatformType, LoginRoutine]],
) -> List[Any]:
    return await asyncio.gather(
        *(get_session(credential, engine, store, login_routines) for credential in credentials),
        return_exceptions=True,
    )


async def get_sessions_by_credential_key(
    engine: BrowserEngine,
    credentials: Sequence[Credential],
    store: SessionStateStore,
    login_routines: Optional[Mapping[PlatformType, LoginRoutine]] = None,
) -> Dict[str, Any]:
    """Set up every credential's session concurrently, all or nothing

    Returns:
        Dict of credential key -> session (a later duplicate key wins)

    Raises:
        The first failure in credential order. Sessions that did open are
        closed before raising.
    """
    outcomes = await _setup_all(engine, credentials, store, login_routines)

    failures = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
    if failures:
        for credential, outcome in zip(credentials, outcomes):
            if isinstance(outcome, BaseException):
                log.error(logger, "session", "setup_failed", "Session setup failed",
                          error=str(outcome), error_type=type(outcome).__name__,
                          credential_key=credential.key)
            else:
                await asyncio.to_thread(engine.close, outcome)
        raise failures[0]

    sessions: Dict[str, Any] = {}
    for credential, session in zip(credentials, outcomes):
        if credential.key in sessions:
            log.warning(logger, "session", "duplicate_key",
                        "Duplicate credential key - closing the earlier session",
                        credential_key=credential.key)
            await asyncio.to_thread(engine.close, sessions[credential.key])
        sessions[credential.key] = session

    log.info(logger, "session", "sessions_ready", f"{len(sessions)} sessions ready",
             count=len(sessions))
    return sessions


async def get_session_results_by_credential_key(
    engine: BrowserEngine,
    credentials: Sequence[Credential],
    store: SessionStateStore,
    login_routines: Optional[Mapping[PlatformType, LoginRoutine]] = None,
) -> Dict[str, SessionResult]:
    """Set up every credential's session concurrently, keeping failures per credential

    One failed login doesn't cost the other credentials their sessions.
    """
    outcomes = await _setup_all(engine, credentials, store, login_routines)

    results: Dict[str, SessionResult] = {}
    for credential, outcome in zip(credentials, outcomes):
        if isinstance(outcome, BaseException):
            log.error(logger, "session", "setup_failed", "Session setup failed",
                      error=str(outcome), error_type=type(outcome).__name__,
                      credential_key=credential.key)
            results[credential.key] = SessionResult(credential, error=outcome)
        else:
            results[credential.key] = SessionResult(credential, session=outcome)

    ready = sum(1 for result in results.values() if result.ok)
    log.info(logger, "session", "sessions_settled", f"{ready}/{len(results)} sessions ready",
             ready=ready, failed=len(results) - ready)
    return results
