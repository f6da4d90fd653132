"""Per-session search loop

Walks each session through its share of search strings: open the platform's
search page, then wait a random delay before the next one. Reading results
off the page is left to the caller.
"""
import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .browser import BrowserEngine
from .config import SearchConfig
from .facebook import create_facebook_url_for_search
from .instagram import create_instagram_url_for_search
from .models import PlatformType
from .pacing import Pacer
from .partition import platform_from_key
from .search_logging import log
from .search_strings import SearchStrings, expand_deferred_search

logger = logging.getLogger(__name__)


def search_url_for(platform: PlatformType, search_string: str, config: SearchConfig) -> str:
    """Search page URL for a query on a platform."""
    if platform == PlatformType.FACEBOOK:
        return create_facebook_url_for_search(search_string, config.facebook_search_filters)
    return create_instagram_url_for_search(search_string)


def queries_for(key: str, search_strings: SearchStrings) -> List[str]:
    """The concrete queries behind an assigned search string key."""
    descriptor = search_strings.get(key)
    if descriptor is not None and "incident_keywords" in descriptor:
        return expand_deferred_search(descriptor)
    return [key]


async def run_session_searches(
    session: Any,
    credential_key: str,
    keys: Sequence[str],
    search_strings: SearchStrings,
    config: SearchConfig,
    pacer: Pacer,
) -> List[str]:
    """Open every assigned search in one session, pausing between pages

    Returns:
        URLs visited, in order
    """
    platform = platform_from_key(credential_key)
    if platform is None:
        log.warning(logger, "runner", "unknown_platform",
                    "Cannot tell platform from credential key - skipping",
                    credential_key=credential_key)
        return []

    visited = []
    for key in keys:
        for query in queries_for(key, search_strings):
            url = search_url_for(platform, query, config)
            await asyncio.to_thread(session.get, url)
            visited.append(url)

            delay = pacer.next_delay()
            log.info(logger, "runner", "search_opened", f"Opened search: {query}",
                     credential_key=credential_key, search_string=query, delay=delay)
            await asyncio.sleep(delay)

    log.info(logger, "runner", "share_complete", f"Finished {len(visited)} searches",
             credential_key=credential_key, searches=len(visited))
    return visited


async def run_assigned_searches(
    engine: BrowserEngine,
    sessions: Mapping[str, Any],
    assignment: Mapping[str, Sequence[str]],
    search_strings: SearchStrings,
    pacer: Optional[Pacer] = None,
) -> Dict[str, List[str]]:
    """Run every session's share concurrently

    Args:
        engine: Supplies the configuration (search filters, pacing bound)
        sessions: Credential key -> session
        assignment: Credential key -> assigned search string keys
        search_strings: Generated descriptors, used to expand deferred keywords
        pacer: Delay source (defaults to the configured maximum)

    Returns:
        Credential key -> visited URLs
    """
    pacer = pacer or Pacer(engine.config.max_random_delay)
    keys = [key for key in assignment if key in sessions]

    results = await asyncio.gather(*(
        run_session_searches(sessions[key], key, assignment[key], search_strings, engine.config, pacer)
        for key in keys
    ))
    return dict(zip(keys, results))
