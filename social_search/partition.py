"""Work partitioning - split search strings into per-credential shares"""
import logging
import math
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .models import Credential, PlatformType
from .search_logging import log

logger = logging.getLogger(__name__)


def group_by_platform(credentials: Iterable[Credential]) -> Dict[PlatformType, List[Credential]]:
    """Group credentials by platform, keeping first-seen platform order."""
    groups: Dict[PlatformType, List[Credential]] = {}
    for credential in credentials:
        groups.setdefault(credential.type, []).append(credential)
    return groups


def chunk(items: Sequence[str], size: int) -> List[List[str]]:
    """Contiguous chunks of `size`; the last one may be shorter."""
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def partition_search_strings(
    credentials: Iterable[Credential],
    search_strings: Mapping[str, object],
) -> Dict[str, List[str]]:
    """
    Assign every platform group its own full pass over the search strings.

    Within a group of P credentials and N search strings:
    - P >= N: every credential gets the whole list (duplicated work)
    - P < N: contiguous chunks of ceil(N / P), chunk i to credential i

    Args:
        credentials: Accounts, in registry order
        search_strings: Generated search strings, keyed by query (order kept)

    Returns:
        Dict of credential key -> ordered list of search strings
    """
    keys = list(search_strings)
    total_size = len(keys)
    assignment: Dict[str, List[str]] = {}

    for platform, group in group_by_platform(credentials).items():
        size_of_parts = len(group)

        if size_of_parts >= total_size:
            chunks = [list(keys) for _ in group]
        else:
            chunks = chunk(keys, math.ceil(total_size / size_of_parts))

        for index, credential in enumerate(group):
            # ceil() can leave trailing credentials without a chunk
            assignment[credential.key] = chunks[index] if index < len(chunks) else []

        log.info(logger, "partition", "group_partitioned",
                 f"Split {total_size} search strings across {size_of_parts} {platform.value} accounts",
                 platform=platform.value, accounts=size_of_parts, search_strings=total_size)

    return assignment


def platform_from_key(key: str) -> Optional[PlatformType]:
    """Recover the platform of a credential key ('facebook-alice' -> FACEBOOK)."""
    prefix, _, _ = key.partition("-")
    try:
        return PlatformType(prefix)
    except ValueError:
        return None
