"""
Credential registry

Loads accounts from a JSON file:

    [
        {"type": "facebook", "username": "alice@example.com", "password": "..."},
        {"type": "instagram", "username": "acme_watch", "password": "..."}
    ]

Order matters: it decides which share of work each account gets.
"""
import json
import logging
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Union

from .models import Credential, InvestigationRecord, PlatformType
from .search_logging import log

logger = logging.getLogger(__name__)


class DuplicateCredentialError(ValueError):
    """Raised when two credentials share an identity key"""
    pass


def credential_from_dict(data: Mapping[str, Any]) -> Credential:
    """Build a Credential from a JSON object."""
    try:
        platform = PlatformType(data["type"])
    except ValueError:
        raise ValueError(f"unknown platform type: {data['type']!r}") from None
    return Credential(type=platform, username=data["username"], password=data.get("password", ""))


def _load_json_list(path: Union[str, Path], what: str) -> List[Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{what} file {path} must contain a JSON list")
    return data


def load_credentials(path: Union[str, Path]) -> List[Credential]:
    """
    Load the credential registry from a JSON file.

    Raises:
        ValueError: Entry is malformed or names an unknown platform
    """
    credentials = []
    for index, entry in enumerate(_load_json_list(path, "credentials")):
        try:
            credentials.append(credential_from_dict(entry))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"invalid credential at index {index}: {e}") from e

    log.info(logger, "credentials", "loaded", f"Loaded {len(credentials)} credentials",
             path=str(path), count=len(credentials))
    return credentials


def load_investigation_records(path: Union[str, Path]) -> List[InvestigationRecord]:
    """Load investigation records from a JSON file."""
    records = []
    for index, entry in enumerate(_load_json_list(path, "records")):
        try:
            records.append(InvestigationRecord.from_dict(entry))
        except (AttributeError, TypeError, ValueError) as e:
            raise ValueError(f"invalid investigation record at index {index}: {e}") from e
    return records


def find_duplicate_keys(credentials: Iterable[Credential]) -> List[str]:
    """Identity keys used by more than one credential, in first-seen order."""
    counts = Counter(credential.key for credential in credentials)
    return [key for key, count in counts.items() if count > 1]


def check_unique_keys(credentials: Sequence[Credential], strict: bool = False) -> List[str]:
    """
    Report identity key collisions.

    Colliding credentials share a session file and overwrite each other in
    every keyed mapping (the later one wins).

    Args:
        credentials: The registry
        strict: Raise instead of warning

    Returns:
        The duplicated keys (empty when the registry is clean)

    Raises:
        DuplicateCredentialError: strict is set and duplicates exist
    """
    duplicates = find_duplicate_keys(credentials)
    if duplicates:
        if strict:
            raise DuplicateCredentialError(f"duplicate credential keys: {', '.join(duplicates)}")
        log.warning(logger, "credentials", "duplicate_keys",
                    "Credential keys collide - later entries win",
                    duplicate_keys=duplicates)
    return duplicates


def by_key(credentials: Iterable[Credential]) -> Dict[str, Credential]:
    """Fold credentials into a key -> credential mapping (later entries win)."""
    result: Dict[str, Credential] = {}
    for credential in credentials:
        result[credential.key] = credential
    return result
