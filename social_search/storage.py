"""
Session state storage

One file per credential, named from its platform and username:

    storageStateFor[facebook][alice@example.com].json

Contents are written and read back verbatim; only the browser engine
looks inside them.
"""
import logging
from pathlib import Path
from typing import Union

from .models import Credential
from .search_logging import log

logger = logging.getLogger(__name__)


def storage_state_name(credential: Credential) -> str:
    """Deterministic file name for a credential's session state."""
    return f"storageStateFor[{credential.type.value}][{credential.username}].json"


class SessionStateStore:
    """Reads and writes serialized session state under a directory"""

    def __init__(self, directory: Union[str, Path] = "."):
        self.directory = Path(directory)

    def path_for(self, credential: Credential) -> Path:
        return self.directory / storage_state_name(credential)

    def read(self, credential: Credential) -> str:
        """
        Read stored state for a credential.

        Returns:
            The stored string, or "" when there is none or it can't be read
        """
        path = self.path_for(credential)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            log.info(logger, "storage", "storage_state_missing", f"No file {path.name}",
                     credential_key=credential.key, path=str(path))
        except OSError as e:
            log.error(logger, "storage", "read_failed", f"Could not read {path.name}",
                      error=str(e), error_type=type(e).__name__,
                      credential_key=credential.key, path=str(path))
        return ""

    def write(self, credential: Credential, storage_state: str) -> Path:
        """Persist state for a credential, replacing any previous file."""
        path = self.path_for(credential)
        self.directory.mkdir(parents=True, exist_ok=True)
        path.write_text(storage_state, encoding="utf-8")
        log.info(logger, "storage", "storage_state_saved", f"Saved {path.name}",
                 credential_key=credential.key, path=str(path), size=len(storage_state))
        return path
