"""Configuration for the social search service"""
import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == 'true'


@dataclass
class SearchConfig:
    """Search service configuration loaded from environment variables"""

    # Session storage - storageStateFor[<type>][<username>].json files live here
    storage_dir: str = field(default_factory=lambda: os.getenv('SESSION_STORAGE_DIR', '.'))
    credentials_file: str = field(default_factory=lambda: os.getenv('CREDENTIALS_FILE', 'credentials.json'))

    # Pacing - upper bound (exclusive) for random delays, in seconds
    max_random_delay: int = field(default_factory=lambda: int(os.getenv('MAX_RANDOM_DELAY_TIME', 10)))

    # Browser settings
    headless: bool = field(default_factory=lambda: _env_bool('BROWSER_HEADLESS', 'true'))
    geckodriver_path: str = field(default_factory=lambda: os.getenv('GECKODRIVER_PATH', '/usr/local/bin/geckodriver'))
    navigation_timeout: int = field(default_factory=lambda: int(os.getenv('NAVIGATION_TIMEOUT', 100)))  # seconds

    # Login behaviour
    typing_delay: float = field(default_factory=lambda: float(os.getenv('TYPING_DELAY', 0.03)))  # per character
    post_login_wait: float = field(default_factory=lambda: float(os.getenv('POST_LOGIN_WAIT', 15)))

    # Appended verbatim to Facebook post search URLs
    facebook_search_filters: str = field(default_factory=lambda: os.getenv('FACEBOOK_SEARCH_FILTERS', ''))

    # Service settings
    host: str = field(default_factory=lambda: os.getenv('SEARCH_SERVICE_HOST', '0.0.0.0'))
    port: int = field(default_factory=lambda: int(os.getenv('SEARCH_SERVICE_PORT', 8890)))

    def __post_init__(self):
        """Validate configuration"""
        if self.max_random_delay < 1:
            raise ValueError("MAX_RANDOM_DELAY_TIME must be at least 1")
        if self.navigation_timeout <= 0:
            raise ValueError("NAVIGATION_TIMEOUT must be positive")
