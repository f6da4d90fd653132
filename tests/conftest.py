"""Shared fixtures - fake browser engine, sample accounts and investigation records"""
import os
from unittest.mock import MagicMock

import pytest

from social_search.config import SearchConfig
from social_search.models import Credential, InvestigationRecord, PlatformType
from social_search.storage import SessionStateStore


@pytest.fixture(scope="session", autouse=True)
def configure_test_environment():
    """Keep tests away from real browsers and long waits"""
    os.environ.setdefault("TESTING", "true")
    os.environ["POST_LOGIN_WAIT"] = "0"
    os.environ["TYPING_DELAY"] = "0"


class FakeEngine:
    """Stands in for BrowserEngine; sessions are MagicMocks"""

    def __init__(self, config=None):
        self.config = config or SearchConfig()
        self.created = []
        self.seeded = []
        self.closed = []

    def new_session(self):
        session = MagicMock(name=f"session-{len(self.created)}")
        self.created.append(session)
        return session

    def new_session_with_state(self, storage_state):
        session = MagicMock(name=f"seeded-{len(self.seeded)}")
        session.storage_state = storage_state
        self.seeded.append(session)
        return session

    def close(self, session):
        self.closed.append(session)


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def store(tmp_path):
    return SessionStateStore(tmp_path)


@pytest.fixture
def facebook_alice():
    return Credential(PlatformType.FACEBOOK, "alice", "alice-pw")


@pytest.fixture
def facebook_bob():
    return Credential(PlatformType.FACEBOOK, "bob", "bob-pw")


@pytest.fixture
def instagram_carol():
    return Credential(PlatformType.INSTAGRAM, "carol", "carol-pw")


@pytest.fixture
def sample_credentials(facebook_alice, facebook_bob, instagram_carol):
    return [facebook_alice, facebook_bob, instagram_carol]


@pytest.fixture
def sample_records():
    return [
        InvestigationRecord(
            company_name="Acme",
            product_names=("Widget", "Gadget"),
            incident_keywords=("leak", "hack"),
            search_options={"region": "us"},
        ),
        InvestigationRecord(
            company_name="Globex",
            incident_keywords=("breach",),
        ),
    ]


@pytest.fixture
def sample_storage_state():
    return (
        '{"exported_at": "2025-02-05T14:30:22Z", "cookies": ['
        '{"name": "c_user", "value": "100", "domain": ".facebook.com", "path": "/", "secure": true}'
        ']}'
    )
