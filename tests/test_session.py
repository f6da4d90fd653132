"""Tests for session acquisition per credential"""
import asyncio
import json
import threading
from unittest.mock import MagicMock

import pytest

from social_search.browser import LoginError
from social_search.models import Credential, PlatformType
from social_search.session import (
    LOGIN_ROUTINES,
    get_session,
    get_session_results_by_credential_key,
    get_sessions_by_credential_key,
)
from social_search.storage import storage_state_name


def login_returning(state='{"cookies": []}'):
    return MagicMock(return_value=state)


class TestGetSession:

    def test_reuses_stored_state_without_login(self, fake_engine, store, facebook_alice, sample_storage_state):
        store.write(facebook_alice, sample_storage_state)
        login = login_returning()

        session = asyncio.run(get_session(
            facebook_alice, fake_engine, store, {PlatformType.FACEBOOK: login}
        ))

        assert session is fake_engine.seeded[0]
        assert session.storage_state == sample_storage_state
        assert fake_engine.created == []
        login.assert_not_called()

    def test_logs_in_and_persists_when_nothing_stored(self, fake_engine, store, facebook_alice):
        login = login_returning('{"cookies": [{"name": "c_user"}]}')

        session = asyncio.run(get_session(
            facebook_alice, fake_engine, store, {PlatformType.FACEBOOK: login}
        ))

        assert session is fake_engine.created[0]
        login.assert_called_once_with(facebook_alice, session, fake_engine.config)
        saved = (store.directory / storage_state_name(facebook_alice)).read_text(encoding="utf-8")
        assert json.loads(saved) == {"cookies": [{"name": "c_user"}]}

    def test_empty_stored_file_triggers_login(self, fake_engine, store, facebook_alice):
        store.write(facebook_alice, "")
        login = login_returning()

        asyncio.run(get_session(facebook_alice, fake_engine, store, {PlatformType.FACEBOOK: login}))

        login.assert_called_once()
        assert fake_engine.seeded == []

    def test_dispatches_on_platform(self, fake_engine, store, instagram_carol):
        facebook_login = login_returning()
        instagram_login = login_returning()

        asyncio.run(get_session(instagram_carol, fake_engine, store, {
            PlatformType.FACEBOOK: facebook_login,
            PlatformType.INSTAGRAM: instagram_login,
        }))

        facebook_login.assert_not_called()
        instagram_login.assert_called_once()

    def test_no_login_routine_returns_bare_session(self, fake_engine, store, instagram_carol):
        session = asyncio.run(get_session(instagram_carol, fake_engine, store, {}))

        assert session is fake_engine.created[0]
        assert not store.path_for(instagram_carol).exists()

    def test_login_failure_propagates(self, fake_engine, store, facebook_alice):
        login = MagicMock(side_effect=LoginError("form not found"))

        with pytest.raises(LoginError):
            asyncio.run(get_session(facebook_alice, fake_engine, store, {PlatformType.FACEBOOK: login}))

        assert not store.path_for(facebook_alice).exists()
        assert fake_engine.closed == fake_engine.created

    def test_default_routines_cover_every_platform(self):
        assert set(LOGIN_ROUTINES) == set(PlatformType)


class TestGetSessionsByCredentialKey:

    def test_keyed_by_credential(self, fake_engine, store, sample_credentials):
        routines = {PlatformType.FACEBOOK: login_returning(), PlatformType.INSTAGRAM: login_returning()}

        sessions = asyncio.run(get_sessions_by_credential_key(fake_engine, sample_credentials, store, routines))

        assert list(sessions) == ["facebook-alice", "facebook-bob", "instagram-carol"]
        assert len({id(s) for s in sessions.values()}) == 3

    def test_logins_run_concurrently(self, fake_engine, store, facebook_alice, facebook_bob):
        # Each login waits for the other; a sequential setup would break the barrier
        barrier = threading.Barrier(2, timeout=5)

        def login(credential, session, config):
            barrier.wait()
            return '{"cookies": []}'

        sessions = asyncio.run(get_sessions_by_credential_key(
            fake_engine, [facebook_alice, facebook_bob], store, {PlatformType.FACEBOOK: login}
        ))

        assert len(sessions) == 2

    def test_one_failure_fails_batch_and_closes_all(self, fake_engine, store, facebook_alice, facebook_bob):
        sessions_by_user = {}

        def login(credential, session, config):
            sessions_by_user[credential.username] = session
            if credential.username == "bob":
                raise LoginError("bob is locked out")
            return '{"cookies": []}'

        with pytest.raises(LoginError, match="bob"):
            asyncio.run(get_sessions_by_credential_key(
                fake_engine, [facebook_alice, facebook_bob], store, {PlatformType.FACEBOOK: login}
            ))

        assert sessions_by_user["alice"] in fake_engine.closed
        assert sessions_by_user["bob"] in fake_engine.closed
        assert store.path_for(facebook_alice).exists()
        assert not store.path_for(facebook_bob).exists()

    def test_duplicate_key_later_wins(self, fake_engine, store):
        first = Credential(PlatformType.INSTAGRAM, "dup", "a")
        second = Credential(PlatformType.INSTAGRAM, "dup", "b")

        sessions = asyncio.run(get_sessions_by_credential_key(fake_engine, [first, second], store, {}))

        assert list(sessions) == ["instagram-dup"]
        assert len(fake_engine.closed) == 1
        assert sessions["instagram-dup"] is not fake_engine.closed[0]

    def test_empty_registry(self, fake_engine, store):
        assert asyncio.run(get_sessions_by_credential_key(fake_engine, [], store)) == {}


class TestGetSessionResultsByCredentialKey:

    def test_failures_kept_per_credential(self, fake_engine, store, facebook_alice, facebook_bob, instagram_carol):
        def login(credential, session, config):
            if credential.username == "bob":
                raise LoginError("bob is locked out")
            return '{"cookies": []}'

        results = asyncio.run(get_session_results_by_credential_key(
            fake_engine,
            [facebook_alice, facebook_bob, instagram_carol],
            store,
            {PlatformType.FACEBOOK: login, PlatformType.INSTAGRAM: login},
        ))

        assert results["facebook-alice"].ok
        assert results["instagram-carol"].session is not None
        assert not results["facebook-bob"].ok
        assert isinstance(results["facebook-bob"].error, LoginError)
        assert results["facebook-bob"].session is None
        assert len(fake_engine.closed) == 1  # bob's half-logged-in session
