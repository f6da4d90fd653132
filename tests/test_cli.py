"""Tests for the command line entry point"""
import json
import threading
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from social_search.cli import main
from social_search.models import Credential, PlatformType
from social_search.session import SessionResult


@pytest.fixture(autouse=True)
def no_logging_setup():
    # configure_logging would point a handler at the captured stdout
    with patch("social_search.cli.configure_logging"):
        yield


@pytest.fixture
def credentials_file(tmp_path):
    path = tmp_path / "credentials.json"
    path.write_text(json.dumps([
        {"type": "facebook", "username": "alice", "password": "a"},
        {"type": "facebook", "username": "bob", "password": "b"},
    ]), encoding="utf-8")
    return path


@pytest.fixture
def records_file(tmp_path):
    path = tmp_path / "records.json"
    path.write_text(json.dumps([
        {"companyName": "Acme", "productNames": [], "incidentKeywords": ["breach", "leak", "recall"]},
    ]), encoding="utf-8")
    return path


def test_plan_prints_assignment(credentials_file, records_file, capsys):
    code = main(["plan", "--credentials", str(credentials_file), "--records", str(records_file)])

    plan = json.loads(capsys.readouterr().out)
    assert code == 0
    assert plan["assignment"] == {
        "facebook-alice": ["Acme breach", "Acme leak"],
        "facebook-bob": ["Acme recall"],
    }


def test_plan_by_company(credentials_file, records_file, capsys):
    main(["plan", "--credentials", str(credentials_file), "--records", str(records_file),
          "--group-by", "company"])

    plan = json.loads(capsys.readouterr().out)
    assert list(plan["search_strings"]) == ["Acme"]
    assert plan["assignment"]["facebook-alice"] == ["Acme"]


def test_plan_strict_duplicates(tmp_path, records_file, capsys):
    path = tmp_path / "dupes.json"
    path.write_text(json.dumps([
        {"type": "facebook", "username": "alice", "password": "a"},
        {"type": "facebook", "username": "alice", "password": "b"},
    ]), encoding="utf-8")

    code = main(["plan", "--credentials", str(path), "--records", str(records_file), "--strict"])

    assert code == 2
    assert "facebook-alice" in capsys.readouterr().err


def test_missing_file(records_file, tmp_path):
    code = main(["plan", "--credentials", str(tmp_path / "nope.json"), "--records", str(records_file)])

    assert code == 2


def test_login_reports_each_account(credentials_file, capsys):
    alice = Credential(PlatformType.FACEBOOK, "alice", "a")
    bob = Credential(PlatformType.FACEBOOK, "bob", "b")
    results = {
        alice.key: SessionResult(alice, session=MagicMock()),
        bob.key: SessionResult(bob, error=RuntimeError("checkpoint")),
    }

    with patch("social_search.cli.BrowserEngine") as engine, \
         patch("social_search.cli.get_session_results_by_credential_key",
               new=AsyncMock(return_value=results)):
        code = main(["login", "--credentials", str(credentials_file)])

    out = capsys.readouterr().out
    assert code == 1
    assert "✅ facebook-alice" in out
    assert "❌ facebook-bob: checkpoint" in out
    engine.return_value.close.assert_called_once_with(results[alice.key].session)


def test_run_closes_sessions(credentials_file, records_file, capsys):
    sessions = {"facebook-alice": MagicMock(), "facebook-bob": MagicMock()}
    visited = {"facebook-alice": ["u1", "u2"], "facebook-bob": ["u3"]}

    with patch("social_search.cli.BrowserEngine") as engine, \
         patch("social_search.cli.get_sessions_by_credential_key", new=AsyncMock(return_value=sessions)), \
         patch("social_search.cli.run_assigned_searches", new=AsyncMock(return_value=visited)) as run:
        code = main(["run", "--credentials", str(credentials_file), "--records", str(records_file)])

    assert code == 0
    assert run.call_args.args[2] == {
        "facebook-alice": ["Acme breach", "Acme leak"],
        "facebook-bob": ["Acme recall"],
    }
    assert engine.return_value.close.call_count == 2
    assert "facebook-alice: 2 searches" in capsys.readouterr().out


def test_run_closes_sessions_off_the_event_loop_thread(credentials_file, records_file):
    sessions = {"facebook-alice": MagicMock(), "facebook-bob": MagicMock()}
    close_threads = []

    with patch("social_search.cli.BrowserEngine") as engine, \
         patch("social_search.cli.get_sessions_by_credential_key", new=AsyncMock(return_value=sessions)), \
         patch("social_search.cli.run_assigned_searches", new=AsyncMock(return_value={})):
        engine.return_value.close.side_effect = lambda session: close_threads.append(threading.get_ident())
        main(["run", "--credentials", str(credentials_file), "--records", str(records_file)])

    assert len(close_threads) == 2
    assert threading.get_ident() not in close_threads
