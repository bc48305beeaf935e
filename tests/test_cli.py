from __future__ import annotations

import httpx

from orbit import cli
from orbit.persistence import LocalBlobBackend, PersistenceAdapter, RemoteStoreBackend
from orbit.tracker import Tracker
from orbit.verifier import SubmissionVerifier

from .support import NOW, TODAY, make_settings


def _tracker(tmp_path) -> Tracker:
    settings = make_settings(tmp_path)

    def down(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    verifier = SubmissionVerifier(settings, client=httpx.Client(transport=httpx.MockTransport(down)))
    return Tracker(PersistenceAdapter(LocalBlobBackend(tmp_path)), settings=settings, verifier=verifier, clock=lambda: NOW)


def test_log_then_history(tmp_path, capsys) -> None:
    tracker = _tracker(tmp_path)

    assert cli.main(["log", "--course", "dsp=2", "--word", "orbit", "--aptitude"], tracker=tracker) == 0
    assert "Progress Saved Successfully!" in capsys.readouterr().out

    assert cli.main(["history"], tracker=tracker) == 0
    out = capsys.readouterr().out
    assert TODAY.isoformat() in out
    assert "orbit" in out


def test_log_prefills_from_today(tmp_path) -> None:
    tracker = _tracker(tmp_path)
    cli.main(["log", "--course", "dsp=2", "--word", "orbit"], tracker=tracker)
    cli.main(["log", "--notes", "evening"], tracker=tracker)

    log = tracker.today_log()
    assert log is not None
    assert log.vocab_word == "orbit"
    assert log.notes == "evening"
    assert tracker.state.store.course("dsp").completed == 2  # type: ignore[union-attr]


def test_log_rejects_malformed_course(tmp_path, capsys) -> None:
    assert cli.main(["log", "--course", "dsp"], tracker=_tracker(tmp_path)) == 2
    assert "ID=COUNT" in capsys.readouterr().out


def test_dashboard_marks_offline(tmp_path, capsys) -> None:
    assert cli.main(["dashboard"], tracker=_tracker(tmp_path)) == 0
    out = capsys.readouterr().out
    assert "(Offline)" in out
    assert "Overall progress: 0%" in out


def test_history_empty(tmp_path, capsys) -> None:
    assert cli.main(["history"], tracker=_tracker(tmp_path)) == 0
    assert "No logs yet." in capsys.readouterr().out


def test_verify_with_manual_override(tmp_path, capsys) -> None:
    tracker = _tracker(tmp_path)
    cli.main(["settings", "--username", "ada"], tracker=tracker)

    assert cli.main(["verify", "https://leetcode.com/problems/two-sum/", "--yes"], tracker=tracker) == 0
    assert "Manually verified: TWO SUM" in capsys.readouterr().out


def test_verify_without_username(tmp_path, capsys) -> None:
    assert cli.main(["verify", "https://leetcode.com/problems/two-sum/"], tracker=_tracker(tmp_path)) == 1
    assert "configure your username" in capsys.readouterr().out


def test_reset_requires_confirmation(tmp_path, monkeypatch, capsys) -> None:
    tracker = _tracker(tmp_path)
    cli.main(["log", "--course", "dsp=1"], tracker=tracker)
    monkeypatch.setattr("builtins.input", lambda prompt: "n")

    assert cli.main(["reset"], tracker=tracker) == 1
    assert tracker.today_log() is not None

    assert cli.main(["reset", "--yes"], tracker=tracker) == 0
    assert tracker.today_log() is None


def test_migrate_without_server_fails(tmp_path, capsys) -> None:
    assert cli.main(["migrate"], tracker=_tracker(tmp_path)) == 1
    assert "Migration failed" in capsys.readouterr().out


def test_export_writes_file(tmp_path, capsys) -> None:
    target = tmp_path / "export.json"
    assert cli.main(["export", "--output", str(target)], tracker=_tracker(tmp_path)) == 0
    assert target.exists()


def test_settings_reports_failed_save(tmp_path, capsys) -> None:
    settings = make_settings(tmp_path, ORBIT_PERSISTENCE_MODE="remote")

    def store_server(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return httpx.Response(500, json={"detail": "database locked"})
        if request.url.path == "/api/meta":
            return httpx.Response(200, json=None)
        return httpx.Response(200, json={})

    remote = RemoteStoreBackend(
        httpx.Client(base_url="http://store.test/api", transport=httpx.MockTransport(store_server))
    )
    adapter = PersistenceAdapter(LocalBlobBackend(tmp_path), remote, mode="remote")
    tracker = Tracker(adapter, settings=settings, clock=lambda: NOW)

    assert cli.main(["settings", "--username", "ada"], tracker=tracker) == 1
    out = capsys.readouterr().out
    assert "Failed to save settings" in out
    assert "Settings Saved" not in out
