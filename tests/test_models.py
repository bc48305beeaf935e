from __future__ import annotations

from orbit.models import Course, DailyLog, Store, UserSettings, lenient_int


def test_legacy_practice_shape_still_counts() -> None:
    log = DailyLog.model_validate({"courses": {"dsp": "2"}, "dsa": {"count": "4", "topic": "graphs"}})

    assert log.dsa_solved is None
    assert log.solved_count == 4
    assert log.course_input("dsp") == 2


def test_solved_list_wins_over_legacy_count() -> None:
    log = DailyLog.model_validate({"dsaSolved": [], "dsa": {"count": 5}})
    assert log.solved_count == 0


def test_log_payload_uses_wire_names() -> None:
    log = DailyLog.model_validate(
        {
            "courses": {"embedded": 1},
            "dsaSolved": [],
            "vocab": {"word": "orbit", "def": "a curved path"},
            "aptitude": True,
        }
    )
    payload = log.to_payload()

    assert payload["dsaSolved"] == []
    assert payload["vocab"] == {"word": "orbit", "def": "a curved path"}
    assert "dsa" not in payload
    assert "timestamp" not in payload


def test_course_completed_is_clamped_on_load() -> None:
    assert Course(id="x", name="X", total=5, completed=9).completed == 5
    assert Course(id="x", name="X", total=5, completed=-2).completed == 0


def test_default_store_has_catalogue() -> None:
    store = Store()
    assert [course.id for course in store.courses] == ["embedded", "dsp", "analog", "probability", "emwaves"]
    assert store.course("dsp").total == 107  # type: ignore[union-attr]
    assert "logs" not in store.meta_payload()


def test_user_settings_keep_unknown_keys() -> None:
    settings = UserSettings.model_validate({"lcUsername": "ada", "theme": "dark"})
    assert settings.lc_username == "ada"
    assert settings.to_payload() == {"lcUsername": "ada", "theme": "dark"}


def test_lenient_int() -> None:
    assert lenient_int("12abc") == 12
    assert lenient_int("") == 0
    assert lenient_int(None) == 0
    assert lenient_int(3.9) == 3
