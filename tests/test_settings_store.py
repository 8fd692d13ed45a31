# tests/test_settings_store.py

from __future__ import annotations

import pytest

from taskdeck.settings.settings_store import SettingsStore

from .fakes import FakePersistence


def test_defaults_and_toggles_persist() -> None:
    persistence = FakePersistence()
    ss = SettingsStore(persistence)
    prefs = ss.prefs
    assert prefs.dark_mode is False
    assert prefs.notifications is True
    assert prefs.show_backend_demo is False
    assert prefs.is_logged_in is True
    assert prefs.user_profile is not None and prefs.user_profile.name == "John Doe"

    assert ss.toggle_dark_mode() is True
    assert ss.toggle_notifications() is False
    assert ss.toggle_backend_demo() is True

    last = persistence.last
    assert last is not None
    assert last["darkMode"] is True
    assert last["notifications"] is False
    assert last["showBackendDemo"] is True
    assert last["isLoggedIn"] is True
    assert last["userProfile"]["joinDate"] == "January 2023"


def test_logout_and_login_are_boolean_stubs() -> None:
    persistence = FakePersistence()
    ss = SettingsStore(persistence)
    ss.logout()
    assert ss.prefs.is_logged_in is False
    assert ss.prefs.user_profile is None
    assert persistence.last["userProfile"] is None

    ss.login()
    assert ss.prefs.is_logged_in is True
    assert ss.prefs.user_profile.email == "john.doe@example.com"


def test_update_user_profile_merges() -> None:
    ss = SettingsStore(FakePersistence())
    ss.update_user_profile(name="Jane", location=None, avatar_url="https://example.com/a.png")
    profile = ss.prefs.user_profile
    assert profile.name == "Jane"
    assert profile.location == "New York, USA"
    assert profile.avatar_url == "https://example.com/a.png"

    with pytest.raises(TypeError):
        ss.update_user_profile(nickname="J")


def test_hydrates_from_snapshot() -> None:
    first = FakePersistence()
    SettingsStore(first).toggle_dark_mode()

    again = SettingsStore(FakePersistence(initial=first.last))
    assert again.prefs.dark_mode is True
    assert again.prefs.user_profile.name == "John Doe"


def test_logged_out_snapshot_keeps_no_profile() -> None:
    ss = SettingsStore(FakePersistence(initial={"isLoggedIn": False, "userProfile": None}))
    assert ss.prefs.is_logged_in is False
    assert ss.prefs.user_profile is None
    assert ss.prefs.notifications is True


def test_prefs_are_copies() -> None:
    persistence = FakePersistence()
    ss = SettingsStore(persistence)
    prefs = ss.prefs
    prefs.dark_mode = True
    prefs.user_profile.name = "Mallory"

    assert ss.prefs.dark_mode is False
    assert ss.prefs.user_profile.name == "John Doe"
    assert persistence.save_calls == 0
