# src/taskdeck/settings/settings_store.py

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, replace
from typing import Any

from ..core.ports import Snapshot, SnapshotPersistence

logger = logging.getLogger(__name__)

_PROFILE_KEYS = {
    "name": "name",
    "email": "email",
    "phone": "phone",
    "location": "location",
    "bio": "bio",
    "avatar_url": "avatarUrl",
    "join_date": "joinDate",
}


@dataclass(slots=True)
class UserProfile:
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    join_date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for attr, key in _PROFILE_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                out[key] = value
        return out

    @classmethod
    def from_dict(cls, raw: Any) -> UserProfile | None:
        if not isinstance(raw, dict):
            return None
        kwargs = {attr: raw.get(key) for attr, key in _PROFILE_KEYS.items() if raw.get(key) is not None}
        return cls(**{k: str(v) for k, v in kwargs.items()})


def default_profile() -> UserProfile:
    return UserProfile(
        name="John Doe",
        email="john.doe@example.com",
        phone="+1 (555) 123-4567",
        location="New York, USA",
        bio=(
            "Task management enthusiast and productivity expert. "
            "I love organizing projects and helping teams stay on track."
        ),
        join_date="January 2023",
    )


@dataclass(slots=True)
class AppPreferences:
    dark_mode: bool = False
    notifications: bool = True
    show_backend_demo: bool = False
    is_logged_in: bool = True
    user_profile: UserProfile | None = field(default_factory=default_profile)

    def to_dict(self) -> Snapshot:
        return {
            "darkMode": self.dark_mode,
            "notifications": self.notifications,
            "showBackendDemo": self.show_backend_demo,
            "isLoggedIn": self.is_logged_in,
            "userProfile": self.user_profile.to_dict() if self.user_profile is not None else None,
        }

    @classmethod
    def from_dict(cls, raw: Snapshot) -> AppPreferences:
        base = cls()
        return cls(
            dark_mode=bool(raw.get("darkMode", base.dark_mode)),
            notifications=bool(raw.get("notifications", base.notifications)),
            show_backend_demo=bool(raw.get("showBackendDemo", base.show_backend_demo)),
            is_logged_in=bool(raw.get("isLoggedIn", base.is_logged_in)),
            user_profile=(
                UserProfile.from_dict(raw["userProfile"]) if "userProfile" in raw else base.user_profile
            ),
        )


class SettingsStore:
    """
    UI preferences and the demo sign-in flag, persisted as one partition.

    login()/logout() only flip a boolean; there is no real authentication.
    """

    def __init__(self, persistence: SnapshotPersistence) -> None:
        self._persistence = persistence
        self._prefs = AppPreferences()
        try:
            snap = persistence.load()
        except Exception:
            logger.exception("Failed to load settings snapshot; using defaults.")
            snap = None
        if snap:
            self._prefs = AppPreferences.from_dict(snap)

    @property
    def prefs(self) -> AppPreferences:
        """A copy; change preferences through the methods below."""
        return copy.deepcopy(self._prefs)

    def _set(self, **changes: Any) -> None:
        self._prefs = replace(self._prefs, **changes)
        try:
            self._persistence.save(self._prefs.to_dict())
        except Exception:
            logger.exception("Failed to persist settings snapshot.")

    def toggle_dark_mode(self) -> bool:
        self._set(dark_mode=not self._prefs.dark_mode)
        return self._prefs.dark_mode

    def toggle_notifications(self) -> bool:
        self._set(notifications=not self._prefs.notifications)
        return self._prefs.notifications

    def toggle_backend_demo(self) -> bool:
        self._set(show_backend_demo=not self._prefs.show_backend_demo)
        return self._prefs.show_backend_demo

    def login(self) -> None:
        self._set(is_logged_in=True, user_profile=default_profile())

    def logout(self) -> None:
        self._set(is_logged_in=False, user_profile=None)

    def update_user_profile(self, **fields: str | None) -> None:
        """Shallow merge: only the given (non-None) fields change."""
        unknown = set(fields) - set(_PROFILE_KEYS)
        if unknown:
            raise TypeError(f"unknown profile fields: {', '.join(sorted(unknown))}")
        current = self._prefs.user_profile or UserProfile()
        changes = {k: v for k, v in fields.items() if v is not None}
        self._set(user_profile=replace(current, **changes))
