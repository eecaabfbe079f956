"""
Supabase auth and profile documents.

Handles: email/password registration and login, per-user profile load/save.
The backend is optional: without SUPABASE_URL / SUPABASE_KEY every profile
lives only in its session.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from supabase import Client, create_client

from health_harmony.app.errors import AuthError, PersistenceError
from health_harmony.app.schemas import AuthUser, UserProfile
from health_harmony.app.settings import settings

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = ("allergies", "medications", "conditions")


class SupabaseBackend:
    def __init__(self, client_factory: Callable[[], Client], table: str = "profiles"):
        self._client_factory = client_factory
        self.client = client_factory()
        self.table = table

    # ──────────────────────────────────────────────
    # AUTH
    # ──────────────────────────────────────────────

    def _auth(self):
        # A fresh client per auth call keeps one user's session token out of
        # the shared client used for profile reads and writes.
        return self._client_factory().auth

    def register(self, email: str, password: str) -> AuthUser:
        try:
            response = self._auth().sign_up({"email": email, "password": password})
        except Exception as exc:  # noqa: BLE001
            raise AuthError(str(exc)) from exc
        if response.user is None:
            raise AuthError("Could not create user")
        return AuthUser(id=str(response.user.id), email=response.user.email or email)

    def login(self, email: str, password: str) -> AuthUser:
        try:
            response = self._auth().sign_in_with_password({"email": email, "password": password})
        except Exception as exc:  # noqa: BLE001
            raise AuthError(str(exc)) from exc
        if response.user is None:
            raise AuthError("Incorrect email or password")
        return AuthUser(id=str(response.user.id), email=response.user.email or email)

    # ──────────────────────────────────────────────
    # PROFILES
    # ──────────────────────────────────────────────

    def load_profile(self, user_id: str) -> Optional[UserProfile]:
        """Load a user's profile document, or None if the user has none yet."""
        try:
            result = self.client.table(self.table).select("*").eq("user_id", user_id).execute()
        except Exception as exc:  # noqa: BLE001
            raise PersistenceError(f"Could not load profile: {exc}") from exc
        if not result.data:
            return None
        row = result.data[0]
        return UserProfile(**{k: row.get(k) or [] for k in PROFILE_COLUMNS})

    def save_profile(self, user_id: str, profile: UserProfile) -> None:
        """Upsert the profile document for a user."""
        data = profile.model_dump(include=set(PROFILE_COLUMNS))
        data["user_id"] = user_id
        data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            existing = self.client.table(self.table).select("user_id").eq("user_id", user_id).execute()
            if existing.data:
                result = self.client.table(self.table).update(data).eq("user_id", user_id).execute()
            else:
                result = self.client.table(self.table).insert(data).execute()
        except Exception as exc:  # noqa: BLE001
            raise PersistenceError(f"Could not save profile: {exc}") from exc
        if not result.data:
            raise PersistenceError("Profile write returned no rows")


_backend: Optional[SupabaseBackend] = None


def get_backend() -> Optional[SupabaseBackend]:
    """Return the shared backend, or None when Supabase is not configured."""
    global _backend
    if _backend is None and settings.supabase_configured:
        _backend = SupabaseBackend(
            lambda: create_client(settings.supabase_url, settings.supabase_key),
            table=settings.profiles_table,
        )
        logger.info("Supabase backend configured for table %s", settings.profiles_table)
    return _backend
