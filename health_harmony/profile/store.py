"""Per-session health profile with a best-effort remote mirror.

Local mutations always stick. When a user is signed in and a backend is
configured, the whole profile is written remotely after each mutation; a
failed write is reported as a notification and never rolled back.
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from health_harmony.app.errors import PersistenceError
from health_harmony.app.schemas import AuthUser, Category, Notification, UserProfile
from health_harmony.profile.supabase_backend import SupabaseBackend

logger = logging.getLogger(__name__)

SAVE_FAILED = Notification(
    title="Profile not saved",
    description="Your change is kept for this session but could not be saved to your account.",
    variant="destructive",
)
LOAD_FAILED = Notification(
    title="Profile not loaded",
    description="Your saved profile could not be loaded. Changes made now stay in this session only.",
    variant="destructive",
)


class Outcome(str, Enum):
    ADDED = "added"
    DUPLICATE = "duplicate"
    EMPTY = "empty"
    REMOVED = "removed"
    MISSING = "missing"


@dataclass
class Mutation:
    outcome: Outcome
    item: str
    notification: Optional[Notification] = None

    @property
    def changed(self) -> bool:
        return self.outcome in (Outcome.ADDED, Outcome.REMOVED)


class ProfileStore:
    def __init__(self, backend: Optional[SupabaseBackend] = None):
        self.backend = backend
        self.user: Optional[AuthUser] = None
        self._profile: Optional[UserProfile] = None
        # remote saves are serialized; each one writes the profile as of its turn
        self._mirror_lock = asyncio.Lock()

    @property
    def profile(self) -> UserProfile:
        if self._profile is None:
            self._profile = UserProfile()
        return self._profile

    @property
    def persistent(self) -> bool:
        return self.user is not None and self.backend is not None

    def contains(self, category: Category, item: str) -> bool:
        needle = item.strip().lower()
        return any(existing.lower() == needle for existing in self.profile.items(category))

    async def add(self, category: Category, item: str) -> Mutation:
        value = item.strip()
        if not value:
            return Mutation(Outcome.EMPTY, value)
        if self.contains(category, value):
            return Mutation(Outcome.DUPLICATE, value)
        self.profile.items(category).append(value)
        return Mutation(Outcome.ADDED, value, await self._mirror())

    async def remove(self, category: Category, item: str) -> Mutation:
        items = self.profile.items(category)
        if item not in items:
            return Mutation(Outcome.MISSING, item)
        items.remove(item)
        return Mutation(Outcome.REMOVED, item, await self._mirror())

    def replace(self, profile: UserProfile) -> None:
        self._profile = profile.model_copy(deep=True)

    async def sign_in(self, user: AuthUser) -> Optional[Notification]:
        """Adopt the user's remote document, creating it from the session profile if missing."""
        self.user = user
        if self.backend is None:
            return None
        try:
            remote = await asyncio.to_thread(self.backend.load_profile, user.id)
        except PersistenceError as exc:
            logger.warning("profile load failed for user %s: %s", user.id, exc)
            return LOAD_FAILED
        if remote is None:
            return await self._mirror()
        self.replace(remote)
        return None

    def sign_out(self) -> None:
        self.user = None
        self._profile = None

    async def _mirror(self) -> Optional[Notification]:
        if not self.persistent:
            return None
        user_id = self.user.id
        async with self._mirror_lock:
            if self.user is None or self.user.id != user_id:
                return None
            snapshot = self.profile.model_copy(deep=True)
            try:
                await asyncio.to_thread(self.backend.save_profile, user_id, snapshot)
            except PersistenceError as exc:
                logger.warning("profile save failed for user %s: %s", user_id, exc)
                return SAVE_FAILED
        return None
