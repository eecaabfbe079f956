"""In-memory per-browser sessions keyed by the X-Session-Id header.

Sessions idle for longer than the configured TTL are evicted on the next
lookup, and the least recently used ones go first once the registry is full.
"""
import logging
import time
from collections import OrderedDict
from typing import Callable, Dict, List, Optional

from health_harmony.app.schemas import (
    AuthStatus,
    CamelModel,
    Category,
    GetLifestyleTipsInput,
    LifestyleTipsResult,
    Notification,
    UserProfile,
)
from health_harmony.app.settings import settings
from health_harmony.flows.get_lifestyle_tips import get_lifestyle_tips
from health_harmony.profile.store import ProfileStore
from health_harmony.profile.supabase_backend import SupabaseBackend, get_backend
from health_harmony.ui.check_panel import CheckPanel, CheckPanelView
from health_harmony.ui.request_state import RequestState, RequestStatus
from health_harmony.ui.tag_list import TagListController, TagListView

logger = logging.getLogger(__name__)


class LifestyleTipsView(CamelModel):
    status: RequestStatus
    result: Optional[LifestyleTipsResult] = None
    error: Optional[str] = None


class SessionView(CamelModel):
    profile: UserProfile
    tag_lists: Dict[Category, TagListView]
    check: CheckPanelView
    lifestyle_tips: LifestyleTipsView
    auth: AuthStatus
    notifications: List[Notification]


class Session:
    def __init__(self, session_id: str, backend: Optional[SupabaseBackend] = None):
        self.id = session_id
        self.store = ProfileStore(backend)
        self.notifications: List[Notification] = []
        self.panel = CheckPanel(self.notify)
        self.tag_lists = {category: TagListController(category, self.store, self.notify) for category in Category}
        self.lifestyle_tips: RequestState[LifestyleTipsResult] = RequestState("get_lifestyle_tips")
        self.last_seen = 0.0

    def close(self) -> None:
        for controller in self.tag_lists.values():
            controller.debouncer.cancel()

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def drain_notifications(self) -> List[Notification]:
        drained, self.notifications = self.notifications, []
        return drained

    async def run_lifestyle_tips(self) -> bool:
        payload = GetLifestyleTipsInput(user_profile=self.store.profile.model_copy(deep=True))
        return await self.lifestyle_tips.run(
            lambda: get_lifestyle_tips(payload),
            notify=self.notify,
            failure_title="Tips Unavailable",
        )

    def auth_status(self) -> AuthStatus:
        user = self.store.user
        return AuthStatus(
            configured=self.store.backend is not None,
            authenticated=user is not None,
            email=user.email if user else None,
        )

    def view(self) -> SessionView:
        return SessionView(
            profile=self.store.profile,
            tag_lists={category: controller.view() for category, controller in self.tag_lists.items()},
            check=self.panel.view(),
            lifestyle_tips=LifestyleTipsView(
                status=self.lifestyle_tips.status,
                result=self.lifestyle_tips.result,
                error=self.lifestyle_tips.error,
            ),
            auth=self.auth_status(),
            notifications=self.drain_notifications(),
        )


class SessionRegistry:
    def __init__(
        self,
        backend_factory: Callable[[], Optional[SupabaseBackend]] = get_backend,
        ttl_seconds: Optional[float] = None,
        max_sessions: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._backend_factory = backend_factory
        self.ttl_seconds = settings.session_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.max_sessions = settings.max_sessions if max_sessions is None else max_sessions
        self._clock = clock
        self._sessions: "OrderedDict[str, Session]" = OrderedDict()

    @property
    def backend(self) -> Optional[SupabaseBackend]:
        return self._backend_factory()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def get(self, session_id: str) -> Session:
        now = self._clock()
        self._evict_idle(now)
        session = self._sessions.get(session_id)
        if session is None:
            session = Session(session_id, self.backend)
            self._sessions[session_id] = session
            logger.info("opened session %s (persistent profiles: %s)", session_id, session.store.backend is not None)
            while len(self._sessions) > self.max_sessions:
                self._drop(next(iter(self._sessions)), "capacity")
        else:
            self._sessions.move_to_end(session_id)
        session.last_seen = now
        return session

    def clear(self) -> None:
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()

    def _evict_idle(self, now: float) -> None:
        # ordered by last access, so the idle ones are at the front
        while self._sessions:
            oldest_id, oldest = next(iter(self._sessions.items()))
            if now - oldest.last_seen < self.ttl_seconds:
                break
            self._drop(oldest_id, "idle")

    def _drop(self, session_id: str, reason: str) -> None:
        session = self._sessions.pop(session_id)
        session.close()
        logger.info("evicted session %s (%s)", session_id, reason)


sessions = SessionRegistry()
