import asyncio
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage

from health_harmony.app.errors import AuthError, PersistenceError
from health_harmony.app.schemas import AuthUser, UserProfile
from health_harmony.app.sessions import sessions
from health_harmony.app.settings import settings


class RecordingLLM:
    """Chat model stand-in that records the messages it was sent."""

    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.calls: List[list] = []

    async def ainvoke(self, messages, *args, **kwargs):
        self.calls.append(messages)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return AIMessage(content=response)


class GatedLLM:
    """Chat model stand-in whose replies are released by the test, in any order."""

    def __init__(self):
        self.gates: List[asyncio.Future] = []

    async def ainvoke(self, messages, *args, **kwargs):
        gate = asyncio.get_running_loop().create_future()
        self.gates.append(gate)
        return AIMessage(content=await gate)

    async def wait_for_calls(self, count: int):
        while len(self.gates) < count:
            await asyncio.sleep(0)


class FakeBackend:
    def __init__(self, profiles: Optional[Dict[str, UserProfile]] = None):
        self.profiles = dict(profiles or {})
        self.saves: List[tuple] = []
        self.fail_saves = False
        self.fail_loads = False
        self.users = {"ada@example.com": ("secret", AuthUser(id="user-1", email="ada@example.com"))}

    def register(self, email: str, password: str) -> AuthUser:
        if email in self.users:
            raise AuthError("User already registered")
        user = AuthUser(id=f"user-{len(self.users) + 1}", email=email)
        self.users[email] = (password, user)
        return user

    def login(self, email: str, password: str) -> AuthUser:
        stored = self.users.get(email)
        if stored is None or stored[0] != password:
            raise AuthError("Invalid login credentials")
        return stored[1]

    def load_profile(self, user_id: str) -> Optional[UserProfile]:
        if self.fail_loads:
            raise PersistenceError("database offline")
        return self.profiles.get(user_id)

    def save_profile(self, user_id: str, profile: UserProfile) -> None:
        if self.fail_saves:
            raise PersistenceError("database offline")
        self.saves.append((user_id, profile))
        self.profiles[user_id] = profile


@pytest.fixture(autouse=True)
def reset_sessions(monkeypatch):
    monkeypatch.setattr(sessions, "_backend_factory", lambda: None)
    sessions.clear()
    yield
    sessions.clear()


@pytest.fixture
def fast_debounce(monkeypatch):
    monkeypatch.setattr(settings, "suggestion_debounce_seconds", 0.01)


@pytest.fixture
def fake_llm(monkeypatch):
    """Patch the model factory to serve canned replies in order."""

    def install(*responses: str) -> FakeListChatModel:
        model = FakeListChatModel(responses=list(responses))
        monkeypatch.setattr("health_harmony.flows.base._llm", lambda: model)
        return model

    return install


@pytest.fixture
def recording_llm(monkeypatch):
    def install(*responses: Any) -> RecordingLLM:
        model = RecordingLLM(list(responses))
        monkeypatch.setattr("health_harmony.flows.base._llm", lambda: model)
        return model

    return install


@pytest.fixture
def gated_llm(monkeypatch):
    model = GatedLLM()
    monkeypatch.setattr("health_harmony.flows.base._llm", lambda: model)
    return model


@pytest.fixture
def no_llm(monkeypatch):
    """Fail loudly if any flow reaches the model."""
    factory = MagicMock(side_effect=AssertionError("model must not be called"))
    monkeypatch.setattr("health_harmony.flows.base._llm", factory)
    return factory


@pytest.fixture
def sample_profile():
    return UserProfile(
        allergies=["Peanuts"],
        medications=["Lisinopril 10mg"],
        conditions=["High Blood Pressure"],
    )


@pytest.fixture
def photo_uri():
    return "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="
