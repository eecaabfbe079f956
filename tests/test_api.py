"""
API tests for the Health Harmony backend.

Covers the stateless flow endpoints, error mapping, the session-backed UI
endpoints and email/password auth against a fake profile backend.
"""

import json

import httpx
import openai
import pytest
from httpx import ASGITransport, AsyncClient

from conftest import FakeBackend
from health_harmony.app.main import app
from health_harmony.app.schemas import STANDARD_DISCLAIMER, TIPS_DISCLAIMER, UserProfile
from health_harmony.app.sessions import sessions
from health_harmony.ui.request_state import CONTRACT_FAILURE, PROVIDER_FAILURE

SESSION = {"X-Session-Id": "browser-1"}


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
async def client():
    """Async HTTP client for testing."""
    async with AsyncClient(transport=ASGITransport(app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def backend(monkeypatch):
    fake = FakeBackend({"user-1": UserProfile(allergies=["Latex"])})
    monkeypatch.setattr(sessions, "_backend_factory", lambda: fake)
    return fake


@pytest.fixture
def profile_payload():
    return {
        "allergies": ["Peanuts"],
        "medications": ["Lisinopril 10mg"],
        "conditions": ["High Blood Pressure"],
    }


# ============================================================================
# STATELESS FLOWS
# ============================================================================

@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_root_points_to_docs(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert "/docs" in response.json()["message"]


@pytest.mark.asyncio
async def test_validate_profile_item(client, fake_llm):
    fake_llm(json.dumps({"isValid": True}))
    response = await client.post(
        "/api/flows/validate-profile-item", json={"category": "medications", "itemName": "Metformin"}
    )
    assert response.status_code == 200
    assert response.json() == {"isValid": True}


@pytest.mark.asyncio
async def test_validate_rejects_unknown_category(client, no_llm):
    response = await client.post("/api/flows/validate-profile-item", json={"category": "vitamins", "itemName": "D3"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_suggestions(client, fake_llm):
    fake_llm(json.dumps({"suggestions": ["Metformin", "Metoprolol"]}))
    response = await client.post("/api/flows/suggestions", json={"category": "medications", "query": "Met"})
    assert response.json() == {"suggestions": ["Metformin", "Metoprolol"]}


@pytest.mark.asyncio
async def test_check_item_compatibility(client, fake_llm, profile_payload):
    fake_llm(json.dumps({"isValidItem": True, "riskLevel": "Moderate", "analysis": "Use with Caution."}))
    response = await client.post(
        "/api/flows/check-item-compatibility", json={"userProfile": profile_payload, "itemName": "Ibuprofen"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["riskLevel"] == "Moderate"
    assert data["disclaimer"] == STANDARD_DISCLAIMER


@pytest.mark.asyncio
async def test_check_invalid_item_omits_risk(client, fake_llm):
    fake_llm(json.dumps({"isValidItem": False}))
    response = await client.post("/api/flows/check-item-compatibility", json={"itemName": "asdfgh"})
    data = response.json()
    assert data["isValidItem"] is False
    assert "riskLevel" not in data
    assert "analysis" not in data


@pytest.mark.asyncio
async def test_check_without_item_is_422(client, no_llm):
    response = await client.post("/api/flows/check-item-compatibility", json={"itemName": " "})
    assert response.status_code == 422
    assert "item name" in response.json()["detail"]


@pytest.mark.asyncio
async def test_malformed_model_output_is_502(client, fake_llm):
    fake_llm("not json at all")
    response = await client.post("/api/flows/suggest-alternatives", json={"itemName": "Ibuprofen"})
    assert response.status_code == 502
    assert response.json()["detail"] == CONTRACT_FAILURE


@pytest.mark.asyncio
async def test_provider_failure_is_503(client, recording_llm):
    recording_llm(openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1")))
    response = await client.post("/api/flows/post-ingestion-advice", json={"itemName": "Ibuprofen"})
    assert response.status_code == 503
    assert response.json()["detail"] == PROVIDER_FAILURE


@pytest.mark.asyncio
async def test_lifestyle_tips(client, fake_llm, profile_payload):
    tips = [
        {"category": "Dietary Advice", "tip": "Limit salt."},
        {"category": "Exercise Recommendations", "tip": "Walk for 20 minutes a day."},
        {"category": "Stress Management", "tip": "Keep a regular sleep schedule."},
    ]
    fake_llm(json.dumps({"tips": tips}))
    response = await client.post("/api/flows/lifestyle-tips", json={"userProfile": profile_payload})
    data = response.json()
    assert data["tips"][0]["tip"] == "Limit salt."
    assert data["disclaimer"] == TIPS_DISCLAIMER


# ============================================================================
# SESSION UI
# ============================================================================

@pytest.mark.asyncio
async def test_session_requires_header(client):
    response = await client.get("/api/session")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_new_session_is_empty(client):
    data = (await client.get("/api/session", headers=SESSION)).json()
    assert data["profile"] == {"allergies": [], "medications": [], "conditions": []}
    assert data["tagLists"]["allergies"]["emptyMessage"] == "No allergies added yet."
    assert data["check"]["showPlaceholder"] is True
    assert data["auth"]["configured"] is False


@pytest.mark.asyncio
async def test_add_and_remove_profile_item(client, fake_llm):
    fake_llm(json.dumps({"isValid": True}))
    added = await client.post("/api/session/profile/allergies", json={"item": "Peanuts"}, headers=SESSION)
    assert added.json()["profile"]["allergies"] == ["Peanuts"]

    duplicate = await client.post("/api/session/profile/allergies", json={"item": "peanuts"}, headers=SESSION)
    assert duplicate.json()["notifications"][0]["title"] == "Already added"

    removed = await client.delete("/api/session/profile/allergies/Peanuts", headers=SESSION)
    assert removed.json()["profile"]["allergies"] == []


@pytest.mark.asyncio
async def test_remove_item_containing_slash(client, fake_llm):
    fake_llm(json.dumps({"isValid": True}))
    added = await client.post(
        "/api/session/profile/medications", json={"item": "Amlodipine/Benazepril"}, headers=SESSION
    )
    assert added.json()["profile"]["medications"] == ["Amlodipine/Benazepril"]

    removed = await client.delete("/api/session/profile/medications/Amlodipine%2FBenazepril", headers=SESSION)
    assert removed.status_code == 200
    assert removed.json()["profile"]["medications"] == []


@pytest.mark.asyncio
async def test_sessions_are_isolated(client, fake_llm):
    fake_llm(json.dumps({"isValid": True}))
    await client.post("/api/session/profile/conditions", json={"item": "Asthma"}, headers=SESSION)
    other = (await client.get("/api/session", headers={"X-Session-Id": "browser-2"})).json()
    assert other["profile"]["conditions"] == []


@pytest.mark.asyncio
async def test_query_schedules_suggestions(client, fake_llm, fast_debounce):
    fake_llm(json.dumps({"suggestions": ["Metformin", "Metoprolol"]}))
    response = await client.post("/api/session/profile/medications/query", json={"query": "Met"}, headers=SESSION)
    assert response.status_code == 202

    await sessions.get("browser-1").tag_lists["medications"].debouncer.wait()
    data = (await client.get("/api/session", headers=SESSION)).json()
    assert data["tagLists"]["medications"]["suggestions"] == ["Metformin", "Metoprolol"]


@pytest.mark.asyncio
async def test_session_check_and_follow_ups(client, fake_llm):
    fake_llm(
        json.dumps({"isValidItem": True, "riskLevel": "High", "analysis": "Avoid. Contains peanuts."}),
        json.dumps(
            {
                "alternatives": [
                    {"name": "Sunflower seed butter", "reason": "Peanut free."},
                    {"name": "Tahini", "reason": "Made from sesame, not peanuts."},
                ]
            }
        ),
    )
    check = (await client.post("/api/session/check", json={"itemName": "Peanut butter"}, headers=SESSION)).json()
    assert check["check"]["status"] == "success"
    assert check["check"]["itemName"] == "Peanut butter"
    assert check["check"]["canSuggestAlternatives"] is True

    follow_up = (await client.post("/api/session/check/alternatives", headers=SESSION)).json()
    assert follow_up["check"]["alternatives"]["result"]["alternatives"][0]["name"] == "Sunflower seed butter"


@pytest.mark.asyncio
async def test_follow_up_without_risk_is_422(client, fake_llm):
    fake_llm(json.dumps({"isValidItem": True, "riskLevel": "None", "analysis": "Appears Safe."}))
    await client.post("/api/session/check", json={"itemName": "Water"}, headers=SESSION)
    response = await client.post("/api/session/check/advice", headers=SESSION)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_session_check_failure_sets_error(client, fake_llm):
    fake_llm("garbage")
    data = (await client.post("/api/session/check", json={"itemName": "Ibuprofen"}, headers=SESSION)).json()
    assert data["check"]["status"] == "failed"
    assert data["check"]["error"] == CONTRACT_FAILURE
    assert data["notifications"][0]["title"] == "Analysis Failed"


@pytest.mark.asyncio
async def test_session_lifestyle_tips(client, fake_llm):
    tips = [
        {"category": "Home Environment", "tip": "Use a HEPA filter."},
        {"category": "Home Environment", "tip": "Wash bedding weekly in hot water."},
        {"category": "Dietary Advice", "tip": "Read labels for hidden allergens."},
    ]
    fake_llm(json.dumps({"tips": tips}))
    data = (await client.post("/api/session/lifestyle-tips", headers=SESSION)).json()
    assert data["lifestyleTips"]["status"] == "success"
    assert data["lifestyleTips"]["result"]["tips"][0]["tip"] == "Use a HEPA filter."


# ============================================================================
# AUTH
# ============================================================================

@pytest.mark.asyncio
async def test_auth_unavailable_without_backend(client):
    response = await client.post(
        "/api/auth/login", json={"email": "ada@example.com", "password": "secret"}, headers=SESSION
    )
    assert response.status_code == 503


@pytest.mark.asyncio
async def test_login_adopts_saved_profile(client, backend):
    response = await client.post(
        "/api/auth/login", json={"email": "ada@example.com", "password": "secret"}, headers=SESSION
    )
    assert response.status_code == 200
    assert response.json() == {"configured": True, "authenticated": True, "email": "ada@example.com"}

    data = (await client.get("/api/session", headers=SESSION)).json()
    assert data["profile"]["allergies"] == ["Latex"]
    assert data["notifications"][0]["title"] == "Logged in successfully!"


@pytest.mark.asyncio
async def test_login_with_wrong_password_is_401(client, backend):
    response = await client.post(
        "/api/auth/login", json={"email": "ada@example.com", "password": "nope"}, headers=SESSION
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_register_saves_session_profile(client, backend, fake_llm):
    fake_llm(json.dumps({"isValid": True}))
    await client.post("/api/session/profile/conditions", json={"item": "Asthma"}, headers=SESSION)
    response = await client.post(
        "/api/auth/register", json={"email": "grace@example.com", "password": "pw"}, headers=SESSION
    )
    assert response.json()["authenticated"] is True
    assert backend.profiles["user-2"].conditions == ["Asthma"]


@pytest.mark.asyncio
async def test_logout_resets_profile(client, backend):
    await client.post("/api/auth/login", json={"email": "ada@example.com", "password": "secret"}, headers=SESSION)
    response = await client.post("/api/auth/logout", headers=SESSION)
    assert response.json()["authenticated"] is False

    data = (await client.get("/api/session", headers=SESSION)).json()
    assert data["profile"]["allergies"] == []
