import asyncio
import logging
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from health_harmony.app.errors import (
    AuthError,
    AuthUnavailableError,
    InputValidationError,
    ModelContractError,
    ProviderError,
)
from health_harmony.app.logging import configure_logging
from health_harmony.app.schemas import (
    AddItemRequest,
    AdviceResult,
    AlternativesResult,
    AuthStatus,
    Category,
    CheckItemCompatibilityInput,
    CompatibilityResult,
    Credentials,
    GetLifestyleTipsInput,
    GetPostIngestionAdviceInput,
    GetSuggestionsInput,
    LifestyleTipsResult,
    Notification,
    QueryRequest,
    SessionCheckRequest,
    SuggestAlternativesInput,
    SuggestionsResult,
    ValidateProfileItemInput,
    ValidationResult,
)
from health_harmony.app.sessions import Session, SessionView, sessions
from health_harmony.app.settings import settings
from health_harmony.flows.check_item_compatibility import check_item_compatibility
from health_harmony.flows.get_lifestyle_tips import get_lifestyle_tips
from health_harmony.flows.get_post_ingestion_advice import get_post_ingestion_advice
from health_harmony.flows.get_suggestions import get_suggestions
from health_harmony.flows.suggest_alternatives import suggest_alternatives
from health_harmony.flows.validate_profile_item import validate_profile_item
from health_harmony.observability.tracing import configure_tracing
from health_harmony.ui.request_state import CONTRACT_FAILURE, PROVIDER_FAILURE

configure_logging(settings.log_level)
configure_tracing()

app = FastAPI(title="Health Harmony")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger = logging.getLogger(__name__)


# ---- error mapping ----

@app.exception_handler(InputValidationError)
async def input_validation_handler(request: Request, exc: InputValidationError):
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": str(exc)})


@app.exception_handler(ModelContractError)
async def model_contract_handler(request: Request, exc: ModelContractError):
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": CONTRACT_FAILURE})


@app.exception_handler(ProviderError)
async def provider_handler(request: Request, exc: ProviderError):
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": PROVIDER_FAILURE})


@app.exception_handler(AuthError)
async def auth_handler(request: Request, exc: AuthError):
    return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": str(exc)})


@app.exception_handler(AuthUnavailableError)
async def auth_unavailable_handler(request: Request, exc: AuthUnavailableError):
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Internal server error"})


async def get_session(x_session_id: Optional[str] = Header(None)) -> Session:
    if not x_session_id or not x_session_id.strip():
        raise HTTPException(status_code=400, detail="Missing X-Session-Id header")
    return sessions.get(x_session_id.strip())


# ---- stateless flows ----

@app.post("/api/flows/validate-profile-item", response_model=ValidationResult)
async def validate_profile_item_endpoint(payload: ValidateProfileItemInput):
    return await validate_profile_item(payload)


@app.post("/api/flows/suggestions", response_model=SuggestionsResult)
async def suggestions_endpoint(payload: GetSuggestionsInput):
    return await get_suggestions(payload)


@app.post(
    "/api/flows/check-item-compatibility",
    response_model=CompatibilityResult,
    response_model_exclude_none=True,
)
async def check_item_compatibility_endpoint(payload: CheckItemCompatibilityInput):
    return await check_item_compatibility(payload)


@app.post("/api/flows/suggest-alternatives", response_model=AlternativesResult)
async def suggest_alternatives_endpoint(payload: SuggestAlternativesInput):
    return await suggest_alternatives(payload)


@app.post("/api/flows/post-ingestion-advice", response_model=AdviceResult)
async def post_ingestion_advice_endpoint(payload: GetPostIngestionAdviceInput):
    return await get_post_ingestion_advice(payload)


@app.post("/api/flows/lifestyle-tips", response_model=LifestyleTipsResult)
async def lifestyle_tips_endpoint(payload: GetLifestyleTipsInput):
    return await get_lifestyle_tips(payload)


# ---- session-backed UI ----

@app.get("/api/session", response_model=SessionView)
def session_view(session: Session = Depends(get_session)):
    return session.view()


@app.post("/api/session/profile/{category}", response_model=SessionView)
async def add_profile_item(category: Category, payload: AddItemRequest, session: Session = Depends(get_session)):
    await session.tag_lists[category].add(payload.item)
    return session.view()


@app.delete("/api/session/profile/{category}/{item:path}", response_model=SessionView)
async def remove_profile_item(category: Category, item: str, session: Session = Depends(get_session)):
    await session.tag_lists[category].remove(item)
    return session.view()


@app.post("/api/session/profile/{category}/query", status_code=status.HTTP_202_ACCEPTED)
async def update_query(category: Category, payload: QueryRequest, session: Session = Depends(get_session)):
    session.tag_lists[category].update_query(payload.query)
    return {"query": payload.query}


@app.post("/api/session/check", response_model=SessionView)
async def session_check(payload: SessionCheckRequest, session: Session = Depends(get_session)):
    await session.panel.run_check(session.store.profile, payload.item_name, payload.photo_data_uris)
    return session.view()


@app.post("/api/session/check/alternatives", response_model=SessionView)
async def session_alternatives(session: Session = Depends(get_session)):
    await session.panel.run_alternatives()
    return session.view()


@app.post("/api/session/check/advice", response_model=SessionView)
async def session_advice(session: Session = Depends(get_session)):
    await session.panel.run_advice()
    return session.view()


@app.post("/api/session/lifestyle-tips", response_model=SessionView)
async def session_lifestyle_tips(session: Session = Depends(get_session)):
    await session.run_lifestyle_tips()
    return session.view()


# ---- auth ----

def _require_backend(session: Session):
    if session.store.backend is None:
        raise AuthUnavailableError(
            "Authentication unavailable: Supabase is not configured. Profiles are kept for this session only."
        )
    return session.store.backend


@app.get("/api/auth/status", response_model=AuthStatus)
def auth_status(session: Session = Depends(get_session)):
    return session.auth_status()


@app.post("/api/auth/register", response_model=AuthStatus)
async def register(payload: Credentials, session: Session = Depends(get_session)):
    backend = _require_backend(session)
    user = await asyncio.to_thread(backend.register, payload.email, payload.password)
    await _signed_in(session, user, "Registered successfully!")
    return session.auth_status()


@app.post("/api/auth/login", response_model=AuthStatus)
async def login(payload: Credentials, session: Session = Depends(get_session)):
    backend = _require_backend(session)
    user = await asyncio.to_thread(backend.login, payload.email, payload.password)
    await _signed_in(session, user, "Logged in successfully!")
    return session.auth_status()


@app.post("/api/auth/logout", response_model=AuthStatus)
def logout(session: Session = Depends(get_session)):
    session.store.sign_out()
    session.notify(Notification(title="Logged out"))
    return session.auth_status()


async def _signed_in(session: Session, user, title: str) -> None:
    notification = await session.store.sign_in(user)
    session.notify(Notification(title=title))
    if notification is not None:
        session.notify(notification)
    logger.info("session %s signed in as user %s", session.id, user.id)


@app.get("/health")
def health():
    return {"status": "ok", "persistence": settings.supabase_configured}


@app.get("/")
def root():
    return {"message": "Health Harmony API. See /docs for the endpoints."}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
