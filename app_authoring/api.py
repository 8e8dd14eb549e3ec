"""FastAPI host for application authoring sessions.

Exposes AuthoringSession to a browser form:

  POST   /sessions                 → open a NEW or EDIT session
  GET    /sessions/{id}            → fields, developer-id mode, suggestions, flags
  PUT    /sessions/{id}/static     → set static form values ("type" picks the schema)
  POST   /sessions/{id}/owner      → developer-id input edit (debounced lookup)
  POST   /sessions/{id}/submit     → create the app / update the version
  DELETE /sessions/{id}            → tear the session down

Sessions live in process memory only. When a session ends on its own
(saved, or its record could not be loaded) it is dropped from the registry
and the response carries `redirect` so the front end can navigate away.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Literal
from uuid import uuid4

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from app_authoring.client import MarketplaceClient, Settings
from app_authoring.form import AuthoringSession, FormSettings, PageContext

logger = logging.getLogger("app_authoring.api")

# ---------------------------------------------------------------------------
# API key authentication (optional - enabled when APP_AUTHORING_SERVICE_KEY is set)
# ---------------------------------------------------------------------------

_bearer = HTTPBearer(auto_error=False)


def _verify_api_key(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
) -> None:
    """Verify the Bearer token matches APP_AUTHORING_SERVICE_KEY.

    If the variable is not set, all requests are allowed (open dev mode).
    """
    api_key = os.getenv("APP_AUTHORING_SERVICE_KEY")
    if not api_key:
        return
    if not credentials or credentials.credentials != api_key:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")


# ---------------------------------------------------------------------------
# Lifespan: one data-service client per process
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    load_dotenv()

    settings = Settings.from_env()
    app.state.client = MarketplaceClient(settings)
    app.state.form_settings = FormSettings.from_env()
    app.state.sessions = {}
    logger.info("Starting app authoring API | data service: %s", settings.api_endpoint)

    yield

    for session in app.state.sessions.values():
        session.close()
    app.state.sessions.clear()
    await app.state.client.close()
    logger.info("Shutting down app authoring API")


app = FastAPI(
    title="Application Authoring API",
    description=(
        "Create or edit marketplace applications whose form is defined at runtime "
        "by an application-type schema."
    ),
    version="0.1.0",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class OpenSessionRequest(BaseModel):
    """Request body for POST /sessions."""

    mode: Literal["new", "edit"] = Field(..., description="'new' creates an app, 'edit' updates a version.")
    record_id: str | None = Field(None, description="App id (required for 'edit').")
    version: int | None = Field(None, ge=0, description="App version number (required for 'edit').")


class StaticValuesRequest(BaseModel):
    """Request body for PUT /sessions/{id}/static."""

    values: dict[str, Any] = Field(
        ...,
        description="Static form values: {type} for new apps, {name, safeName} for edits.",
        examples=[{"type": "game"}],
    )


class OwnerInputRequest(BaseModel):
    """Request body for POST /sessions/{id}/owner."""

    text: str = Field(..., description="Current contents of the developer-id input.")


class SubmitRequest(BaseModel):
    """Request body for POST /sessions/{id}/submit."""

    fields: dict[str, Any] = Field(default_factory=dict, description="Values of the rendered schema fields.")
    static: dict[str, Any] | None = Field(None, description="Optional last-moment static form values.")


class SessionResponse(BaseModel):
    """Response for all session endpoints."""

    session_id: str
    page_mode: Literal["new", "edit"]
    status: Literal["open", "closed"]
    owner_mode: Literal["SEARCH", "CREATE"] | None = Field(None, description="Developer-id input mode; null when editing.")
    owner_mode_description: str | None = None
    suggestions: list[str] = Field(default_factory=list)
    fields: list[dict[str, Any]] = Field(default_factory=list, description="Fields to render, in order.")
    static_values: dict[str, Any] = Field(default_factory=dict)
    type_items: list[str] = Field(default_factory=list, description="Selectable application types (new apps).")
    submitting: bool = False
    success: bool | None = Field(None, description="Outcome of the submit call, when this is a submit response.")
    exit_reason: str | None = None
    redirect: str | None = Field(None, description="Where to navigate once the session has ended.")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_session(request: Request, session_id: str) -> AuthoringSession:
    session = request.app.state.sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id!r} not found")
    return session


def _get_open_session(request: Request, session_id: str) -> AuthoringSession:
    session = _get_session(request, session_id)
    if session.closed:
        raise HTTPException(status_code=409, detail=f"Session {session_id!r} is closed")
    return session


def _build_response(session_id: str, session: AuthoringSession, success: bool | None = None) -> SessionResponse:
    return SessionResponse(
        session_id=session_id,
        page_mode=session.context.mode.value,
        status="closed" if session.closed else "open",
        owner_mode=session.mode.name if session.mode is not None else None,
        owner_mode_description=session.mode.description if session.mode is not None else None,
        suggestions=session.suggestions,
        fields=[f.to_dict() for f in session.fields],
        static_values=session.static_values,
        type_items=session.type_items,
        submitting=session.submitting,
        success=success,
        exit_reason=session.exit_reason,
        redirect=session.settings.exit_route if session.exit_reason else None,
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health", tags=["system"], dependencies=[Depends(_verify_api_key)])
async def health(request: Request) -> dict:
    """Health check. Verifies the API and the data-service connection are both up."""
    result = await request.app.state.client.ping()
    service_ok = "error" not in result
    return {
        "api": "ok",
        "data_service": "ok" if service_ok else "unreachable",
        "data_service_detail": result,
    }


@app.post("/sessions", response_model=SessionResponse, tags=["sessions"], dependencies=[Depends(_verify_api_key)])
async def open_session(request: Request, body: OpenSessionRequest) -> SessionResponse:
    """Open an authoring session and load what the form needs to render."""
    if body.mode == "edit":
        if not body.record_id or body.version is None:
            raise HTTPException(status_code=422, detail="record_id and version are required for edit")
        context = PageContext.edit(body.record_id, body.version)
    else:
        context = PageContext.new()

    session_id = str(uuid4())
    sessions = request.app.state.sessions

    def _on_exit(reason: str) -> None:
        sessions.pop(session_id, None)
        logger.info("Session %s ended: %s", session_id, reason)

    session = AuthoringSession(
        request.app.state.client,
        context,
        settings=request.app.state.form_settings,
        on_exit=_on_exit,
    )
    sessions[session_id] = session
    logger.info("Opening %s session %s", context.mode.value, session_id)
    await session.open()
    return _build_response(session_id, session)


@app.get("/sessions/{session_id}", response_model=SessionResponse, tags=["sessions"], dependencies=[Depends(_verify_api_key)])
async def get_session(session_id: str, request: Request) -> SessionResponse:
    return _build_response(session_id, _get_session(request, session_id))


@app.put("/sessions/{session_id}/static", response_model=SessionResponse, tags=["sessions"], dependencies=[Depends(_verify_api_key)])
async def set_static_values(session_id: str, body: StaticValuesRequest, request: Request) -> SessionResponse:
    """Set static form values. For new apps, "type" (re)loads the schema fields."""
    session = _get_open_session(request, session_id)
    for name, value in body.values.items():
        session.set_static(name, value)
    await session.wait_idle()
    return _build_response(session_id, session)


@app.post("/sessions/{session_id}/owner", response_model=SessionResponse, tags=["sessions"], dependencies=[Depends(_verify_api_key)])
async def edit_owner(session_id: str, body: OwnerInputRequest, request: Request) -> SessionResponse:
    """Feed the developer-id input; responds once the debounced lookup settles."""
    session = _get_open_session(request, session_id)
    session.edit_owner(body.text)
    await session.wait_idle()
    return _build_response(session_id, session)


@app.post("/sessions/{session_id}/submit", response_model=SessionResponse, tags=["sessions"], dependencies=[Depends(_verify_api_key)])
async def submit(session_id: str, body: SubmitRequest, request: Request) -> SessionResponse:
    session = _get_open_session(request, session_id)
    success = await session.submit(body.fields, body.static)
    return _build_response(session_id, session, success=success)


@app.delete("/sessions/{session_id}", tags=["sessions"], dependencies=[Depends(_verify_api_key)])
async def delete_session(session_id: str, request: Request) -> dict:
    session = _get_session(request, session_id)
    session.close()
    del request.app.state.sessions[session_id]
    logger.info("Session %s deleted", session_id)
    return {"deleted": True, "session_id": session_id}


# ---------------------------------------------------------------------------
# Entry point (for uvicorn programmatic launch)
# ---------------------------------------------------------------------------


def serve(host: str = "0.0.0.0", port: int = 8000, reload: bool = False) -> None:
    """Launch the FastAPI server via uvicorn."""
    import uvicorn

    from app_authoring.cli import configure_logging

    load_dotenv()
    configure_logging()
    uvicorn.run(
        "app_authoring.api:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    serve()
