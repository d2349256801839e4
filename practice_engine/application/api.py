"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Header, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..domain.constants import DEFAULT_ACTIVITY_TYPE
from ..domain.entities import ContentSelection, MediaTrack, SessionResult, TargetSpec
from ..domain.exceptions import (
    InvalidPhaseTransitionError,
    SessionAlreadyActiveError,
    SessionNotFoundError,
)
from ..infrastructure.http_catalog_service import HttpCatalogService
from ..infrastructure.http_session_persistence import HttpSessionPersistence
from ..infrastructure.local_catalog_service import InMemoryCatalogService
from ..infrastructure.local_media_surface import InMemoryMediaSurface
from ..infrastructure.local_session_persistence import InMemorySessionPersistence
from ..infrastructure.static_identity_provider import StaticIdentityProvider
from .config import Settings, settings
from .controller import PracticeSessionController

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


class SelectionRequest(BaseModel):
    """Emotion and target chosen by the user."""

    user_key: str = Field(min_length=1)
    activity_type: str = DEFAULT_ACTIVITY_TYPE
    emotion: str = Field(min_length=1)
    target: TargetSpec


class IncrementRequest(BaseModel):
    """Repetitions to add to a count session."""

    step: int = Field(default=1, ge=1)


def build_controller(config: Settings) -> PracticeSessionController:
    """Wire the controller with the backends named in the settings."""
    if config.catalog_backend == "http":
        catalog = HttpCatalogService(
            config.platform_api_url,
            timeout=config.request_timeout_seconds,
            auth_token=config.catalog_auth_token,
        )
    else:
        catalog = InMemoryCatalogService()

    if config.persistence_backend == "http":
        persistence = HttpSessionPersistence(
            config.platform_api_url,
            timeout=config.request_timeout_seconds,
        )
    else:
        persistence = InMemorySessionPersistence()

    return PracticeSessionController(
        catalog=catalog,
        persistence=persistence,
        media_surface_factory=InMemoryMediaSurface,
        emotion_tags=tuple(config.emotion_tags),
        min_duration_minutes=config.min_duration_minutes,
        max_duration_minutes=config.max_duration_minutes,
        allowed_counts=tuple(config.allowed_counts),
        tick_interval=config.tick_interval_seconds,
        media_settle_delay=config.media_settle_delay_seconds,
        selection_debounce=config.selection_debounce_seconds,
    )


# Initialize controller with injected dependencies
controller = build_controller(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await controller.shutdown()
    for backend in (controller.catalog, controller.persistence):
        close = getattr(backend, "close", None)
        if close is not None:
            await close()


# Create FastAPI app instance
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _identity_from_header(authorization: Optional[str]) -> StaticIdentityProvider:
    """Extract the bearer token; only its presence matters to the engine."""
    if not authorization:
        return StaticIdentityProvider(None)
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return StaticIdentityProvider(None)
    return StaticIdentityProvider(token)


def _selection_to_dict(selection: ContentSelection) -> dict:
    return {
        "configuration": selection.configuration.model_dump(mode="json") if selection.configuration else None,
        "clip": selection.clip.model_dump(mode="json") if selection.clip else None,
        "full_reward": selection.full_reward,
        "catalog_available": selection.catalog_available,
    }


def _result_to_dict(result: SessionResult) -> dict:
    return {
        **result.model_dump(mode="json"),
        "completion_status": result.completion_status.value,
        "completion_percentage": result.completion_percentage,
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return controller.get_health_status()


@app.post("/selection")
async def preview_selection(request: SelectionRequest):
    """Preview the content a session would use for an emotion and target.

    Rapid successive requests for the same user are debounced; superseded
    requests answer with ``superseded: true``.
    """
    try:
        selection = await controller.preview_selection(
            request.user_key, request.activity_type, request.emotion, request.target
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    if selection is None:
        return {"superseded": True}
    return {"superseded": False, **_selection_to_dict(selection)}


@app.post("/sessions", status_code=status.HTTP_201_CREATED)
async def start_session(
    request: SelectionRequest,
    authorization: Optional[str] = Header(None),
):
    """Start a practice session for a user."""
    try:
        service = await controller.start_session(
            user_key=request.user_key,
            activity_type=request.activity_type,
            emotion_tag=request.emotion,
            target=request.target,
            identity_provider=_identity_from_header(authorization),
        )
    except SessionAlreadyActiveError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return service.get_session_state()


@app.get("/sessions/{user_key}")
async def get_session(user_key: str):
    """Get the state of the user's current or most recent session."""
    try:
        return controller.get_session(user_key).get_session_state()
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@app.post("/sessions/{user_key}/increment")
async def increment_session(user_key: str, request: Optional[IncrementRequest] = None):
    """Count repetitions in a count session."""
    step = request.step if request else 1
    try:
        service = await controller.increment(user_key, step)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidPhaseTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return service.get_session_state()


@app.post("/sessions/{user_key}/stop")
async def stop_session(user_key: str, authorization: Optional[str] = Header(None)):
    """End the user's session early.

    The result is returned immediately; its submission continues in the
    background and is visible through ``reward_status`` on the session.
    """
    try:
        result = await controller.stop_session(user_key, _identity_from_header(authorization))
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidPhaseTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception as e:
        logger.error(f"Error stopping session for user {user_key}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {
        "result": _result_to_dict(result),
        "session": controller.get_session(user_key).get_session_state(),
    }


@app.post("/sessions/{user_key}/media/{track}/toggle")
async def toggle_media(user_key: str, track: MediaTrack):
    """Toggle the background video or audio track."""
    try:
        state = await controller.toggle_media(user_key, track)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"track": track.value, "state": state.value}
