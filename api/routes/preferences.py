"""User preference routes (preferences, content filters, session overlays)"""

from typing import Optional
from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_db, get_preferences_service
from api.responses import failure_response, success_response
from domain.schemas.preference_schemas import (
    AIModelRequest,
    ContentFiltersRequest,
    CreatePreferencesRequest,
    LanguageRequest,
    PerspectiveRequest,
    PreferencesRequest,
    SessionPreferencesRequest,
    ToneRequest,
)
from services import UserPreferencesService
from app.exceptions import NotFoundError, ServiceValidationError

router = APIRouter(prefix="/users/{user_id}/preferences", tags=["Preferences"])
logger = logging.getLogger("newsplatform.api.preferences")


def _respond(result, error: str):
    """Success envelope, or a 400 carrying the field errors"""
    if not result.success:
        return failure_response(result, error)
    return success_response(result.data, result.message)


@router.get("")
def get_preferences(
    user_id: str,
    session_id: Optional[str] = Header(None, alias="Session-ID"),
    db: Session = Depends(get_db),
    service: UserPreferencesService = Depends(get_preferences_service),
):
    """
    Get a user's preferences.

    With a ``Session-ID`` header the session overlay is merged on top (and
    a default record is created for users who have none yet).
    """
    if session_id:
        result = service.get_merged_preferences(db, user_id, session_id)
    else:
        result = service.get_preferences(db, user_id)

    if not result.success:
        return failure_response(result, "Failed to retrieve preferences")
    if result.data is None:
        raise NotFoundError("User preferences not found")
    return success_response(result.data, result.message)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_preferences(
    user_id: str,
    payload: Optional[CreatePreferencesRequest] = None,
    db: Session = Depends(get_db),
    service: UserPreferencesService = Depends(get_preferences_service),
):
    """Create preferences (and optionally content filters) for a user"""
    payload = payload or CreatePreferencesRequest()
    result = service.create_preferences(
        db, user_id, payload.preference_fields(), payload.filter_fields()
    )
    return _respond(result, "Failed to create preferences")


@router.put("")
def update_preferences(
    user_id: str,
    payload: PreferencesRequest,
    db: Session = Depends(get_db),
    service: UserPreferencesService = Depends(get_preferences_service),
):
    """Partially update preferences; omitted fields are left as they are"""
    result = service.update_preferences(db, user_id, payload.to_external())
    return _respond(result, "Failed to update preferences")


@router.put("/filters")
def update_content_filters(
    user_id: str,
    payload: ContentFiltersRequest,
    db: Session = Depends(get_db),
    service: UserPreferencesService = Depends(get_preferences_service),
):
    """Replace the supplied include/exclude lists"""
    result = service.update_content_filters(db, user_id, payload.to_external())
    return _respond(result, "Failed to update content filters")


@router.put("/perspective")
def update_perspective(
    user_id: str,
    payload: PerspectiveRequest,
    db: Session = Depends(get_db),
    service: UserPreferencesService = Depends(get_preferences_service),
):
    result = service.update_perspective(db, user_id, payload.perspective)
    return _respond(result, "Failed to update perspective")


@router.put("/tone")
def update_tone(
    user_id: str,
    payload: ToneRequest,
    db: Session = Depends(get_db),
    service: UserPreferencesService = Depends(get_preferences_service),
):
    result = service.update_tone(db, user_id, payload.tone)
    return _respond(result, "Failed to update tone")


@router.put("/language")
def update_language(
    user_id: str,
    payload: LanguageRequest,
    db: Session = Depends(get_db),
    service: UserPreferencesService = Depends(get_preferences_service),
):
    result = service.update_language(db, user_id, payload.language)
    return _respond(result, "Failed to update language")


@router.put("/ai-model")
def update_ai_model(
    user_id: str,
    payload: AIModelRequest,
    db: Session = Depends(get_db),
    service: UserPreferencesService = Depends(get_preferences_service),
):
    result = service.update_ai_model(db, user_id, payload.ai_model)
    return _respond(result, "Failed to update AI model")


@router.delete("")
def delete_preferences(
    user_id: str,
    db: Session = Depends(get_db),
    service: UserPreferencesService = Depends(get_preferences_service),
):
    """Delete preferences and filters; deleting nothing still succeeds"""
    result = service.delete_preferences(db, user_id)
    if not result.success:
        return failure_response(result, "Failed to delete preferences")
    return success_response({"deleted": result.data}, result.message)


@router.post("/session")
def store_session_preferences(
    user_id: str,
    payload: SessionPreferencesRequest,
    session_id: Optional[str] = Header(None, alias="Session-ID"),
    service: UserPreferencesService = Depends(get_preferences_service),
):
    """Keep temporary preferences for the current session without saving them"""
    if not session_id:
        raise ServiceValidationError(
            "Session-ID header is required", code="SESSION_ID_REQUIRED"
        )
    result = service.store_session_preferences(session_id, payload.to_overlay())
    logger.info(f"session_preferences_posted user_id={user_id} session_id={session_id}")
    return _respond(result, "Failed to store session preferences")
