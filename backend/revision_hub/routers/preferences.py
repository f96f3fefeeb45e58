"""
Preferences API Router

Endpoints:
- GET /preferences/{user_id}/pacing - Current pacing mode
- PUT /preferences/{user_id}/pacing - Update pacing mode

A new pacing mode only affects reviews submitted after the change.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from revision_hub.db.base import get_db
from revision_hub.models.review import PacingPreferenceRequest, PacingPreferenceResponse
from revision_hub.services.review import PacingPreferenceService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/preferences", tags=["preferences"])


async def get_preference_service(
    db: AsyncSession = Depends(get_db),
) -> PacingPreferenceService:
    """Get pacing preference service."""
    return PacingPreferenceService(db)


@router.get("/{user_id}/pacing", response_model=PacingPreferenceResponse)
async def get_pacing(
    user_id: str,
    service: PacingPreferenceService = Depends(get_preference_service),
) -> PacingPreferenceResponse:
    """Get the user's pacing mode (0.0 if never set)."""
    pacing_mode = await service.get_pacing_mode(user_id)
    return PacingPreferenceResponse(user_id=user_id, pacing_mode=pacing_mode)


@router.put("/{user_id}/pacing", response_model=PacingPreferenceResponse)
async def update_pacing(
    user_id: str,
    body: PacingPreferenceRequest,
    service: PacingPreferenceService = Depends(get_preference_service),
) -> PacingPreferenceResponse:
    """
    Update the user's pacing mode.

    -1.0 is the most intensive pacing (shorter intervals), +1.0 the most
    relaxed (longer intervals).
    """
    pacing_mode = await service.set_pacing_mode(user_id, body.pacing_mode)
    return PacingPreferenceResponse(user_id=user_id, pacing_mode=pacing_mode)
