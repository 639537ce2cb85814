"""
Settings API Routes

Endpoints to read and update the ranking settings singleton.
Table: ranking_settings

Note on promotion_cap: a value of 0 means UNCAPPED (any number of courses
may be promoted at once), it does not disable promotions.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from db import get_db
from ranking.logic.adapter import fetch_settings, save_settings
from ranking.logic.constants import DEFAULT_SETTINGS
from ranking.logic.contracts import RankingSettings
from ranking.logic.errors import SettingsNotConfiguredError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


class SettingsUpdate(BaseModel):
    """Partial update; omitted fields keep their stored (or default) value."""
    quality_weight: Optional[float] = None
    popularity_weight: Optional[float] = None
    freshness_weight: Optional[float] = None
    editorial_weight: Optional[float] = None
    quality_floor: Optional[float] = None
    promotion_cap: Optional[int] = None
    sponsored_boost: Optional[float] = None
    editors_choice_boost: Optional[float] = None
    min_ratings_for_confidence: Optional[int] = None
    freshness_max_age_days: Optional[float] = None


# ─────────────────────────────────────────────
# GET /settings
# ─────────────────────────────────────────────
@router.get("", summary="Fetch ranking settings")
def get_settings(db: Session = Depends(get_db)):
    try:
        settings = fetch_settings(db)
    except SettingsNotConfiguredError:
        raise HTTPException(status_code=404, detail="No settings found. Save settings first.")
    return {"ok": True, "settings": settings.model_dump()}


# ─────────────────────────────────────────────
# POST /settings
# ─────────────────────────────────────────────
@router.post("", summary="Create or update ranking settings")
def update_settings(payload: SettingsUpdate, db: Session = Depends(get_db)):
    """
    Merge the payload over the stored settings and save.
    The first save fills omitted fields from the defaults.
    The row stays locked from read to write so concurrent partial updates
    do not drop each other's fields.
    """
    try:
        current = fetch_settings(db, lock=True).model_dump()
    except SettingsNotConfiguredError:
        current = dict(DEFAULT_SETTINGS)

    merged = {**current, **payload.model_dump(exclude_none=True)}
    try:
        settings = RankingSettings(**merged)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid settings: {e}")

    saved = save_settings(db, settings)
    db.commit()
    logger.info(f"Ranking settings saved: {saved.model_dump()}")
    return {"ok": True, "settings": saved.model_dump()}
