"""
Course Ranking API Routes

Exposes the ranking engine via REST API.
Endpoints: GET /courses, POST /courses/promotion, GET /courses/promotion/usage
"""

import logging
from typing import Optional, Dict, Any
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from db import get_db
from .logic.adapter import fetch_course
from .logic.constants import SortOption, PriceFilter, PracticeFilter, SponsoredFilter, ENGINE_VERSION
from .logic.contracts import PromotionRequest, RankedCourse, Course
from .logic.errors import SettingsNotConfiguredError, CourseNotFoundError
from .logic.runner import run_ranking, run_promotion, get_promotion_usage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses", tags=["courses"])


# =============================================================================
# REQUEST/RESPONSE SCHEMAS
# =============================================================================

class PromotionBody(PromotionRequest):
    """Request body for the promotion endpoint."""
    id: str

    class Config:
        json_schema_extra = {
            "example": {
                "id": "c0a80121-7ac0-4e1c-9a4f-1f2b3c4d5e6f",
                "is_sponsored": True,
                "is_editors_choice": False,
                "promo_start": "2026-02-01T00:00:00Z",
                "promo_end": "2026-02-15T00:00:00Z",
            }
        }


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("", summary="Get ranked course catalog")
@router.get("/", summary="Get ranked course catalog", include_in_schema=False)
def get_ranked_courses(
    category: Optional[str] = Query(default=None, description="Exact category match"),
    price: PriceFilter = Query(default=PriceFilter.ALL),
    practice: PracticeFilter = Query(default=PracticeFilter.ALL),
    sponsored: SponsoredFilter = Query(default=SponsoredFilter.ALL),
    sort: SortOption = Query(default=SortOption.RANK),
    db: Session = Depends(get_db)
):
    """
    Rank every course and return the catalog view.

    **Query parameters:**
    - `category`, `price`, `practice`, `sponsored`: filters applied after ranking
    - `sort`: `rank` (default), `price-asc`, `price-desc`, `freshness`, `newest`, `rating`, `popularity`

    **Response:**
    - Courses with final score, reason tag and full score breakdown
    """
    try:
        output = run_ranking(
            db,
            category=category,
            price=price,
            practice=practice,
            sponsored=sponsored,
            sort=sort,
        )
    except SettingsNotConfiguredError as e:
        logger.error(f"Ranking requested without settings: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "summary": {
            "total_ranked": output.total_ranked,
            "total_visible": output.total_visible,
            "evaluated_at": output.evaluated_at.isoformat() if output.evaluated_at else None,
            "processing_time_ms": output.processing_time_ms,
        },
        "categories": output.categories,
        "courses": [_serialize_course(c) for c in output.courses],
        "warnings": output.warnings,
        "engine_version": output.engine_version,
    }


@router.post("/promotion", summary="Update a course's promotion flags")
def update_promotion(body: PromotionBody, db: Session = Depends(get_db)):
    """
    Request sponsored / editor's choice placement for a course.

    Turning promotion off is always accepted. Turning it on requires the
    course rating to meet the quality floor and, for a promotion active now,
    a free slot under the promotion cap (a cap of 0 means uncapped).
    """
    request = PromotionRequest(**body.model_dump(exclude={"id"}))
    try:
        decision = run_promotion(db, body.id, request)
    except CourseNotFoundError as e:
        return JSONResponse(status_code=404, content={"ok": False, "error": str(e)})
    except SettingsNotConfiguredError as e:
        logger.error(f"Promotion requested without settings: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    if not decision.accepted:
        db.rollback()
        return JSONResponse(
            status_code=400,
            content={
                "ok": False,
                "error": decision.reason,
                "rejection": decision.rejection.value if decision.rejection else None,
                "active_count": decision.active_count,
                "promotion_cap": decision.promotion_cap,
            },
        )

    db.commit()
    course = fetch_course(db, body.id)
    return {"ok": True, "is_active": decision.is_active, "course": _serialize_course(course)}


@router.get("/promotion/usage", summary="Active promotion slots in use")
def promotion_usage(db: Session = Depends(get_db)):
    try:
        usage = get_promotion_usage(db)
    except SettingsNotConfiguredError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return usage.model_dump()


def _serialize_course(course: Course) -> Dict[str, Any]:
    """Convert a Course / RankedCourse to a JSON-serializable dict."""
    data = course.model_dump(mode="json")
    if isinstance(course, RankedCourse):
        data["final_score"] = round(course.final_score, 4)
    return data


# =============================================================================
# HEALTH CHECK
# =============================================================================

@router.get("/health", summary="Ranking engine health check")
def health_check():
    """Check if ranking engine is operational."""
    return {"status": "ok", "engine": "ranking", "version": ENGINE_VERSION}
