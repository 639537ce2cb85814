"""
Tests for the database adapter and runner against in-memory SQLite.
"""

from datetime import datetime, timedelta, timezone

import pytest

from ranking.logic import adapter
from ranking.logic import PromotionRequest, RejectionKind, RankingSettings
from ranking.logic.constants import DEFAULT_SETTINGS, SortOption, PriceFilter
from ranking.logic.errors import SettingsNotConfiguredError, CourseNotFoundError
from ranking.logic.runner import run_ranking, run_promotion, get_promotion_usage
from ranking.models import CourseRecord, RankingSettingsRecord


def _utc_now():
    return datetime.now(timezone.utc)


def _naive(moment):
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


# =============================================================================
# SETTINGS
# =============================================================================

def test_fetch_settings_missing_fails_loudly(db):
    with pytest.raises(SettingsNotConfiguredError):
        adapter.fetch_settings(db)


def test_save_settings_creates_then_updates_singleton(db):
    created = adapter.save_settings(db, RankingSettings(**DEFAULT_SETTINGS))
    db.commit()
    assert created.promotion_cap == 5

    changed = created.model_copy(update={"promotion_cap": 0, "quality_floor": 4.0})
    adapter.save_settings(db, changed)
    db.commit()

    assert db.query(RankingSettingsRecord).count() == 1
    stored = adapter.fetch_settings(db)
    assert stored.promotion_cap == 0
    assert stored.quality_floor == 4.0


# =============================================================================
# COURSES
# =============================================================================

def test_fetch_courses_in_creation_order_with_utc_times(db, store_course):
    store_course(db, "first")
    store_course(db, "second")

    courses = adapter.fetch_courses(db)

    assert [c.id for c in courses] == ["first", "second"]
    assert courses[0].last_updated_at.tzinfo is not None


def test_fetch_course_unknown_id(db):
    with pytest.raises(CourseNotFoundError):
        adapter.fetch_course(db, "missing")


def test_count_active_promotions_respects_windows(db, store_course):
    now = _utc_now()
    store_course(db, "open", is_sponsored=True)
    store_course(db, "windowed", is_editors_choice=True,
                 promo_start=_naive(now - timedelta(days=1)), promo_end=_naive(now + timedelta(days=1)))
    store_course(db, "expired", is_sponsored=True, promo_end=_naive(now - timedelta(days=1)))
    store_course(db, "scheduled", is_sponsored=True, promo_start=_naive(now + timedelta(days=1)))
    store_course(db, "plain")

    assert adapter.count_active_promotions(db, now) == 2
    assert adapter.count_active_promotions(db, now, exclude_id="open") == 1


# =============================================================================
# PROMOTION WRITE
# =============================================================================

def test_accepted_promotion_is_persisted(db, store_settings, store_course):
    store_settings(db)
    store_course(db, "target", rating_avg=4.6)
    now = _utc_now()
    request = PromotionRequest(is_sponsored=True, promo_end=now + timedelta(days=7), is_accredited=True)

    decision = adapter.apply_promotion(db, "target", request, now)
    db.commit()

    assert decision.accepted
    stored = adapter.fetch_course(db, "target")
    assert stored.is_sponsored
    assert stored.is_accredited
    assert stored.promo_end == request.promo_end
    assert stored.promo_start is None


def test_quality_floor_rejection_writes_nothing(db, store_settings, store_course):
    store_settings(db)
    store_course(db, "weak", rating_avg=3.0)

    decision = adapter.apply_promotion(db, "weak", PromotionRequest(is_sponsored=True), _utc_now())
    db.commit()

    assert decision.rejection == RejectionKind.QUALITY_FLOOR_REJECTED
    assert not adapter.fetch_course(db, "weak").is_sponsored


def test_cap_rejection_then_disable_accepted(db, store_settings, store_course):
    store_settings(db, promotion_cap=5)
    for i in range(5):
        store_course(db, f"p{i}", rating_avg=4.5, is_sponsored=True)
    store_course(db, "sixth", rating_avg=4.8, is_editors_choice=False)

    rejected = adapter.apply_promotion(db, "sixth", PromotionRequest(is_editors_choice=True), _utc_now())
    assert rejected.rejection == RejectionKind.PROMOTION_CAP_EXCEEDED
    assert rejected.reason == "Promotion cap reached (5/5)"

    released = adapter.apply_promotion(db, "p0", PromotionRequest(), _utc_now())
    db.commit()
    assert released.accepted
    assert not adapter.fetch_course(db, "p0").is_sponsored

    retried = adapter.apply_promotion(db, "sixth", PromotionRequest(is_editors_choice=True), _utc_now())
    db.commit()
    assert retried.accepted
    assert adapter.fetch_course(db, "sixth").is_editors_choice


def test_conditional_write_holds_cap_when_check_was_stale(db, store_settings, store_course, monkeypatch):
    """
    Simulates a concurrent writer: the decision is made on a stale view with
    free slots, but the live count at write time is already at the cap.
    """
    store_settings(db, promotion_cap=5)
    for i in range(5):
        store_course(db, f"p{i}", rating_avg=4.5, is_sponsored=True)
    store_course(db, "late", rating_avg=4.8)

    monkeypatch.setattr(adapter, "fetch_promoted_courses", lambda db, exclude_id=None: [])

    decision = adapter.apply_promotion(db, "late", PromotionRequest(is_sponsored=True), _utc_now())
    db.commit()

    assert not decision.accepted
    assert decision.rejection == RejectionKind.PROMOTION_CAP_EXCEEDED
    assert decision.active_count == 5
    assert not adapter.fetch_course(db, "late").is_sponsored


def test_apply_promotion_unknown_course(db, store_settings):
    store_settings(db)
    with pytest.raises(CourseNotFoundError):
        adapter.apply_promotion(db, "missing", PromotionRequest(is_sponsored=True), _utc_now())


def test_apply_promotion_requires_settings(db, store_course):
    store_course(db, "target")
    with pytest.raises(SettingsNotConfiguredError):
        adapter.apply_promotion(db, "target", PromotionRequest(is_sponsored=True), _utc_now())


# =============================================================================
# RUNNER
# =============================================================================

def test_run_ranking_orders_catalog(db, store_settings, store_course):
    store_settings(db)
    now = _utc_now()
    store_course(db, "old", rating_avg=3.9, enrollments=10, last_updated_at=_naive(now - timedelta(days=500)))
    store_course(db, "best", rating_avg=4.9, rating_count=400, enrollments=5000,
                 last_updated_at=_naive(now - timedelta(days=2)), category="Programming")
    store_course(db, "free", rating_avg=4.0, enrollments=800, price_cents=0, category="Design",
                 last_updated_at=_naive(now - timedelta(days=60)))

    output = run_ranking(db, now=now)

    assert [c.id for c in output.courses] == ["best", "free", "old"]
    assert output.total_ranked == output.total_visible == 3
    assert output.categories == ["Design", "Programming"]
    assert output.evaluated_at == now


def test_run_ranking_filters_after_ranking(db, store_settings, store_course):
    store_settings(db)
    now = _utc_now()
    store_course(db, "paid", enrollments=100, price_cents=1999)
    store_course(db, "free-small", enrollments=200, price_cents=0)
    store_course(db, "free-big", enrollments=1000, price_cents=0)

    output = run_ranking(db, now=now, price=PriceFilter.FREE, sort=SortOption.POPULARITY)

    assert [c.id for c in output.courses] == ["free-big", "free-small"]
    assert output.total_ranked == 3
    # Popularity still relative to the full catalog (paid course is the minimum)
    assert output.courses[1].breakdown.popularity_score == pytest.approx(100 / 900)


def test_run_ranking_warns_on_empty_catalog(db, store_settings):
    store_settings(db)
    output = run_ranking(db)
    assert output.courses == []
    assert output.warnings == ["No courses found."]


def test_run_promotion_and_usage(db, store_settings, store_course):
    store_settings(db, promotion_cap=2)
    store_course(db, "a", rating_avg=4.5, is_sponsored=True)
    store_course(db, "b", rating_avg=4.5)

    decision = run_promotion(db, "b", PromotionRequest(is_editors_choice=True))
    db.commit()
    usage = get_promotion_usage(db)

    assert decision.accepted
    assert usage.active_count == 2
    assert usage.promotion_cap == 2
    assert sorted(usage.promoted_course_ids) == ["a", "b"]
    assert db.get(CourseRecord, "b").is_editors_choice


def test_catalog_output_reports_engine_version(db, store_settings):
    from ranking.logic.contracts import CatalogOutput
    from ranking.logic.constants import ENGINE_VERSION

    assert CatalogOutput().engine_version == ENGINE_VERSION

    store_settings(db)
    assert run_ranking(db).engine_version == ENGINE_VERSION
