import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import func
from sqlalchemy.orm import Session

from leadflow.api.routes.pages import running_test_for
from leadflow.core.security import require_admin
from leadflow.db.models import FunnelEvent, FunnelEventType, SplitTest, SplitTestStatus
from leadflow.db.session import get_db
from leadflow.split_testing.assigner import assign_variant
from leadflow.split_testing.config import InvalidVariantsError, SplitTestVariant, parse_variants, validate_variants

logger = logging.getLogger(__name__)

admin_router = APIRouter(dependencies=[Depends(require_admin)])
public_router = APIRouter()


class SplitTestCreate(BaseModel):
    name: str = Field(min_length=1)
    page_slug: str = Field(min_length=1)
    variants: List[SplitTestVariant]


class SplitTestUpdate(BaseModel):
    name: Optional[str] = None
    variants: Optional[List[SplitTestVariant]] = None


class SplitTestComplete(BaseModel):
    winner_variant_id: str


def _validated(variants: List[SplitTestVariant]) -> list:
    try:
        return [v.model_dump() for v in validate_variants(variants)]
    except InvalidVariantsError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def split_test_dict(test: SplitTest) -> dict:
    return {
        "id": test.id,
        "name": test.name,
        "page_slug": test.page_slug,
        "variants": test.variants,
        "status": test.status.value,
        "winner_variant_id": test.winner_variant_id,
        "started_at": _iso(test.started_at),
        "completed_at": _iso(test.completed_at),
        "created_at": _iso(test.created_at),
    }


def _get_test(db: Session, test_id: int) -> SplitTest:
    test = db.query(SplitTest).filter(SplitTest.id == test_id).first()
    if not test:
        raise HTTPException(status_code=404, detail="Split test not found")
    return test


@admin_router.get("/admin/split-tests")
def list_split_tests(db: Session = Depends(get_db)):
    tests = db.query(SplitTest).order_by(SplitTest.created_at.desc(), SplitTest.id.desc()).all()
    return [split_test_dict(t) for t in tests]


@admin_router.post("/admin/split-tests")
def create_split_test(request: SplitTestCreate, db: Session = Depends(get_db)):
    test = SplitTest(
        name=request.name,
        page_slug=request.page_slug,
        variants=_validated(request.variants),
        status=SplitTestStatus.DRAFT,
    )
    db.add(test)
    db.commit()
    db.refresh(test)
    return {"id": test.id}


@admin_router.patch("/admin/split-tests/{test_id}")
def update_split_test(test_id: int, update: SplitTestUpdate, db: Session = Depends(get_db)):
    """Only drafts can change: editing variants of a running test reshuffles its sessions."""
    test = _get_test(db, test_id)
    if test.status != SplitTestStatus.DRAFT:
        raise HTTPException(status_code=400, detail="Can only update draft split tests")
    if update.name is None and update.variants is None:
        raise HTTPException(status_code=400, detail="No fields to update")

    if update.name is not None:
        test.name = update.name
    if update.variants is not None:
        test.variants = _validated(update.variants)
    db.commit()
    return {"success": True}


@admin_router.post("/admin/split-tests/{test_id}/start")
def start_split_test(test_id: int, db: Session = Depends(get_db)):
    test = _get_test(db, test_id)
    if test.status != SplitTestStatus.DRAFT:
        raise HTTPException(status_code=400, detail="Only draft split tests can be started")
    if running_test_for(db, test.page_slug) is not None:
        raise HTTPException(status_code=409, detail=f"Another split test is already running on {test.page_slug}")

    test.status = SplitTestStatus.RUNNING
    test.started_at = datetime.now(timezone.utc)
    db.commit()
    logger.info("🧪 Split test %s started on %s", test.id, test.page_slug)
    return {"success": True}


@admin_router.post("/admin/split-tests/{test_id}/complete")
def complete_split_test(test_id: int, request: SplitTestComplete, db: Session = Depends(get_db)):
    test = _get_test(db, test_id)
    variant_ids = {v.id for v in parse_variants(test.variants)}
    if request.winner_variant_id not in variant_ids:
        raise HTTPException(status_code=400, detail="Winner must be one of the test's variants")

    test.status = SplitTestStatus.COMPLETED
    test.completed_at = datetime.now(timezone.utc)
    test.winner_variant_id = request.winner_variant_id
    db.commit()
    logger.info("🏁 Split test %s completed, winner=%s", test.id, request.winner_variant_id)
    return {"success": True}


def _count_events(db: Session, event_type: FunnelEventType, variant_id: str) -> int:
    return db.query(func.count(FunnelEvent.id)).filter(
        FunnelEvent.event_type == event_type,
        FunnelEvent.split_test_variant == variant_id,
    ).scalar() or 0


@admin_router.get("/admin/split-tests/{test_id}/stats")
def split_test_stats(test_id: int, db: Session = Depends(get_db)):
    """Views, purchases and conversion % per variant."""
    test = _get_test(db, test_id)
    stats = []
    for variant in parse_variants(test.variants):
        views = _count_events(db, FunnelEventType.PAGE_VIEW, variant.id)
        conversions = _count_events(db, FunnelEventType.PURCHASE, variant.id)
        stats.append({
            "variant_id": variant.id,
            "name": variant.name,
            "views": views,
            "conversions": conversions,
            "conversion_rate": (conversions / views * 100) if views else 0.0,
        })
    return stats


@public_router.get("/split-tests/variant")
def get_variant(page_slug: str, session_id: str, db: Session = Depends(get_db)):
    """Variant for this session on the page's running test, or null when none runs."""
    test = running_test_for(db, page_slug)
    if test is None:
        return None

    variant = assign_variant(session_id, test.id, parse_variants(test.variants))
    return {
        "test_id": test.id,
        "variant_id": variant.id,
        "content_overrides": variant.content_overrides or None,
    }
