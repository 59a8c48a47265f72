"""Funnel page copy: draft/publish editing for admins and the public page read."""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from leadflow.core.security import require_admin
from leadflow.db.models import FunnelPageContent, SplitTest, SplitTestStatus
from leadflow.db.session import get_db
from leadflow.split_testing.assigner import assign_variant
from leadflow.split_testing.config import parse_variants

logger = logging.getLogger(__name__)

admin_router = APIRouter(dependencies=[Depends(require_admin)])
public_router = APIRouter()

# Editable copy columns; a draft may only carry these keys
PAGE_FIELDS = (
    "headline",
    "subheadline",
    "body_text",
    "cta_text",
    "decline_text",
    "original_price",
    "sale_price",
    "value_stack_items",
    "faq_items",
    "hero_image_url",
    "video_url",
    "senja_widget_id",
    "is_active",
)


class PageDraft(BaseModel):
    headline: Optional[str] = None
    subheadline: Optional[str] = None
    body_text: Optional[str] = None
    cta_text: Optional[str] = None
    decline_text: Optional[str] = None
    original_price: Optional[int] = None
    sale_price: Optional[int] = None
    value_stack_items: Optional[List[Any]] = None
    faq_items: Optional[List[Any]] = None
    hero_image_url: Optional[str] = None
    video_url: Optional[str] = None
    senja_widget_id: Optional[str] = None
    is_active: Optional[bool] = None


def page_dict(page: FunnelPageContent) -> Dict[str, Any]:
    data = {field: getattr(page, field) for field in PAGE_FIELDS}
    data.update({
        "id": page.id,
        "page_slug": page.page_slug,
        "draft_content": page.draft_content,
        "updated_at": page.updated_at.isoformat() if page.updated_at else None,
    })
    return data


def running_test_for(db: Session, page_slug: str) -> Optional[SplitTest]:
    return db.query(SplitTest).filter(
        SplitTest.page_slug == page_slug,
        SplitTest.status == SplitTestStatus.RUNNING,
    ).order_by(SplitTest.started_at.desc()).first()


def _get_page(db: Session, slug: str) -> FunnelPageContent:
    page = db.query(FunnelPageContent).filter(FunnelPageContent.page_slug == slug).first()
    if not page:
        raise HTTPException(status_code=404, detail="Page not found")
    return page


@admin_router.get("/admin/pages")
def list_pages(db: Session = Depends(get_db)):
    return [page_dict(p) for p in db.query(FunnelPageContent).order_by(FunnelPageContent.page_slug).all()]


@admin_router.get("/admin/pages/{slug}")
def get_page(slug: str, db: Session = Depends(get_db)):
    return page_dict(_get_page(db, slug))


@admin_router.put("/admin/pages/{slug}/draft")
def save_draft(slug: str, draft: PageDraft, db: Session = Depends(get_db)):
    """Replace the page's draft with the supplied fields. Creates the page if missing."""
    blob = draft.model_dump(exclude_unset=True)
    page = db.query(FunnelPageContent).filter(FunnelPageContent.page_slug == slug).first()
    if page is None:
        page = FunnelPageContent(page_slug=slug, is_active=True)
        db.add(page)
    page.draft_content = blob
    db.commit()
    logger.info("Saved draft for page %s (%d fields)", slug, len(blob))
    return {"success": True}


@admin_router.post("/admin/pages/{slug}/publish")
def publish_draft(slug: str, db: Session = Depends(get_db)):
    page = _get_page(db, slug)
    if not page.draft_content:
        raise HTTPException(status_code=400, detail="No draft to publish")

    for field, value in page.draft_content.items():
        if field in PAGE_FIELDS:
            setattr(page, field, value)
    page.draft_content = None
    db.commit()
    logger.info("Published page %s", slug)
    return {"success": True}


@admin_router.delete("/admin/pages/{slug}/draft")
def discard_draft(slug: str, db: Session = Depends(get_db)):
    page = _get_page(db, slug)
    page.draft_content = None
    db.commit()
    return {"success": True}


@admin_router.get("/admin/pages/{slug}/preview")
def preview_page(slug: str, db: Session = Depends(get_db)):
    """Live copy with the draft laid over it."""
    page = _get_page(db, slug)
    data = page_dict(page)
    for field, value in (page.draft_content or {}).items():
        if field in PAGE_FIELDS:
            data[field] = value
    return data


@public_router.get("/funnel/pages/{slug}")
def get_public_page(slug: str, session_id: Optional[str] = None, db: Session = Depends(get_db)):
    """
    Live page copy. With a session id, a running split test on the page assigns
    a variant and its content overrides replace the matching copy fields.
    """
    page = _get_page(db, slug)
    data = page_dict(page)
    data.pop("draft_content")
    data["split_test"] = None

    if session_id:
        test = running_test_for(db, slug)
        if test is not None:
            variant = assign_variant(session_id, test.id, parse_variants(test.variants))
            for field, value in variant.content_overrides.items():
                if field in PAGE_FIELDS:
                    data[field] = value
            data["split_test"] = {"test_id": test.id, "variant_id": variant.id}

    return data
