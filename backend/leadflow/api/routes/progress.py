import secrets
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from leadflow.api.routes.roadmaps import load_content
from leadflow.db.models import PlaybookShareToken, PlaybookType, Roadmap, TaskProgress
from leadflow.db.session import get_db

router = APIRouter()


class TaskToggle(BaseModel):
    playbook_type: PlaybookType
    task_id: str = Field(min_length=1, max_length=255)
    completed: bool


class ShareLinkRequest(BaseModel):
    playbook_type: PlaybookType


def _get_roadmap(db: Session, roadmap_id: int) -> Roadmap:
    roadmap = db.query(Roadmap).filter(Roadmap.id == roadmap_id).first()
    if not roadmap:
        raise HTTPException(status_code=404, detail="Roadmap not found")
    return roadmap


@router.get("/roadmaps/{roadmap_id}/progress/{playbook_type}")
def get_progress(roadmap_id: int, playbook_type: PlaybookType, db: Session = Depends(get_db)):
    """Ids of completed tasks in one playbook."""
    rows = db.query(TaskProgress.task_id).filter(
        TaskProgress.roadmap_id == roadmap_id,
        TaskProgress.playbook_type == playbook_type,
        TaskProgress.completed.is_(True),
    ).all()
    return [task_id for (task_id,) in rows]


@router.post("/roadmaps/{roadmap_id}/progress")
def toggle_task(roadmap_id: int, toggle: TaskToggle, db: Session = Depends(get_db)):
    _get_roadmap(db, roadmap_id)

    progress = db.query(TaskProgress).filter(
        TaskProgress.roadmap_id == roadmap_id,
        TaskProgress.playbook_type == toggle.playbook_type,
        TaskProgress.task_id == toggle.task_id,
    ).first()
    if progress is None:
        progress = TaskProgress(
            roadmap_id=roadmap_id,
            playbook_type=toggle.playbook_type,
            task_id=toggle.task_id,
        )
        db.add(progress)

    progress.completed = toggle.completed
    progress.completed_at = datetime.now(timezone.utc) if toggle.completed else None
    db.commit()
    return {"success": True}


@router.post("/roadmaps/{roadmap_id}/share-links")
def create_share_link(roadmap_id: int, request: ShareLinkRequest, db: Session = Depends(get_db)):
    """Existing token for this playbook, or a new one."""
    _get_roadmap(db, roadmap_id)

    existing = db.query(PlaybookShareToken).filter(
        PlaybookShareToken.roadmap_id == roadmap_id,
        PlaybookShareToken.playbook_type == request.playbook_type,
    ).first()
    if existing:
        return {"token": existing.token}

    share = PlaybookShareToken(
        roadmap_id=roadmap_id,
        playbook_type=request.playbook_type,
        token=secrets.token_hex(16),
    )
    db.add(share)
    db.commit()
    return {"token": share.token}


@router.get("/shared-playbooks/{token}")
def get_shared_playbook(token: str, db: Session = Depends(get_db)):
    share = db.query(PlaybookShareToken).filter(PlaybookShareToken.token == token).first()
    if not share:
        raise HTTPException(status_code=404, detail="Invalid share link")

    roadmap = share.roadmap
    if roadmap is None:
        raise HTTPException(status_code=404, detail="Roadmap not found")

    share.view_count = (share.view_count or 0) + 1
    db.commit()

    return {
        "business_name": roadmap.business_name,
        "playbook_type": share.playbook_type.value,
        "content": load_content(roadmap.playbook_content(share.playbook_type)),
        "overall_score": roadmap.overall_score,
        "view_count": share.view_count,
    }
