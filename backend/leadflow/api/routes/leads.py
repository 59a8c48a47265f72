from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from leadflow.api.routes.roadmaps import roadmap_public_dict
from leadflow.core.security import require_admin
from leadflow.db.models import LeadStatus, Roadmap
from leadflow.db.session import get_db

router = APIRouter(dependencies=[Depends(require_admin)])


class LeadStatusUpdate(BaseModel):
    status: LeadStatus


def lead_dict(roadmap: Roadmap) -> dict:
    """Admin view: public roadmap fields plus contact details."""
    return {
        **roadmap_public_dict(roadmap),
        "email": roadmap.email,
        "phone": roadmap.phone,
        "all_answers": roadmap.all_answers,
    }


@router.get("/admin/leads")
def list_leads(
    monthly_revenue: Optional[str] = None,
    biggest_frustration: Optional[str] = None,
    status: Optional[LeadStatus] = None,
    db: Session = Depends(get_db),
):
    """Leads newest first. Revenue matches exactly, frustration by substring."""
    query = db.query(Roadmap)
    if monthly_revenue:
        query = query.filter(Roadmap.monthly_revenue == monthly_revenue)
    if biggest_frustration:
        query = query.filter(Roadmap.biggest_frustration.contains(biggest_frustration, autoescape=True))
    if status:
        query = query.filter(Roadmap.status == status)

    leads = query.order_by(Roadmap.created_at.desc(), Roadmap.id.desc()).all()
    return [lead_dict(lead) for lead in leads]


@router.patch("/admin/leads/{lead_id}/status")
def update_lead_status(lead_id: int, update: LeadStatusUpdate, db: Session = Depends(get_db)):
    lead = db.query(Roadmap).filter(Roadmap.id == lead_id).first()
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")

    lead.status = update.status
    db.commit()
    return {"success": True, "id": lead.id, "status": lead.status.value}
