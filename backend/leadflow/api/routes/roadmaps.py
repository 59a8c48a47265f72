import json
import logging
import secrets
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from leadflow.core.config import settings
from leadflow.core.rate_limit import enforce_quiz_rate_limit
from leadflow.db.models import Roadmap
from leadflow.db.session import get_db
from leadflow.generation.playbooks import generate_playbooks
from leadflow.generation.roadmap import generate_titan_roadmap
from leadflow.integrations.crm import build_lead_payload, push_lead
from leadflow.integrations.email import send_roadmap_email
from leadflow.llm.client import categorize_error
from leadflow.scoring.benchmarks import INDUSTRY_AVERAGE_OVERALL, TOP_PERFORMER_OVERALL, get_benchmark_data
from leadflow.scoring.gap_analysis import get_gap_analysis
from leadflow.scoring.health import calculate_business_health_score, round_half_up
from leadflow.scoring.lead_score import calculate_lead_score

logger = logging.getLogger(__name__)

router = APIRouter()

SHARE_CODE_BYTES = 6  # 8 url-safe characters
REVENUE_PER_LEAD = 2000

FRIENDLY_ERRORS = {
    "timeout": "Our AI is taking longer than expected. Please try again in a moment.",
    "rate_limit": "Our system is experiencing high demand. Please try again in a few minutes.",
    "network": "Please check your internet connection and try again.",
}
DEFAULT_FRIENDLY_ERROR = "Please try again or contact support if the issue persists."


class QuizSubmission(BaseModel):
    """Quiz payload. Accepts the quiz's camelCase keys or snake_case names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: str = Field(min_length=1)
    business_name: str = Field(min_length=1)
    business_type: str = Field(min_length=1)
    industry: Optional[str] = None
    email: EmailStr
    monthly_revenue: str = Field(min_length=1)
    main_offer: str = Field(min_length=1)
    crm_usage: str = "Not applicable"
    lead_response_speed: str = Field(min_length=1)
    missed_leads: str = Field(min_length=1)
    chat_agents: str = Field(min_length=1)
    content_frequency: str = Field(min_length=1)
    audience_size: str = Field(min_length=1)
    instagram_handle: str = Field(min_length=1)
    monthly_ad_budget: str = Field(min_length=1)
    ninety_day_goal: str = Field(min_length=1)
    biggest_frustration: str = Field(min_length=1)
    offer_confidence: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None

    def answers(self) -> Dict[str, Any]:
        """Quiz answers keyed by quiz field name (camelCase)."""
        return self.model_dump(by_alias=True)


class HealthScoreRequest(BaseModel):
    answers: Dict[str, Any] = Field(default_factory=dict)


def friendly_error_message(error: Exception) -> str:
    category = categorize_error(error)
    return "We encountered an issue generating your roadmap. " + FRIENDLY_ERRORS.get(category, DEFAULT_FRIENDLY_ERROR)


def load_content(raw: Optional[str]) -> Any:
    """Stored JSON text -> object; legacy non-JSON content is returned as-is."""
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return raw


def new_share_code(db: Session) -> str:
    while True:
        code = secrets.token_urlsafe(SHARE_CODE_BYTES)
        if not db.query(Roadmap.id).filter(Roadmap.share_code == code).first():
            return code


def score_report(answers: Dict[str, Any]) -> Dict[str, Any]:
    """Health score, benchmarks and gap analysis for one set of answers."""
    health = calculate_business_health_score(answers)
    return {
        "health_scores": health.to_dict(),
        "benchmark_data": [row.to_dict() for row in get_benchmark_data(health)],
        "gap_analysis": get_gap_analysis(answers, health).to_dict(),
    }


def playbooks_payload(roadmap: Roadmap) -> Dict[str, Any]:
    return {
        "offer_playbook": load_content(roadmap.offer_playbook),
        "facebook_ad_launch": load_content(roadmap.facebook_ad_launch),
        "instagram_growth": load_content(roadmap.instagram_growth),
        "lead_generation": load_content(roadmap.lead_generation),
    }


def roadmap_public_dict(roadmap: Roadmap) -> Dict[str, Any]:
    """Roadmap without PII (email, phone, raw answers)."""
    return {
        "id": roadmap.id,
        "created_at": roadmap.created_at.isoformat() if roadmap.created_at else None,
        "first_name": roadmap.first_name,
        "business_name": roadmap.business_name,
        "business_type": roadmap.business_type,
        "industry": roadmap.industry,
        "website": roadmap.website,
        "monthly_revenue": roadmap.monthly_revenue,
        "main_offer": roadmap.main_offer,
        "ninety_day_goal": roadmap.ninety_day_goal,
        "biggest_frustration": roadmap.biggest_frustration,
        "titan_roadmap": load_content(roadmap.titan_roadmap),
        **playbooks_payload(roadmap),
        "overall_score": roadmap.overall_score,
        "industry_average": roadmap.industry_average,
        "top_performer_score": roadmap.top_performer_score,
        "user_percentile": roadmap.user_percentile,
        "top_strength": roadmap.top_strength,
        "biggest_gap": roadmap.biggest_gap,
        "potential_revenue": roadmap.potential_revenue,
        "lead_score": roadmap.lead_score,
        "status": roadmap.status.value if roadmap.status else None,
        "share_code": roadmap.share_code,
        "view_count": roadmap.view_count,
    }


@router.post("/roadmaps", dependencies=[Depends(enforce_quiz_rate_limit)])
def create_roadmap(
    submission: QuizSubmission,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Score a quiz submission, generate the roadmap and playbooks, and store the lead."""
    answers = submission.answers()

    try:
        titan = generate_titan_roadmap(answers)
        playbooks = generate_playbooks(answers)
    except Exception as e:
        logger.exception("❌ Error generating roadmap for %s", submission.business_name)
        raise HTTPException(status_code=500, detail=friendly_error_message(e))

    health = calculate_business_health_score(answers)
    benchmarks = get_benchmark_data(health)
    gap = get_gap_analysis(answers, health)
    lead_score = calculate_lead_score(
        submission.monthly_revenue,
        submission.biggest_frustration,
        playbooks.values(),
    )
    biggest_gap = titan.primary_constraint or health.biggest_gap

    roadmap = Roadmap(
        first_name=submission.first_name,
        business_name=submission.business_name,
        business_type=submission.business_type,
        industry=submission.industry,
        email=submission.email,
        phone=submission.phone,
        website=submission.website,
        monthly_revenue=submission.monthly_revenue,
        main_offer=submission.main_offer,
        offer_confidence=submission.offer_confidence,
        crm_usage=submission.crm_usage,
        lead_response_speed=submission.lead_response_speed,
        missed_leads=submission.missed_leads,
        chat_agents=submission.chat_agents,
        content_frequency=submission.content_frequency,
        audience_size=submission.audience_size,
        instagram_handle=submission.instagram_handle,
        monthly_ad_budget=submission.monthly_ad_budget,
        ninety_day_goal=submission.ninety_day_goal,
        biggest_frustration=submission.biggest_frustration,
        all_answers=answers,
        overall_score=health.overall,
        lead_generation_score=health.lead_generation,
        offer_clarity_score=health.offer_clarity,
        social_presence_score=health.social_presence,
        conversion_process_score=health.conversion_process,
        industry_average=INDUSTRY_AVERAGE_OVERALL,
        top_performer_score=TOP_PERFORMER_OVERALL,
        user_percentile=round_half_up(health.overall / TOP_PERFORMER_OVERALL * 100),
        top_strength=health.top_strength,
        biggest_gap=biggest_gap,
        potential_revenue=round_half_up(gap.potential_leads * REVENUE_PER_LEAD),
        titan_roadmap=titan.to_json(),
        offer_playbook=playbooks["offer"],
        facebook_ad_launch=playbooks["facebook"],
        instagram_growth=playbooks["instagram"],
        lead_generation=playbooks["leadgen"],
        lead_score=lead_score,
        share_code=new_share_code(db),
    )
    try:
        db.add(roadmap)
        db.commit()
        db.refresh(roadmap)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("❌ Failed to save roadmap for %s", submission.business_name)
        raise HTTPException(status_code=500, detail="We encountered an issue saving your roadmap. " + DEFAULT_FRIENDLY_ERROR)

    logger.info("✅ Roadmap %s saved (overall=%s, lead_score=%s)", roadmap.id, health.overall, lead_score)

    dashboard_url = f"{settings.APP_URL.rstrip('/')}/dashboard/{roadmap.id}"
    background_tasks.add_task(push_lead, build_lead_payload(
        first_name=submission.first_name,
        email=submission.email,
        phone=submission.phone,
        business_name=submission.business_name,
        website=submission.website,
        business_type=submission.business_type,
        industry=submission.industry,
        monthly_revenue=submission.monthly_revenue,
        biggest_frustration=submission.biggest_frustration,
        ninety_day_goal=submission.ninety_day_goal,
        overall_score=health.overall,
        lead_score=lead_score,
        top_strength=health.top_strength,
        biggest_gap=biggest_gap,
        dashboard_url=dashboard_url,
        roadmap_id=roadmap.id,
    ))
    if settings.SEND_ROADMAP_EMAIL:
        background_tasks.add_task(send_roadmap_email, submission.email, submission.business_name, dashboard_url, roadmap.id)

    return {
        "id": roadmap.id,
        "share_code": roadmap.share_code,
        "titan_roadmap": titan.content,
        **playbooks_payload(roadmap),
        "health_scores": health.to_dict(),
        "benchmark_data": [row.to_dict() for row in benchmarks],
        "gap_analysis": gap.to_dict(),
    }


@router.get("/roadmaps/share/{share_code}")
def get_shared_roadmap(share_code: str, db: Session = Depends(get_db)):
    """Public view of a roadmap by share code. Counts a view."""
    roadmap = db.query(Roadmap).filter(Roadmap.share_code == share_code).first()
    if not roadmap:
        raise HTTPException(status_code=404, detail="Roadmap not found")

    roadmap.view_count = (roadmap.view_count or 0) + 1
    db.commit()

    return {
        "id": roadmap.id,
        "business_name": roadmap.business_name,
        "business_type": roadmap.business_type,
        "titan_roadmap": load_content(roadmap.titan_roadmap),
        "share_code": roadmap.share_code,
        "view_count": roadmap.view_count,
        "created_at": roadmap.created_at.isoformat() if roadmap.created_at else None,
    }


@router.get("/roadmaps/{roadmap_id}")
def get_roadmap(roadmap_id: int, db: Session = Depends(get_db)):
    roadmap = db.query(Roadmap).filter(Roadmap.id == roadmap_id).first()
    if not roadmap:
        raise HTTPException(status_code=404, detail="Roadmap not found")
    return {**roadmap_public_dict(roadmap), **score_report(roadmap.all_answers or {})}


@router.post("/scoring/health")
def score_answers(request: HealthScoreRequest):
    """Score arbitrary quiz answers without generating anything."""
    return score_report(request.answers)
