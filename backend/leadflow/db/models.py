"""SQLAlchemy models."""
import enum

from sqlalchemy import (
    Boolean, Column, DateTime, Enum, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from leadflow.db.session import Base


class LeadStatus(str, enum.Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    CONVERTED = "converted"


class PlaybookType(str, enum.Enum):
    TITAN = "titan"
    OFFER = "offer"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    LEADGEN = "leadgen"


class ProductType(str, enum.Enum):
    COURSE = "course"
    VAULT = "vault"
    SESSION = "session"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class OrderItemStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class SplitTestStatus(str, enum.Enum):
    DRAFT = "draft"
    RUNNING = "running"
    COMPLETED = "completed"


class FunnelEventType(str, enum.Enum):
    PAGE_VIEW = "page_view"
    CHECKOUT_START = "checkout_start"
    PURCHASE = "purchase"
    UPSELL_VIEW = "upsell_view"
    UPSELL_ACCEPT = "upsell_accept"
    UPSELL_DECLINE = "upsell_decline"
    DOWNSELL_VIEW = "downsell_view"
    DOWNSELL_ACCEPT = "downsell_accept"
    DOWNSELL_DECLINE = "downsell_decline"


class Roadmap(Base):
    """Quiz submission, generated roadmap and lead record."""
    __tablename__ = "roadmaps"

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Contact and profile
    first_name = Column(String(255), nullable=False)
    business_name = Column(String(255), nullable=False)
    business_type = Column(String(255), nullable=False)
    industry = Column(String(100))
    email = Column(String(320), nullable=False)
    phone = Column(String(50))
    website = Column(String(500))

    # Quiz answers
    monthly_revenue = Column(String(100), index=True)
    main_offer = Column(Text)
    offer_confidence = Column(String(100))
    crm_usage = Column(String(255))
    lead_response_speed = Column(String(255))
    missed_leads = Column(String(100))
    chat_agents = Column(String(255))
    content_frequency = Column(String(100))
    audience_size = Column(String(100))
    instagram_handle = Column(String(255))
    monthly_ad_budget = Column(String(100))
    ninety_day_goal = Column(Text)
    biggest_frustration = Column(Text)
    all_answers = Column(JSON)  # raw quiz payload keyed by quiz field name

    # Business health scores (0-100)
    overall_score = Column(Integer, nullable=False, default=0)
    lead_generation_score = Column(Integer, nullable=False, default=0)
    offer_clarity_score = Column(Integer, nullable=False, default=0)
    social_presence_score = Column(Integer, nullable=False, default=0)
    conversion_process_score = Column(Integer, nullable=False, default=0)
    industry_average = Column(Integer, nullable=False, default=65)
    top_performer_score = Column(Integer, nullable=False, default=88)
    user_percentile = Column(Integer, nullable=False, default=50)
    top_strength = Column(String(255))
    biggest_gap = Column(String(255))
    potential_revenue = Column(Integer, nullable=False, default=0)

    # Generated content (JSON documents serialized as text)
    titan_roadmap = Column(Text)
    offer_playbook = Column(Text)
    facebook_ad_launch = Column(Text)
    instagram_growth = Column(Text)
    lead_generation = Column(Text)

    # Lead pipeline
    status = Column(Enum(LeadStatus), nullable=False, default=LeadStatus.NEW, index=True)
    lead_score = Column(Integer, nullable=False, default=0)
    share_code = Column(String(16), unique=True, index=True)
    view_count = Column(Integer, nullable=False, default=0)

    task_progress = relationship("TaskProgress", back_populates="roadmap", cascade="all, delete-orphan")
    share_tokens = relationship("PlaybookShareToken", back_populates="roadmap", cascade="all, delete-orphan")

    def playbook_content(self, playbook_type: PlaybookType):
        return {
            PlaybookType.TITAN: self.titan_roadmap,
            PlaybookType.OFFER: self.offer_playbook,
            PlaybookType.FACEBOOK: self.facebook_ad_launch,
            PlaybookType.INSTAGRAM: self.instagram_growth,
            PlaybookType.LEADGEN: self.lead_generation,
        }[playbook_type]


class TaskProgress(Base):
    """Completion state of one action item in a playbook."""
    __tablename__ = "task_progress"
    __table_args__ = (UniqueConstraint("roadmap_id", "playbook_type", "task_id"),)

    id = Column(Integer, primary_key=True, index=True)
    roadmap_id = Column(Integer, ForeignKey("roadmaps.id"), nullable=False, index=True)
    playbook_type = Column(Enum(PlaybookType), nullable=False)
    task_id = Column(String(255), nullable=False)  # e.g. "week1_day1_task1"
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    roadmap = relationship("Roadmap", back_populates="task_progress")


class PlaybookShareToken(Base):
    """Public share link for one playbook of a roadmap."""
    __tablename__ = "playbook_share_tokens"

    id = Column(Integer, primary_key=True, index=True)
    roadmap_id = Column(Integer, ForeignKey("roadmaps.id"), nullable=False, index=True)
    playbook_type = Column(Enum(PlaybookType), nullable=False)
    token = Column(String(32), nullable=False, unique=True, index=True)
    view_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    roadmap = relationship("Roadmap", back_populates="share_tokens")


class Product(Base):
    """Sellable funnel product."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text)
    price_in_cents = Column(Integer, nullable=False)
    type = Column(Enum(ProductType), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class FunnelOrder(Base):
    """Funnel order; holds the saved payment method used for one-click upsells."""
    __tablename__ = "funnel_orders"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), nullable=False)
    first_name = Column(String(255), nullable=False)
    stripe_customer_id = Column(String(255))
    stripe_payment_method_id = Column(String(255))
    status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.PENDING)
    total_in_cents = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship(
        "FunnelOrderItem", back_populates="order", cascade="all, delete-orphan", order_by="FunnelOrderItem.id"
    )


class FunnelOrderItem(Base):
    """One charge against an order."""
    __tablename__ = "funnel_order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("funnel_orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    stripe_payment_intent_id = Column(String(255), index=True)
    amount_in_cents = Column(Integer, nullable=False)
    status = Column(Enum(OrderItemStatus), nullable=False, default=OrderItemStatus.PENDING)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("FunnelOrder", back_populates="items")
    product = relationship("Product")


class FunnelPageContent(Base):
    """Live copy for a funnel page plus an unpublished draft."""
    __tablename__ = "funnel_page_content"

    id = Column(Integer, primary_key=True, index=True)
    page_slug = Column(String(100), nullable=False, unique=True, index=True)
    headline = Column(Text)
    subheadline = Column(Text)
    body_text = Column(Text)
    cta_text = Column(String(255))
    decline_text = Column(String(255))
    original_price = Column(Integer)
    sale_price = Column(Integer)
    value_stack_items = Column(JSON)
    faq_items = Column(JSON)
    hero_image_url = Column(String(500))
    video_url = Column(String(500))
    senja_widget_id = Column(String(100))
    is_active = Column(Boolean, nullable=False, default=True)
    draft_content = Column(JSON)  # {field: value} pending publish
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class SplitTest(Base):
    """Experiment on one funnel page."""
    __tablename__ = "split_tests"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    page_slug = Column(String(100), nullable=False, index=True)
    variants = Column(JSON, nullable=False)  # [{id, name, weight, content_overrides}]
    status = Column(Enum(SplitTestStatus), nullable=False, default=SplitTestStatus.DRAFT, index=True)
    winner_variant_id = Column(String(100))
    started_at = Column(DateTime(timezone=True))
    completed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class FunnelEvent(Base):
    """Tracked funnel interaction."""
    __tablename__ = "funnel_events"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(100), nullable=False, index=True)
    event_type = Column(Enum(FunnelEventType), nullable=False, index=True)
    page_slug = Column(String(100), nullable=False)
    order_id = Column(Integer, ForeignKey("funnel_orders.id"))
    split_test_variant = Column(String(100), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
