from sqlalchemy import Column, String, DateTime, Boolean, Text, ForeignKey, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from meunps.database import Base, JSONType
from meunps.schemas.blobs import default_automation, default_survey_customization
from meunps.utils import utcnow


class Campaign(Base):
    __tablename__ = "campaigns"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=True)
    # Gates public submissions
    active = Column(Boolean, nullable=False, default=True)
    default_source_id = Column(Uuid, ForeignKey('sources.id', ondelete='SET NULL'), nullable=True)
    default_group_id = Column(Uuid, ForeignKey('groups.id', ondelete='SET NULL'), nullable=True)
    survey_customization = Column(JSONType, nullable=False, default=default_survey_customization)
    automation = Column(JSONType, nullable=False, default=default_automation)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    user = relationship("User", back_populates="campaigns")
    form = relationship("CampaignForm", back_populates="campaign", uselist=False, cascade="all, delete-orphan", passive_deletes=True)
    responses = relationship("NpsResponse", back_populates="campaign", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Campaign(id={self.id}, name={self.name}, active={self.active})>"


class CampaignForm(Base):
    __tablename__ = "campaign_forms"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    campaign_id = Column(Uuid, ForeignKey('campaigns.id', ondelete='CASCADE'), nullable=False, unique=True)
    # Ordered list of {id, type, label, required, order, options?}
    fields = Column(JSONType, nullable=False, default=list)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    campaign = relationship("Campaign", back_populates="form")

    def __repr__(self):
        return f"<CampaignForm(id={self.id}, campaign_id={self.campaign_id})>"
