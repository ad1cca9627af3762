from sqlalchemy import Column, DateTime, Integer, Text, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from meunps.database import Base, JSONType
from meunps.utils import utcnow


class NpsResponse(Base):
    """A survey answer. Rows are never updated, hence no updated_at."""
    __tablename__ = "nps_responses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    campaign_id = Column(Uuid, ForeignKey('campaigns.id', ondelete='CASCADE'), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    feedback = Column(Text, nullable=True)
    source_id = Column(Uuid, ForeignKey('sources.id', ondelete='SET NULL'), nullable=True)
    situation_id = Column(Uuid, ForeignKey('situations.id', ondelete='SET NULL'), nullable=True)
    group_id = Column(Uuid, ForeignKey('groups.id', ondelete='SET NULL'), nullable=True)
    form_responses = Column(JSONType, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    campaign = relationship("Campaign", back_populates="responses")

    __table_args__ = (
        CheckConstraint('score >= 0 AND score <= 10', name='nps_responses_score_range'),
    )

    def __repr__(self):
        return f"<NpsResponse(id={self.id}, campaign_id={self.campaign_id}, score={self.score})>"
