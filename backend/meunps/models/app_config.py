from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid
from sqlalchemy.sql import func
import uuid
from meunps.database import Base, JSONType
from meunps.schemas.blobs import default_company, default_integrations
from meunps.utils import utcnow


class AppConfig(Base):
    __tablename__ = "app_configs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True)
    theme_color = Column(String(20), nullable=False, default='#00ac75')
    language = Column(String(10), nullable=False, default='pt-BR')
    company = Column(JSONType, nullable=False, default=default_company)
    integrations = Column(JSONType, nullable=False, default=default_integrations)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    def __repr__(self):
        return f"<AppConfig(user_id={self.user_id}, language={self.language})>"
