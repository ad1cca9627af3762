from sqlalchemy import Column, DateTime, ForeignKey, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from meunps.database import Base, JSONType
from meunps.schemas.blobs import default_permissions
from meunps.utils import utcnow


class UserAdmin(Base):
    __tablename__ = "user_admin"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True)
    permissions = Column(JSONType, nullable=False, default=default_permissions)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    user = relationship("User", back_populates="admin")

    def can_view_users(self) -> bool:
        return bool((self.permissions or {}).get("view_users"))

    def __repr__(self):
        return f"<UserAdmin(user_id={self.user_id}, permissions={self.permissions})>"
