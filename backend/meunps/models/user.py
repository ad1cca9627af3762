from sqlalchemy import Column, String, DateTime, Boolean, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from meunps.database import Base
from meunps.utils import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default='user')  # admin, user
    phone = Column(String(50), nullable=True)
    company = Column(String(255), nullable=True)
    position = Column(String(255), nullable=True)
    avatar = Column(String(1024), nullable=True)
    is_deactivated = Column(Boolean, nullable=False, default=False)
    trial_start_date = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    # Dependent rows are removed by the ON DELETE CASCADE foreign keys
    campaigns = relationship("Campaign", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    profile = relationship("UserProfile", back_populates="user", uselist=False, cascade="all, delete-orphan", passive_deletes=True)
    admin = relationship("UserAdmin", back_populates="user", uselist=False, cascade="all, delete-orphan", passive_deletes=True)
    affiliate = relationship("UserAffiliate", back_populates="user", uselist=False, cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
