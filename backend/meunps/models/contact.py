from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Uuid
from sqlalchemy.sql import func
import uuid
from meunps.database import Base, JSONType
from meunps.utils import utcnow


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    company = Column(String(255), nullable=True)
    position = Column(String(255), nullable=True)
    # Plain JSON arrays; membership is not checked against groups
    group_ids = Column(JSONType, nullable=False, default=list)
    tags = Column(JSONType, nullable=False, default=list)
    notes = Column(Text, nullable=True)
    last_contact_date = Column(DateTime(timezone=True), nullable=True)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    def __repr__(self):
        return f"<Contact(id={self.id}, name={self.name}, email={self.email})>"
