from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, String, Text

from exam_admin.database import Base, JSONType


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Organization(Base):
    """
    School, consortium or any other body that owns exams.
    Cannot be removed while an exam still points at it.
    """
    __tablename__ = "organizations"

    id = Column(String, primary_key=True, index=True)
    organization_code = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    contact_info = Column(JSONType, nullable=True)       # {email, phone, address, website}
    region = Column(String, nullable=True, index=True)
    establishment_date = Column(Date, nullable=True)
    logo_url = Column(String, nullable=True)
    status = Column(String, nullable=False, default="active")  # active | inactive | suspended

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
