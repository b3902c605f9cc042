from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from violation_tracker.database.base_class import Base
from violation_tracker.model.users import utcnow


class Violation(Base):
    __tablename__ = "violations"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # FK
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    reported_by = Column(Integer, ForeignKey("users.id"), nullable=False)

    # attributes
    violation_type = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    photo_url = Column(String(512), nullable=True)
    violation_time = Column(DateTime(timezone=True), nullable=False, index=True)
    whatsapp_sent = Column(Boolean, default=False, nullable=False)
    whatsapp_sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # relationship
    student = relationship("Student", back_populates="violations")
    reporter = relationship("User", back_populates="reported_violations")
