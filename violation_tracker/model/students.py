from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from violation_tracker.database.base_class import Base
from violation_tracker.model.users import utcnow


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    nisn = Column(String(20), nullable=False, unique=True)  # national student id
    name = Column(String(255), nullable=False)
    class_name = Column("class", String(50), nullable=False)
    parent_name = Column(String(255), nullable=False)
    parent_whatsapp = Column(String(30), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # no cascade: deletion is refused while violations reference the student
    violations = relationship("Violation", back_populates="student")
