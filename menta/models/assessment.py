from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from menta.models.base import Base
from menta.utils.helpers import utcnow


class Assessment(Base):
    """A scored mental-health screening (PHQ-9, GAD-7, ...) for one patient."""
    __tablename__ = "assessments"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), index=True, nullable=False)

    type = Column(String(50), nullable=False)
    score = Column(Integer, nullable=False)
    comments = Column(Text, nullable=True)
    assessed_on = Column(DateTime(timezone=True), default=utcnow, index=True, nullable=False)

    # Relationships
    patient = relationship("Patient", back_populates="assessments")

    def __repr__(self):
        return f"<Assessment(id={self.id}, patient_id={self.patient_id}, type='{self.type}')>"
