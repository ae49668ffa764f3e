from sqlalchemy import Column, Integer, String, Boolean
from sqlalchemy.orm import relationship
from menta.models.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    """A doctor account; every practice record is scoped to one."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    image = Column(String(500), nullable=True)

    # Account status
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    patients = relationship("Patient", back_populates="doctor", cascade="all, delete-orphan")
    appointments = relationship("Appointment", back_populates="doctor", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"
