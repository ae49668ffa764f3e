from sqlalchemy import Column, Integer, String, DateTime, Boolean
from menta.models.base import Base, TimestampMixin


class OtpVerification(TimestampMixin, Base):
    """Pending email verification for a registration; one live row per email."""
    __tablename__ = "otp_verifications"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)

    # OTP details
    code = Column(String(10), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    # Status
    attempts = Column(Integer, default=0, nullable=False)
    verified = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<OtpVerification(id={self.id}, attempts={self.attempts}, verified={self.verified})>"
