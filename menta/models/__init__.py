# Models module
from .user import User
from .otp_verification import OtpVerification
from .patient import Patient
from .appointment import Appointment
from .assessment import Assessment

__all__ = [
    "User",
    "OtpVerification",
    "Patient",
    "Appointment",
    "Assessment",
]
