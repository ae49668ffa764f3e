from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


# Patient schemas
class PatientCreate(BaseModel):
    name: str = Field(..., min_length=1)
    age: Optional[int] = Field(None, ge=0, le=150)
    gender: Optional[str] = None
    contact_info: Optional[str] = None


class PatientSummary(BaseModel):
    id: int
    name: str
    age: Optional[int] = None
    gender: Optional[str] = None

    class Config:
        from_attributes = True


class PatientResponse(PatientSummary):
    contact_info: Optional[str] = None
    doctor_id: int
    created_at: datetime


class PatientList(BaseModel):
    patients: List[PatientResponse]


class PatientCreated(BaseModel):
    message: str
    patient: PatientResponse


# Appointment schemas
class AppointmentCreate(BaseModel):
    patient_id: int
    scheduled_at: datetime
    duration_minutes: int = Field(60, gt=0)
    notes: Optional[str] = None


class AppointmentResponse(BaseModel):
    id: int
    scheduled_at: datetime
    duration_minutes: int
    notes: Optional[str] = None
    patient_id: int
    doctor_id: int
    patient: PatientSummary

    class Config:
        from_attributes = True


class AppointmentList(BaseModel):
    appointments: List[AppointmentResponse]


class AppointmentCreated(BaseModel):
    message: str
    appointment: AppointmentResponse
