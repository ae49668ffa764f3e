from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from menta.schemas.practice import AppointmentResponse


class PatientsByGender(BaseModel):
    male: int
    female: int
    other: int


class AppointmentsByDay(BaseModel):
    date: str
    count: int


class AssessmentScore(BaseModel):
    patient: str
    type: str
    score: int
    assessed_on: datetime


class DashboardStats(BaseModel):
    total_patients: int
    upcoming_appointments: int
    appointments_today: int
    recent_assessments: int
    patients_by_gender: PatientsByGender
    appointments_by_day: List[AppointmentsByDay]
    assessment_scores: List[AssessmentScore]
    success: bool = True


class AssessmentPatient(BaseModel):
    name: str

    class Config:
        from_attributes = True


class AssessmentResponse(BaseModel):
    id: int
    type: str
    score: int
    comments: Optional[str] = None
    assessed_on: datetime
    patient_id: int
    patient: AssessmentPatient

    class Config:
        from_attributes = True


class DashboardAssessments(BaseModel):
    assessments: List[AssessmentResponse]
    success: bool = True


class DashboardAppointments(BaseModel):
    appointments: List[AppointmentResponse]
    success: bool = True
