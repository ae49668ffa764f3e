from datetime import timedelta

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from menta.auth.deps import get_current_doctor
from menta.db.database import get_async_session
from menta.models.appointment import Appointment
from menta.models.assessment import Assessment
from menta.models.patient import Patient
from menta.models.user import User
from menta.schemas.dashboard import DashboardAppointments, DashboardAssessments, DashboardStats
from menta.utils.helpers import count_by_day, gender_distribution, recent_days, start_of_day, utcnow

router = APIRouter()

RECENT_WINDOW_DAYS = 30
DASHBOARD_LIMIT = 10


async def _count(db: AsyncSession, query) -> int:
    result = await db.execute(query)
    return int(result.scalar_one())


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(
    current_doctor: User = Depends(get_current_doctor),
    db: AsyncSession = Depends(get_async_session)
):
    """Headline counts and chart series for the overview tab."""
    doctor_id = current_doctor.id
    now = utcnow()
    today_start = start_of_day(now)
    tomorrow_start = today_start + timedelta(days=1)
    window_start = now - timedelta(days=RECENT_WINDOW_DAYS)

    total_patients = await _count(
        db, select(func.count(Patient.id)).where(Patient.doctor_id == doctor_id)
    )
    upcoming_appointments = await _count(
        db,
        select(func.count(Appointment.id)).where(
            Appointment.doctor_id == doctor_id,
            Appointment.scheduled_at >= now
        )
    )
    appointments_today = await _count(
        db,
        select(func.count(Appointment.id)).where(
            Appointment.doctor_id == doctor_id,
            Appointment.scheduled_at >= today_start,
            Appointment.scheduled_at < tomorrow_start
        )
    )
    recent_assessments = await _count(
        db,
        select(func.count(Assessment.id))
        .join(Patient, Assessment.patient_id == Patient.id)
        .where(Patient.doctor_id == doctor_id, Assessment.assessed_on >= window_start)
    )

    genders = await db.execute(select(Patient.gender).where(Patient.doctor_id == doctor_id))

    days = recent_days(now.date(), RECENT_WINDOW_DAYS)
    scheduled = await db.execute(
        select(Appointment.scheduled_at).where(
            Appointment.doctor_id == doctor_id,
            Appointment.scheduled_at >= today_start - timedelta(days=RECENT_WINDOW_DAYS - 1),
            Appointment.scheduled_at < tomorrow_start
        )
    )

    latest = await db.execute(
        select(Assessment)
        .options(selectinload(Assessment.patient))
        .join(Patient, Assessment.patient_id == Patient.id)
        .where(Patient.doctor_id == doctor_id)
        .order_by(Assessment.assessed_on.desc())
        .limit(DASHBOARD_LIMIT)
    )

    return {
        "total_patients": total_patients,
        "upcoming_appointments": upcoming_appointments,
        "appointments_today": appointments_today,
        "recent_assessments": recent_assessments,
        "patients_by_gender": gender_distribution(genders.scalars().all()),
        "appointments_by_day": count_by_day(scheduled.scalars().all(), days),
        "assessment_scores": [
            {
                "patient": assessment.patient.name,
                "type": assessment.type,
                "score": assessment.score,
                "assessed_on": assessment.assessed_on,
            }
            for assessment in latest.scalars().all()
        ],
        "success": True,
    }


@router.get("/appointments", response_model=DashboardAppointments)
async def dashboard_appointments(
    current_doctor: User = Depends(get_current_doctor),
    db: AsyncSession = Depends(get_async_session)
):
    """Next upcoming appointments."""
    result = await db.execute(
        select(Appointment)
        .options(selectinload(Appointment.patient))
        .where(
            Appointment.doctor_id == current_doctor.id,
            Appointment.scheduled_at >= utcnow()
        )
        .order_by(Appointment.scheduled_at.asc())
        .limit(DASHBOARD_LIMIT)
    )
    return {"appointments": result.scalars().all(), "success": True}


@router.get("/assessments", response_model=DashboardAssessments)
async def dashboard_assessments(
    current_doctor: User = Depends(get_current_doctor),
    db: AsyncSession = Depends(get_async_session)
):
    """Most recent assessments from the last 30 days."""
    window_start = utcnow() - timedelta(days=RECENT_WINDOW_DAYS)
    result = await db.execute(
        select(Assessment)
        .options(selectinload(Assessment.patient))
        .join(Patient, Assessment.patient_id == Patient.id)
        .where(Patient.doctor_id == current_doctor.id, Assessment.assessed_on >= window_start)
        .order_by(Assessment.assessed_on.desc())
        .limit(DASHBOARD_LIMIT)
    )
    return {"assessments": result.scalars().all(), "success": True}
