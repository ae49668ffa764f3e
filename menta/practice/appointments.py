from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from menta.auth.deps import get_current_doctor
from menta.core.exceptions import ResourceNotFoundError
from menta.db.database import get_async_session
from menta.models.appointment import Appointment
from menta.models.patient import Patient
from menta.models.user import User
from menta.schemas.practice import AppointmentCreate, AppointmentCreated, AppointmentList
from menta.utils.helpers import as_utc, utcnow

router = APIRouter()


@router.post("", response_model=AppointmentCreated, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    data: AppointmentCreate,
    current_doctor: User = Depends(get_current_doctor),
    db: AsyncSession = Depends(get_async_session)
):
    """Schedule an appointment with one of the signed-in doctor's patients."""
    result = await db.execute(
        select(Patient).where(
            Patient.id == data.patient_id,
            Patient.doctor_id == current_doctor.id
        )
    )
    if not result.scalar_one_or_none():
        raise ResourceNotFoundError("Patient not found or not associated with this doctor")

    appointment = Appointment(
        patient_id=data.patient_id,
        doctor_id=current_doctor.id,
        scheduled_at=as_utc(data.scheduled_at),
        duration_minutes=data.duration_minutes,
        notes=data.notes
    )
    db.add(appointment)
    await db.commit()

    result = await db.execute(
        select(Appointment)
        .options(selectinload(Appointment.patient))
        .where(Appointment.id == appointment.id)
        .execution_options(populate_existing=True)
    )
    return {"message": "Appointment created successfully", "appointment": result.scalar_one()}


@router.get("", response_model=AppointmentList)
async def list_appointments(
    future: bool = False,
    current_doctor: User = Depends(get_current_doctor),
    db: AsyncSession = Depends(get_async_session)
):
    """List the signed-in doctor's appointments; ``future=true`` keeps upcoming ones only."""
    query = (
        select(Appointment)
        .options(selectinload(Appointment.patient))
        .where(Appointment.doctor_id == current_doctor.id)
    )
    if future:
        query = query.where(Appointment.scheduled_at >= utcnow())

    result = await db.execute(query.order_by(Appointment.scheduled_at.asc()))
    return {"appointments": result.scalars().all()}
