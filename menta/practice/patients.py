from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from menta.auth.deps import get_current_doctor
from menta.db.database import get_async_session
from menta.models.patient import Patient
from menta.models.user import User
from menta.schemas.practice import PatientCreate, PatientCreated, PatientList

router = APIRouter()


@router.post("", response_model=PatientCreated, status_code=status.HTTP_201_CREATED)
async def create_patient(
    data: PatientCreate,
    current_doctor: User = Depends(get_current_doctor),
    db: AsyncSession = Depends(get_async_session)
):
    """Create a patient for the signed-in doctor."""
    patient = Patient(
        name=data.name,
        age=data.age,
        gender=data.gender,
        contact_info=data.contact_info,
        doctor_id=current_doctor.id
    )
    db.add(patient)
    await db.commit()
    await db.refresh(patient)

    return {"message": "Patient created successfully", "patient": patient}


@router.get("", response_model=PatientList)
async def list_patients(
    current_doctor: User = Depends(get_current_doctor),
    db: AsyncSession = Depends(get_async_session)
):
    """List the signed-in doctor's patients by name."""
    result = await db.execute(
        select(Patient)
        .where(Patient.doctor_id == current_doctor.id)
        .order_by(Patient.name.asc())
    )
    return {"patients": result.scalars().all()}
