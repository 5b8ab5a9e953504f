# checkin/api/registrations.py
"""
Sustituto mínimo del servicio de inscripciones (crear) y búsqueda para staff.
"""
from typing import Literal

from fastapi import APIRouter, Query
from pydantic import BaseModel
from sqlalchemy import String, cast, or_, select

from checkin.core.errors import storage_errors
from checkin.db.models import CredentialStatus, Registration
from checkin.db.session import SessionLocal
from checkin.schemas import RegistrationSearchHit, RegistrationSearchPage
from checkin.services.issuer import CredentialIssuer

router = APIRouter()
issuer = CredentialIssuer()


class RegistrationInput(BaseModel):
    qrCodeSetId: str | None = None
    registrationData: dict = {}


@router.post("", status_code=201)
async def create_registration(body: RegistrationInput):
    with storage_errors("create registration"):
        async with SessionLocal() as s:
            reg = Registration(qr_code_set_id=body.qrCodeSetId, registration_data=body.registrationData)
            s.add(reg)
            await s.commit()
            registration_id = reg.id

    credential = await issuer.mint(registration_id)
    return {
        "registrationId": registration_id,
        "credential": credential,
        "checkInUrl": issuer.check_in_url(credential),
    }


@router.get("", response_model=RegistrationSearchPage)
async def search_registrations(
    q: str = "",
    filter: Literal["all", "pending", "checked-in"] = "all",
    limit: int = Query(50, ge=1, le=500),
):
    stmt = select(Registration)
    if q.strip():
        stmt = stmt.where(cast(Registration.registration_data, String).like(f"%{q.strip()}%"))
    if filter == "pending":
        stmt = stmt.where(
            or_(Registration.checked_in_at.is_(None), Registration.token_status != CredentialStatus.used.value)
        )
    elif filter == "checked-in":
        stmt = stmt.where(
            Registration.checked_in_at.is_not(None),
            Registration.token_status == CredentialStatus.used.value,
        )
    stmt = stmt.order_by(Registration.registered_at.desc()).limit(limit)

    with storage_errors("search registrations"):
        async with SessionLocal() as s:
            rows = (await s.execute(stmt)).scalars().all()
    hits = [RegistrationSearchHit.from_row(r) for r in rows]
    return RegistrationSearchPage(registrations=hits, total=len(hits), filter=filter, query=q)
