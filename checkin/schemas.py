# checkin/schemas.py
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from checkin.db.models import CredentialStatus, Registration


def _utc(dt: datetime | None) -> datetime | None:
    # SQLite devuelve datetimes naive aunque la columna sea timezone=True
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class _CamelModel(BaseModel):
    # JSON en camelCase (admittedAt, credentialStatus...), atributos en snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegistrationSnapshot(_CamelModel):
    """Campos de la inscripción relevantes para la admisión."""

    id: str
    qr_code_set_id: str | None = None
    registration_data: dict = {}
    registered_at: datetime | None = None
    credential: str | None = None
    credential_status: CredentialStatus
    admitted_at: datetime | None = None
    admitted_by: str | None = None

    @classmethod
    def from_row(cls, r: Registration) -> "RegistrationSnapshot":
        return cls(
            id=r.id,
            qr_code_set_id=r.qr_code_set_id,
            registration_data=r.registration_data or {},
            registered_at=_utc(r.registered_at),
            credential=r.check_in_token,
            credential_status=CredentialStatus(r.token_status),
            admitted_at=_utc(r.checked_in_at),
            admitted_by=r.checked_in_by,
        )


class AdmitResult(_CamelModel):
    success: bool
    reason: str | None = None
    admitted_at: datetime | None = None
    admitted_by: str | None = None
    registration: RegistrationSnapshot | None = None


class AdmissionStatus(_CamelModel):
    # found=False distingue "no existe" del centinela credential_status=expired
    found: bool
    is_admitted: bool
    credential_status: CredentialStatus
    admitted_at: datetime | None = None
    admitted_by: str | None = None
    registration: RegistrationSnapshot | None = None


def _first(data: dict, *keys: str, default: str = "") -> str:
    # Los formularios no usan siempre la misma clave (name / Name / fullName)
    for k in keys:
        if data.get(k):
            return str(data[k])
    return default


class RegistrationSearchHit(RegistrationSnapshot):
    name: str = "Unknown"
    email: str = ""
    phone: str = ""

    @classmethod
    def from_row(cls, r: Registration) -> "RegistrationSearchHit":
        snap = RegistrationSnapshot.from_row(r)
        data = snap.registration_data
        return cls(
            **snap.model_dump(),
            name=_first(data, "name", "Name", "fullName", default="Unknown"),
            email=_first(data, "email", "Email", "emailAddress"),
            phone=_first(data, "phone", "Phone", "phoneNumber"),
        )


class RegistrationSearchPage(_CamelModel):
    success: bool = True
    registrations: list[RegistrationSearchHit]
    total: int
    filter: str
    query: str
