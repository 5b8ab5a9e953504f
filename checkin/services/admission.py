# checkin/services/admission.py
"""
Orquestador de admisión: máquina de estados active <-> used sobre las
credenciales que resuelve el emisor.

Cada transición es un único UPDATE condicional (compare-and-swap sobre el
estado esperado). De dos admisiones concurrentes de la misma credencial solo
una afecta a la fila; la otra recibe "already admitted".
"""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from checkin.core.app_logger import get_logger
from checkin.core.config import settings
from checkin.core.errors import storage_errors
from checkin.db.models import CredentialStatus, Registration
from checkin.db.session import SessionLocal
from checkin.schemas import AdmissionStatus, AdmitResult
from checkin.services.issuer import CredentialIssuer

logger = get_logger(__name__)

INVALID_CREDENTIAL = "invalid or expired credential"
ALREADY_ADMITTED = "already admitted"


class AdmissionOrchestrator:
    def __init__(
        self,
        issuer: CredentialIssuer | None = None,
        session_factory: async_sessionmaker[AsyncSession] = SessionLocal,
    ):
        self.issuer = issuer or CredentialIssuer(session_factory)
        self._sessions = session_factory

    async def _transition(self, credential: str, expected: CredentialStatus, values: dict, operation: str) -> bool:
        stmt = (
            update(Registration)
            .where(
                Registration.check_in_token == credential,
                Registration.token_status == expected.value,
            )
            .values(updated_at=datetime.now(timezone.utc), **values)
        )
        with storage_errors(operation):
            async with self._sessions.begin() as s:
                res = await s.execute(stmt)
        return res.rowcount == 1

    async def admit(self, credential: str, operator_tag: str | None = None) -> AdmitResult:
        registration = await self.issuer.resolve(credential)
        if registration is None or registration.credential_status == CredentialStatus.expired:
            return AdmitResult(success=False, reason=INVALID_CREDENTIAL)

        if registration.credential_status == CredentialStatus.used:
            logger.info("rejected double admission for registration %s", registration.id)
            return AdmitResult(success=False, reason=ALREADY_ADMITTED, registration=registration)

        admitted_at = datetime.now(timezone.utc)
        admitted_by = operator_tag or settings.default_operator_tag
        won = await self._transition(
            credential,
            CredentialStatus.active,
            {
                "token_status": CredentialStatus.used.value,
                "checked_in_at": admitted_at,
                "checked_in_by": admitted_by,
            },
            "admit",
        )

        if not won:
            # Otra llamada cambió la fila entre la lectura y el UPDATE
            current = await self.issuer.resolve(credential)
            if current is None or current.credential_status != CredentialStatus.used:
                return AdmitResult(success=False, reason=INVALID_CREDENTIAL)
            logger.info("lost admission race for registration %s", current.id)
            return AdmitResult(success=False, reason=ALREADY_ADMITTED, registration=current)

        logger.info("admitted registration %s by %s", registration.id, admitted_by)
        return AdmitResult(
            success=True,
            admitted_at=admitted_at,
            admitted_by=admitted_by,
            registration=registration.model_copy(
                update={
                    "credential_status": CredentialStatus.used,
                    "admitted_at": admitted_at,
                    "admitted_by": admitted_by,
                }
            ),
        )

    async def undo(self, credential: str) -> bool:
        registration = await self.issuer.resolve(credential)
        if registration is None:
            return False
        if registration.admitted_at is None:
            logger.debug("nothing to undo for registration %s", registration.id)
            return False

        undone = await self._transition(
            credential,
            CredentialStatus.used,
            {
                "token_status": CredentialStatus.active.value,
                "checked_in_at": None,
                "checked_in_by": None,
            },
            "undo",
        )
        if undone:
            logger.info("undid admission for registration %s", registration.id)
        return undone

    async def status(self, credential: str) -> AdmissionStatus:
        registration = await self.issuer.resolve(credential)
        if registration is None:
            # Centinela heredado: desconocida se informa como expired (ver found)
            return AdmissionStatus(found=False, is_admitted=False, credential_status=CredentialStatus.expired)

        return AdmissionStatus(
            found=True,
            is_admitted=registration.admitted_at is not None,
            credential_status=registration.credential_status,
            admitted_at=registration.admitted_at,
            admitted_by=registration.admitted_by,
            registration=registration,
        )

    async def is_already_admitted(self, credential: str) -> bool:
        return (await self.status(credential)).is_admitted
