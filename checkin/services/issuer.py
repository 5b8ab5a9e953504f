# checkin/services/issuer.py
"""
Emisor de credenciales de admisión.

Solo sabe de existencia y forma de credenciales: emite una por inscripción,
valida su formato y la resuelve a la inscripción. No conoce el check-in.
"""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from checkin.core import credentials
from checkin.core.app_logger import get_logger
from checkin.core.config import settings
from checkin.core.errors import (
    CredentialGenerationExhausted,
    RegistrationNotFound,
    storage_errors,
)
from checkin.db.models import CredentialStatus, Registration
from checkin.db.session import SessionLocal
from checkin.schemas import RegistrationSnapshot

logger = get_logger(__name__)


class CredentialIssuer:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] = SessionLocal,
        max_attempts: int | None = None,
    ):
        self._sessions = session_factory
        self.max_attempts = max_attempts or settings.mint_max_attempts

    async def mint(self, registration_id: str) -> str:
        """
        Emite una credencial nueva y la guarda en la inscripción (status=active).

        Sobrescribe la anterior, que deja de resolverse. Una violación del
        UNIQUE al escribir cuenta como colisión y consume un intento.
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = credentials.new_credential()
            if not await self.is_unique(candidate):
                logger.warning("credential collision on attempt %d for %s", attempt, registration_id)
                continue
            try:
                await self._store(registration_id, candidate)
            except IntegrityError:
                logger.warning("unique constraint rejected credential on attempt %d for %s", attempt, registration_id)
                continue
            logger.info("minted credential for registration %s", registration_id)
            return candidate

        logger.error("credential generation exhausted for %s", registration_id)
        raise CredentialGenerationExhausted(self.max_attempts)

    async def _store(self, registration_id: str, credential: str) -> None:
        stmt = (
            update(Registration)
            .where(Registration.id == registration_id)
            .values(
                check_in_token=credential,
                token_status=CredentialStatus.active.value,
                # credencial nueva => sin admisión previa
                checked_in_at=None,
                checked_in_by=None,
                updated_at=datetime.now(timezone.utc),
            )
        )
        # IntegrityError se deja pasar: mint la trata como colisión
        with storage_errors("mint", passthrough=(IntegrityError,)):
            async with self._sessions.begin() as s:
                res = await s.execute(stmt)
        if res.rowcount != 1:
            raise RegistrationNotFound(registration_id)

    async def resolve(self, credential: str) -> RegistrationSnapshot | None:
        if not self.is_valid_format(credential):
            logger.debug("rejected malformed credential")
            return None

        with storage_errors("resolve"):
            async with self._sessions() as s:
                row = (
                    await s.execute(select(Registration).where(Registration.check_in_token == credential))
                ).scalar_one_or_none()

        if not row:
            logger.debug("credential not found: %s", credential)
            return None
        return RegistrationSnapshot.from_row(row)

    async def is_unique(self, credential: str) -> bool:
        with storage_errors("is_unique"):
            async with self._sessions() as s:
                existing = (
                    await s.execute(select(Registration.id).where(Registration.check_in_token == credential))
                ).first()
        return existing is None

    @staticmethod
    def is_valid_format(credential: object) -> bool:
        return credentials.is_valid_format(credential)

    @staticmethod
    def check_in_url(credential: str, base_url: str | None = None) -> str:
        return credentials.check_in_url(credential, base_url)
