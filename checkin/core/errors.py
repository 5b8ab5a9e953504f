# checkin/core/errors.py
"""
Errores de infraestructura del núcleo de check-in.

Los resultados de negocio (credencial desconocida, ya admitido, nada que
deshacer) NO son excepciones: se devuelven como resultados tipados. Aquí solo
vive lo que el llamante debe tratar como "error del sistema, reintenta".
"""
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from checkin.core.app_logger import get_logger

logger = get_logger(__name__)


class CheckInError(Exception):
    pass


class StorageUnavailable(CheckInError):
    """El almacén no respondió o rechazó la operación."""


class CredentialGenerationExhausted(CheckInError):
    def __init__(self, attempts: int):
        super().__init__(f"could not mint a unique credential after {attempts} attempts")
        self.attempts = attempts


class RegistrationNotFound(CheckInError):
    def __init__(self, registration_id: str):
        super().__init__(f"registration {registration_id} not found")
        self.registration_id = registration_id


@contextmanager
def storage_errors(operation: str, passthrough: tuple[type[Exception], ...] = ()):
    try:
        yield
    except passthrough:
        raise
    except SQLAlchemyError as e:
        logger.error("storage failure during %s: %s", operation, e)
        raise StorageUnavailable(f"{operation} failed: {e}") from e
