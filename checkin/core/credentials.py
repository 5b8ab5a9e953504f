# checkin/core/credentials.py
from __future__ import annotations

import re
import time
import uuid

from checkin.core.config import settings

# <uuid4>-<epoch en milisegundos, 13 dígitos>
CREDENTIAL_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}-\d{13}",
    re.IGNORECASE,
)


def new_credential() -> str:
    return f"{uuid.uuid4()}-{int(time.time() * 1000)}"


def is_valid_format(credential: object) -> bool:
    """Chequeo estructural puro, sin tocar la BD."""
    if not isinstance(credential, str):
        return False
    return CREDENTIAL_RE.fullmatch(credential) is not None


def check_in_url(credential: str, base_url: str | None = None) -> str:
    """
    Enlace que se codifica en el QR:
    https://example.org/  + abc -> https://example.org/check-in/abc
    """
    base = (base_url or settings.checkin_base_url).rstrip("/")
    return f"{base}/check-in/{credential}"
