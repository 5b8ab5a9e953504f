# tests/conftest.py
import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# --- Asegurar que podemos importar 'checkin' desde la raíz del repo ---
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _prepare_test_env() -> None:
    tmp = (ROOT / ".pytest_tmp").absolute()
    tmp.mkdir(exist_ok=True)

    # BD SQLite temporal para pruebas (se recrea en cada ejecución)
    db_file = tmp / "test.sqlite3"
    db_file.unlink(missing_ok=True)
    os.environ["DB_URL"] = f"sqlite+aiosqlite:///{db_file.as_posix()}"

    # Variables mínimas para que Settings funcione sin .env
    os.environ["CHECKIN_BASE_URL"] = "http://testserver"
    os.environ["MINT_MAX_ATTEMPTS"] = "5"
    os.environ["DEFAULT_OPERATOR_TAG"] = "Unknown Worker"


# Antes de que cualquier módulo de test importe checkin.core.config
_prepare_test_env()


@pytest.fixture(scope="session")
def client():
    """
    Cliente HTTP con la BD sqlite de .pytest_tmp/test.sqlite3.
    """
    from checkin.main import app
    # Con 'with' forzamos lifespan: crea tablas en startup y cierra engine en shutdown
    with TestClient(app) as c:
        yield c


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def sessions(tmp_path, anyio_backend):
    """
    async_sessionmaker sobre una BD sqlite propia del test, para los
    servicios sin pasar por HTTP.
    """
    from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
    from checkin.db.models import Base
    from checkin.db.session import json_serializer

    engine = create_async_engine(
        f"sqlite+aiosqlite:///{(tmp_path / 'svc.sqlite3').as_posix()}",
        json_serializer=json_serializer,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def make_registration(sessions):
    from checkin.db.models import Registration

    async def _make(**data) -> str:
        async with sessions() as s:
            reg = Registration(registration_data=data or {"name": "Ana"})
            s.add(reg)
            await s.commit()
            return reg.id

    return _make
