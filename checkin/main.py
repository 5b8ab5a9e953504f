# checkin/main.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from checkin.api.issuer import router as issuer_router
from checkin.api.checkin import router as checkin_router
from checkin.api.registrations import router as registrations_router

from checkin.core.app_logger import setup_logging
from checkin.core.errors import CredentialGenerationExhausted, RegistrationNotFound, StorageUnavailable
from checkin.db.session import engine
from checkin.db.models import Base

logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # === STARTUP ===
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("check-in service ready")
    yield
    # === SHUTDOWN ===
    await engine.dispose()

app = FastAPI(title="Check-in credentials", lifespan=lifespan)

app.include_router(issuer_router, prefix="/issuer", tags=["issuer"])
app.include_router(checkin_router, prefix="/check-in", tags=["check-in"])
app.include_router(registrations_router, prefix="/registrations", tags=["registrations"])


# Infraestructura: 503 reintentable, nunca se confunde con "credencial inválida"
@app.exception_handler(StorageUnavailable)
@app.exception_handler(CredentialGenerationExhausted)
async def infrastructure_error(request: Request, exc: Exception):
    logger.error("infrastructure error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "system error, try again"})


@app.exception_handler(RegistrationNotFound)
async def registration_not_found(request: Request, exc: RegistrationNotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.get("/")
def root():
    return {"ok": True}
