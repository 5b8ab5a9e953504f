# checkin/api/checkin.py
from fastapi import APIRouter
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from checkin.schemas import AdmissionStatus
from checkin.services.admission import ALREADY_ADMITTED, AdmissionOrchestrator

router = APIRouter()
orchestrator = AdmissionOrchestrator()


class CompleteInput(BaseModel):
    operatorTag: str | None = None


@router.post("/{credential}/complete")
async def complete_check_in(credential: str, body: CompleteInput | None = None):
    result = await orchestrator.admit(credential, body.operatorTag if body else None)
    if result.success:
        code = 200
    elif result.reason == ALREADY_ADMITTED:
        code = 409
    else:
        code = 404
    return JSONResponse(status_code=code, content=jsonable_encoder(result, by_alias=True))


@router.post("/{credential}/undo")
async def undo_check_in(credential: str):
    ok = await orchestrator.undo(credential)
    if not ok:
        return {"success": False, "reason": "nothing to undo"}
    return {"success": True}


@router.get("/{credential}/status", response_model=AdmissionStatus)
async def check_in_status(credential: str):
    return await orchestrator.status(credential)
