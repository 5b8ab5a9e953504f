# checkin/api/issuer.py
from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from checkin.schemas import RegistrationSnapshot
from checkin.services.issuer import CredentialIssuer

router = APIRouter()
issuer = CredentialIssuer()


class MintInput(BaseModel):
    registrationId: str


@router.post("/mint")
async def mint_credential(body: MintInput):
    # RegistrationNotFound / CredentialGenerationExhausted -> handlers de main
    credential = await issuer.mint(body.registrationId)
    return {
        "registrationId": body.registrationId,
        "credential": credential,
        "checkInUrl": issuer.check_in_url(credential),
    }


@router.get("/resolve", response_model=RegistrationSnapshot)
async def resolve_credential(credential: str = Query(...)):
    registration = await issuer.resolve(credential)
    if not registration:
        raise HTTPException(status_code=404, detail="credential not found")
    return registration
