"""
Credits balance API router
"""
from typing import Optional

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from routers.dependencies import get_auth_client, get_credits_ledger
from services.auth_client import SupabaseAuthClient, extract_bearer_token
from services.credits_ledger import CreditsLedger

router = APIRouter()


class CreditsResponse(BaseModel):
    daily_credits: int


@router.get("/credits", response_model=CreditsResponse)
async def get_credits(
    authorization: Optional[str] = Header(default=None),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
    ledger: CreditsLedger = Depends(get_credits_ledger)
):
    """Remaining generation credits for the calling account (advisory)"""
    account_id = await auth_client.resolve_token(extract_bearer_token(authorization))
    balance = await run_in_threadpool(ledger.get_balance, account_id)
    return CreditsResponse(daily_credits=balance)
