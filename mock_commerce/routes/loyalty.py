"""Loyalty points routes for the mock backend"""

from fastapi import APIRouter, HTTPException

from ..database.events import loyalty_ledger
from ..models.events import AwardPointsRequest, LoyaltyAccount

router = APIRouter(prefix="/api/loyalty", tags=["Loyalty"])


@router.post("/points/award", response_model=LoyaltyAccount)
async def award_points(request: AwardPointsRequest):
    return loyalty_ledger.award(request.user_id, request.points, request.reason, request.order_id)


@router.get("/{user_id}", response_model=LoyaltyAccount)
async def get_account(user_id: str):
    account = loyalty_ledger.get_account(user_id)
    if not account:
        raise HTTPException(status_code=404, detail="Member not found")
    return account
