"""Analytics and loyalty models for the mock backend"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field


class AnalyticsEvent(BaseModel):
    event: str
    params: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AwardPointsRequest(BaseModel):
    user_id: str
    points: int = Field(ge=1)
    reason: str
    order_id: Optional[str] = None


class PointsTransaction(BaseModel):
    points: int
    reason: str
    order_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class LoyaltyAccount(BaseModel):
    user_id: str
    points: int = 0
    transactions: list[PointsTransaction] = Field(default_factory=list)
