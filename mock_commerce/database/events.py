"""Analytics event log and loyalty ledger"""

from typing import Optional

from ..models.events import AnalyticsEvent, LoyaltyAccount, PointsTransaction


class EventLog:
    """Collected analytics events, oldest first"""

    def __init__(self):
        self.events: list[AnalyticsEvent] = []

    def reset(self) -> None:
        self.events = []

    def record(self, event: AnalyticsEvent) -> None:
        self.events.append(event)

    def list_events(self, name: Optional[str] = None) -> list[AnalyticsEvent]:
        if name:
            return [e for e in self.events if e.event == name]
        return list(self.events)


class LoyaltyLedger:
    """Member point balances"""

    def __init__(self):
        self.accounts: dict[str, LoyaltyAccount] = {}

    def reset(self) -> None:
        self.accounts = {}

    def award(self, user_id: str, points: int, reason: str, order_id: Optional[str] = None) -> LoyaltyAccount:
        account = self.accounts.setdefault(user_id, LoyaltyAccount(user_id=user_id))
        account.points += points
        account.transactions.append(PointsTransaction(points=points, reason=reason, order_id=order_id))
        return account

    def get_account(self, user_id: str) -> Optional[LoyaltyAccount]:
        return self.accounts.get(user_id)


# Singleton instances
event_log = EventLog()
loyalty_ledger = LoyaltyLedger()
