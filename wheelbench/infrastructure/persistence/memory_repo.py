import datetime
import logging
from typing import Dict, List, Optional

from wheelbench.core.entities.deposit import DepositRecord, DepositType
from wheelbench.core.interfaces.ledger import IDepositLedger

logger = logging.getLogger(__name__)


class InMemoryLedger(IDepositLedger):
    """
    Process-local ledger. Used when DATABASE_URL is not configured and in
    tests. Records are copied on the way in and out so callers can't mutate
    stored history.
    """

    def __init__(self):
        self._deposits: Dict[str, List[DepositRecord]] = {}

    async def get_deposits(
        self,
        user: str,
        start: Optional[datetime.date] = None,
        end: Optional[datetime.date] = None,
        deposit_type: Optional[DepositType] = None,
    ) -> List[DepositRecord]:
        records = self._deposits.get(user, [])
        if start:
            records = [r for r in records if r.date >= start]
        if end:
            records = [r for r in records if r.date <= end]
        if deposit_type:
            records = [r for r in records if r.type == deposit_type]
        return [r.model_copy() for r in records]

    async def add_deposit(self, user: str, record: DepositRecord) -> DepositRecord:
        stored = record.model_copy(update={
            "created_at": record.created_at or datetime.datetime.now(datetime.timezone.utc),
        })
        self._deposits.setdefault(user, []).append(stored)
        logger.debug(f"Stored {stored.type.value} {stored.id} for {user}")
        return stored.model_copy()

    async def delete_deposit(self, user: str, deposit_id: str) -> bool:
        records = self._deposits.get(user, [])
        kept = [r for r in records if r.id != deposit_id]
        if len(kept) == len(records):
            return False
        self._deposits[user] = kept
        return True

    async def update_notes(
        self, user: str, deposit_id: str, notes: Optional[str]
    ) -> Optional[DepositRecord]:
        records = self._deposits.get(user, [])
        for i, record in enumerate(records):
            if record.id == deposit_id:
                records[i] = record.model_copy(update={"notes": notes})
                return records[i].model_copy()
        return None
