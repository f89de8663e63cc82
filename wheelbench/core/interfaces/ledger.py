import datetime
from abc import ABC, abstractmethod
from typing import List, Optional

from wheelbench.core.entities.deposit import DepositRecord, DepositType


class IDepositLedger(ABC):
    """
    Per-user store of deposit records. Every call is scoped to one user and
    never returns another user's records.
    """

    @abstractmethod
    async def get_deposits(
        self,
        user: str,
        start: Optional[datetime.date] = None,
        end: Optional[datetime.date] = None,
        deposit_type: Optional[DepositType] = None,
    ) -> List[DepositRecord]:
        """
        Returns the user's records in ledger (insertion) order, filtered by
        an inclusive date range and type when given.
        """
        pass

    @abstractmethod
    async def add_deposit(self, user: str, record: DepositRecord) -> DepositRecord:
        pass

    @abstractmethod
    async def delete_deposit(self, user: str, deposit_id: str) -> bool:
        pass

    @abstractmethod
    async def update_notes(
        self, user: str, deposit_id: str, notes: Optional[str]
    ) -> Optional[DepositRecord]:
        """Notes are the only mutable field. Returns None for an unknown id."""
        pass
