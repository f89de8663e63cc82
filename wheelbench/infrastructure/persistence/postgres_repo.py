import asyncio
import datetime
import logging
from contextlib import contextmanager
from typing import List, Optional

import psycopg2

from wheelbench.core.entities.deposit import DepositRecord, DepositType
from wheelbench.core.interfaces.ledger import IDepositLedger

logger = logging.getLogger(__name__)

_COLUMNS = "id, amount, type, deposit_date, benchmark_price, benchmark_shares, notes, created_at"


class PostgresRepo(IDepositLedger):
    """
    Postgres-backed deposit ledger. psycopg2 is blocking, so every public
    coroutine hands its query to a worker thread.
    """

    def __init__(self, dsn: str):
        self.dsn = dsn
        self._init_db()

    @contextmanager
    def _cursor(self):
        """
        Cursor inside one transaction: committed on success, rolled back on
        error. The connection is always closed.
        """
        conn = psycopg2.connect(self.dsn)
        try:
            with conn, conn.cursor() as cur:
                yield cur
        finally:
            conn.close()

    def _init_db(self):
        with self._cursor() as cur:
            cur.execute("""
                CREATE TABLE IF NOT EXISTS cash_deposits (
                    seq BIGSERIAL,
                    id VARCHAR PRIMARY KEY,
                    "user" VARCHAR NOT NULL,
                    amount DECIMAL NOT NULL,
                    type VARCHAR NOT NULL,
                    deposit_date DATE NOT NULL,
                    benchmark_price DECIMAL NOT NULL CHECK (benchmark_price > 0),
                    benchmark_shares DECIMAL NOT NULL,
                    notes TEXT,
                    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
                );
            """)
            cur.execute("""
                CREATE INDEX IF NOT EXISTS cash_deposits_user_date
                ON cash_deposits ("user", deposit_date);
            """)

    @staticmethod
    def _to_record(row) -> DepositRecord:
        return DepositRecord(
            id=row[0],
            amount=row[1],
            type=DepositType(row[2]),
            date=row[3],
            benchmark_price=row[4],
            benchmark_shares=row[5],
            notes=row[6],
            created_at=row[7],
        )

    def _select(
        self,
        user: str,
        start: Optional[datetime.date],
        end: Optional[datetime.date],
        deposit_type: Optional[DepositType],
    ) -> List[DepositRecord]:
        query = f"""
            SELECT {_COLUMNS}
            FROM cash_deposits
            WHERE "user" = %s
        """
        params = [user]

        if start:
            query += " AND deposit_date >= %s"
            params.append(start)
        if end:
            query += " AND deposit_date <= %s"
            params.append(end)
        if deposit_type:
            query += " AND type = %s"
            params.append(deposit_type.value)
        query += " ORDER BY seq"

        with self._cursor() as cur:
            cur.execute(query, params)
            rows = cur.fetchall()
        return [self._to_record(row) for row in rows]

    def _insert(self, user: str, record: DepositRecord) -> DepositRecord:
        with self._cursor() as cur:
            cur.execute(
                f"""
                INSERT INTO cash_deposits ("user", {_COLUMNS})
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, COALESCE(%s, now()))
                RETURNING {_COLUMNS}
                """,
                (
                    user, record.id, record.amount, record.type.value, record.date,
                    record.benchmark_price, record.benchmark_shares, record.notes,
                    record.created_at,
                ),
            )
            row = cur.fetchone()
        return self._to_record(row)

    def _delete(self, user: str, deposit_id: str) -> bool:
        with self._cursor() as cur:
            cur.execute(
                'DELETE FROM cash_deposits WHERE "user" = %s AND id = %s',
                (user, deposit_id),
            )
            return cur.rowcount > 0

    def _update_notes(self, user: str, deposit_id: str, notes: Optional[str]) -> Optional[DepositRecord]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                UPDATE cash_deposits SET notes = %s
                WHERE "user" = %s AND id = %s
                RETURNING {_COLUMNS}
                """,
                (notes, user, deposit_id),
            )
            row = cur.fetchone()
        return self._to_record(row) if row else None

    # IDepositLedger Implementation
    async def get_deposits(
        self,
        user: str,
        start: Optional[datetime.date] = None,
        end: Optional[datetime.date] = None,
        deposit_type: Optional[DepositType] = None,
    ) -> List[DepositRecord]:
        return await asyncio.to_thread(self._select, user, start, end, deposit_type)

    async def add_deposit(self, user: str, record: DepositRecord) -> DepositRecord:
        return await asyncio.to_thread(self._insert, user, record)

    async def delete_deposit(self, user: str, deposit_id: str) -> bool:
        return await asyncio.to_thread(self._delete, user, deposit_id)

    async def update_notes(
        self, user: str, deposit_id: str, notes: Optional[str]
    ) -> Optional[DepositRecord]:
        return await asyncio.to_thread(self._update_notes, user, deposit_id, notes)
