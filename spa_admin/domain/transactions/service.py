"""Transaction service - Business logic for payment transactions"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from google.cloud import exceptions as gexc
from sqlalchemy.orm import Session

from ...accessor import utcnow
from ...fetcher import CachedListFetcher, CancellationToken, InflightRequests
from ...mirror import LocalMirror
from ...pagination import ListPage
from ..bookings.repository import BookingRepository
from .repository import TransactionRepository
from .schemas import TransactionCreate, TransactionUpdate

logger = logging.getLogger(__name__)


class TransactionService:
    """Service layer for transaction business logic"""

    def __init__(self, db: Session, client, inflight: Optional[InflightRequests] = None):
        self.repo = TransactionRepository(client)
        self.bookings_repo = BookingRepository(client)
        self.mirror = LocalMirror(db)
        self.fetcher = CachedListFetcher(self.repo, self.mirror, inflight)

    async def list_transactions(
        self,
        page_size: int = 10,
        cursor: Optional[str] = None,
        refresh: bool = False,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        token: Optional[CancellationToken] = None,
    ) -> ListPage:
        if start and end and start > end:
            raise HTTPException(status_code=400, detail="start must not be after end")
        list_query = self.repo.list_query(status, start, end)
        return await self.fetcher.fetch(list_query, page_size, cursor, refresh, token)

    async def get_transaction(self, transaction_id: str) -> dict:
        transaction = await self.repo.get(transaction_id)
        if not transaction:
            raise HTTPException(status_code=404, detail="Transaction not found")
        return transaction

    async def transaction_detail(self, transaction_id: str) -> dict:
        """Transaction together with the booking it was paid for, if any"""
        transaction = await self.get_transaction(transaction_id)
        booking = None
        booking_id = transaction.get("bookingId")
        if booking_id:
            booking = await self.bookings_repo.get(booking_id)
            if booking is None:
                logger.warning(f"⚠️ Transaction {transaction_id} points at missing booking {booking_id}")
        return {**transaction, "booking": booking}

    async def create_transaction(self, data: TransactionCreate) -> dict:
        payload = data.model_dump()
        if payload["date"] is None:
            payload["date"] = utcnow()
        transaction = await self.repo.add(payload)
        self.mirror.invalidate_counts(self.repo.collection_name)
        return transaction

    async def update_transaction(self, transaction_id: str, changes: dict) -> dict:
        transaction = await self.get_transaction(transaction_id)
        try:
            applied = await self.repo.update(transaction_id, changes)
        except gexc.NotFound:
            raise HTTPException(status_code=404, detail="Transaction not found")
        self.mirror.forget(self.repo.collection_name, transaction_id)
        return {**transaction, **applied}

    async def patch_transaction(self, transaction_id: str, data: TransactionUpdate) -> dict:
        return await self.update_transaction(transaction_id, data.model_dump(exclude_unset=True))

    async def delete_transaction(self, transaction_id: str) -> dict:
        await self.get_transaction(transaction_id)
        await self.repo.delete(transaction_id)
        self.mirror.forget(self.repo.collection_name, transaction_id)
        return {"message": "Transaction deleted"}
