"""Transaction router - payment records"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...database import get_db
from ...fetcher import CancellationToken, InflightRequests, get_inflight, request_cancellation
from ...firestore import get_firestore
from ...pagination import page_payload
from .schemas import (
    TransactionCreate,
    TransactionDetailResponse,
    TransactionListResponse,
    TransactionResponse,
    TransactionStatus,
    TransactionStatusUpdate,
    TransactionUpdate,
)
from .service import TransactionService

router = APIRouter(prefix="/transactions", tags=["Transactions"])


def get_transaction_service(
    db: Session = Depends(get_db),
    client=Depends(get_firestore),
    inflight: InflightRequests = Depends(get_inflight),
) -> TransactionService:
    """Dependency injection for TransactionService"""
    return TransactionService(db, client, inflight)


@router.get("", response_model=TransactionListResponse)
async def list_transactions(
    pageSize: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    cursor: Optional[str] = Query(None),
    refresh: bool = Query(False),
    status: Optional[TransactionStatus] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    token: CancellationToken = Depends(request_cancellation),
    service: TransactionService = Depends(get_transaction_service),
):
    """Most recent transactions first"""
    page = await service.list_transactions(
        pageSize, cursor, refresh, status, start, end, token=token
    )
    return page_payload(page)


@router.post("", response_model=TransactionResponse, status_code=201)
async def create_transaction(
    data: TransactionCreate,
    service: TransactionService = Depends(get_transaction_service),
):
    return await service.create_transaction(data)


@router.get("/{transaction_id}", response_model=TransactionDetailResponse)
async def get_transaction(
    transaction_id: str,
    service: TransactionService = Depends(get_transaction_service),
):
    return await service.transaction_detail(transaction_id)


@router.patch("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: str,
    data: TransactionUpdate,
    service: TransactionService = Depends(get_transaction_service),
):
    return await service.patch_transaction(transaction_id, data)


@router.patch("/{transaction_id}/status", response_model=TransactionResponse)
async def update_transaction_status(
    transaction_id: str,
    data: TransactionStatusUpdate,
    service: TransactionService = Depends(get_transaction_service),
):
    return await service.update_transaction(transaction_id, {"status": data.status})


@router.delete("/{transaction_id}")
async def delete_transaction(
    transaction_id: str,
    service: TransactionService = Depends(get_transaction_service),
):
    return await service.delete_transaction(transaction_id)
