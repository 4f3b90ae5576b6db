from fastapi import APIRouter, Depends, Query

from src.explorer.api import get_ledger, get_query_api
from src.explorer.protocol import TransactionCreate
from src.explorer.services.explorer_query_api import ExplorerQueryAPI
from src.explorer.services.transaction_ledger import TransactionLedger

transactions_router = APIRouter(prefix="/v1/transactions", tags=["transactions"])


@transactions_router.get("")
async def list_transactions(limit: int = Query(10, ge=0, description="Number of transactions to return"),
                            offset: int = Query(0, ge=0, description="Number of transactions to skip"),
                            query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return await query_api.list_transactions(limit, offset)


@transactions_router.get("/per-day")
async def get_transactions_per_day(query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return await query_api.get_transactions_per_day()


@transactions_router.get("/{transaction_id}")
async def get_transaction(transaction_id: str, query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return await query_api.get_transaction(transaction_id)


@transactions_router.post("", status_code=201)
async def create_transaction(transaction: TransactionCreate, ledger: TransactionLedger = Depends(get_ledger)):
    return await ledger.create_transaction(transaction)


@transactions_router.delete("/{transaction_id}", status_code=204)
async def remove_transaction(transaction_id: str, ledger: TransactionLedger = Depends(get_ledger)):
    await ledger.remove_transaction(transaction_id)
