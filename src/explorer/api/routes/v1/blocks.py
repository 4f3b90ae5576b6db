from fastapi import APIRouter, Depends, HTTPException, Query

from src.explorer.api import get_query_api
from src.explorer.services.explorer_query_api import ExplorerQueryAPI

blocks_router = APIRouter(prefix="/v1/blocks", tags=["blocks"])


@blocks_router.get("")
async def get_blocks(start: int = Query(..., ge=0, description="First block height"),
                     end: int = Query(..., ge=0, description="Block height to stop before"),
                     query_api: ExplorerQueryAPI = Depends(get_query_api)):
    if start > end:
        raise HTTPException(status_code=400, detail="start cannot be greater than end")
    return await query_api.get_blocks(start, end)


@blocks_router.get("/hash/{header_hash}")
async def get_block_by_hash(header_hash: str, query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return await query_api.get_block_by_hash(header_hash)


@blocks_router.get("/height/{height}")
async def get_block_by_height(height: int, query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return await query_api.get_block_by_height(height)


@blocks_router.get("/height/{height}/transactions")
async def get_block_transactions(height: int, query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return await query_api.get_transactions_by_height(height)


@blocks_router.get("/record/height/{height}")
async def get_block_record_by_height(height: int, query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return await query_api.get_block_record_by_height(height)


@blocks_router.get("/record/hash/{header_hash}")
async def get_block_record_by_hash(header_hash: str, query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return await query_api.get_block_record_by_hash(header_hash)


@blocks_router.get("/unfinished/{height}")
async def get_unfinished_block_headers(height: int, query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return await query_api.get_unfinished_block_headers(height)


@blocks_router.get("/hash/{header_hash}/additions-removals")
async def get_additions_and_removals(header_hash: str, query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return await query_api.get_additions_and_removals(header_hash)
