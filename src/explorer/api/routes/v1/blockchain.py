from fastapi import APIRouter, Depends, Query

from src.explorer.api import get_query_api
from src.explorer.services.explorer_query_api import ExplorerQueryAPI

blockchain_router = APIRouter(prefix="/v1/blockchain", tags=["blockchain"])


@blockchain_router.get("/state")
async def get_blockchain_state(query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return await query_api.get_blockchain_state()


@blockchain_router.get("/netspace")
async def get_network_space(older_block_hash: str = Query(..., description="Header hash of the older block"),
                            newer_block_hash: str = Query(..., description="Header hash of the newer block"),
                            query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return await query_api.get_network_space_between_blocks(older_block_hash, newer_block_hash)


@blockchain_router.get("/height")
async def get_current_block_height(query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return {"height": await query_api.get_current_block_height()}
