from fastapi import APIRouter, Depends

from src.explorer.api import get_query_api
from src.explorer.services.explorer_query_api import ExplorerQueryAPI

coins_router = APIRouter(prefix="/v1/coins", tags=["coins"])


@coins_router.get("/unspent/{puzzle_hash}")
async def get_unspent_coins(puzzle_hash: str, query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return await query_api.get_unspent_coins(puzzle_hash)


@coins_router.get("/{name}")
async def get_coin_record(name: str, query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return await query_api.get_coin_record(name)
