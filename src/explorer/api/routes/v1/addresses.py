from fastapi import APIRouter, Depends

from src.explorer.api import get_query_api
from src.explorer.services.explorer_query_api import ExplorerQueryAPI

addresses_router = APIRouter(prefix="/v1/addresses", tags=["addresses"])


@addresses_router.get("/puzzle-hash/{puzzle_hash}")
async def convert_puzzle_hash_to_address(puzzle_hash: str, query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return {"address": await query_api.convert_puzzle_hash_to_address(puzzle_hash)}


@addresses_router.get("/{address}")
async def get_address(address: str, query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return await query_api.get_address(address)


@addresses_router.get("/{address}/puzzle-hash")
async def convert_address_to_puzzle_hash(address: str, query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return {"puzzle_hash": await query_api.convert_address_to_puzzle_hash(address)}
