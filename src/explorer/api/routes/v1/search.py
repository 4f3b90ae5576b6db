from fastapi import APIRouter, Depends

from src.explorer.api import get_query_api
from src.explorer.services.explorer_query_api import ExplorerQueryAPI

search_router = APIRouter(prefix="/v1/search", tags=["search"])


@search_router.get("/{search_id}")
async def find(search_id: str, query_api: ExplorerQueryAPI = Depends(get_query_api)):
    return await query_api.find(search_id)
