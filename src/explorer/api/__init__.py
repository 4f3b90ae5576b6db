from datetime import datetime

from fastapi import Request
from fastapi.responses import JSONResponse

from src.explorer.exceptions import ExplorerError
from src.explorer.services.explorer_query_api import ExplorerQueryAPI
from src.explorer.services.transaction_ledger import TransactionLedger


def patch_record(record):
    record["extra"]["service"] = 'explorer-api'
    record["extra"]["timestamp"] = datetime.utcnow().isoformat()
    record["extra"]["level"] = record['level'].name

    return True


def get_query_api(request: Request) -> ExplorerQueryAPI:
    return request.app.state.query_api


def get_ledger(request: Request) -> TransactionLedger:
    return request.app.state.ledger


async def explorer_error_handler(request: Request, exc: ExplorerError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
