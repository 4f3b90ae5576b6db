import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from loguru import logger
from starlette.middleware.cors import CORSMiddleware

from src.explorer import VERSION
from src.explorer._config import ExplorerSettings, load_environment
from src.explorer.api import explorer_error_handler, patch_record
from src.explorer.api.routes.v1.addresses import addresses_router
from src.explorer.api.routes.v1.blockchain import blockchain_router
from src.explorer.api.routes.v1.blocks import blocks_router
from src.explorer.api.routes.v1.coins import coins_router
from src.explorer.api.routes.v1.search import search_router
from src.explorer.api.routes.v1.transactions import transactions_router
from src.explorer.database.models.address import AddressManager
from src.explorer.database.models.transaction import TransactionManager
from src.explorer.database.session_manager import DatabaseSessionManager, run_migrations
from src.explorer.exceptions import ExplorerError
from src.explorer.logger import setup_logger
from src.explorer.nodes.chia.node import ChiaNode
from src.explorer.services.explorer_query_api import ExplorerQueryAPI
from src.explorer.services.resolver import CoinTransactionResolver
from src.explorer.services.transaction_ledger import TransactionLedger


def wire_services(app: FastAPI, settings: ExplorerSettings, session_manager: DatabaseSessionManager, node: ChiaNode):
    transaction_manager = TransactionManager(session_manager)
    address_manager = AddressManager(session_manager)
    resolver = CoinTransactionResolver(node, transaction_manager)

    app.state.session_manager = session_manager
    app.state.node = node
    app.state.ledger = TransactionLedger(transaction_manager, address_manager, resolver)
    app.state.query_api = ExplorerQueryAPI(node, resolver, transaction_manager, address_manager,
                                           address_prefix=settings.ADDRESS_PREFIX)


def create_app(settings: ExplorerSettings) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        session_manager = DatabaseSessionManager()
        session_manager.init(settings.DATABASE_URL)
        node = ChiaNode.from_settings(settings)
        wire_services(app, settings, session_manager, node)
        node.start()
        logger.info("Explorer started", rpc_url=settings.FULL_NODE_RPC_URL)
        yield
        # Shutdown
        logger.info("Initiating graceful shutdown...")
        await node.close()
        await session_manager.close()
        logger.info("Explorer stopped")

    app = FastAPI(
        lifespan=lifespan,
        title="Chaingreen Explorer API",
        description="",
        version=VERSION
    )

    app.add_exception_handler(ExplorerError, explorer_error_handler)
    app.include_router(blockchain_router)
    app.include_router(blocks_router)
    app.include_router(coins_router)
    app.include_router(addresses_router)
    app.include_router(transactions_router)
    app.include_router(search_router)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python -m src.explorer.api.main <environment> ; where <environment> is 'testnet' or 'mainnet'")
        sys.exit(1)

    load_environment(sys.argv[1])
    settings = ExplorerSettings()
    run_migrations()
    setup_logger("explorer-api", settings.LOG_PATH, record_filter=patch_record)
    try:
        uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.PORT)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        logger.info("Server shutdown complete")
