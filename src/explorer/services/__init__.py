from .resolver import CoinTransactionResolver
from .transaction_ledger import TransactionLedger
from .explorer_query_api import ExplorerQueryAPI

__all__ = ["CoinTransactionResolver", "TransactionLedger", "ExplorerQueryAPI"]
