"""
Data structures, used in project.

Add models here for Alembic processing.

After changing tables
`alembic revision --message="msg" --autogenerate`
in migrations/versions folder.
"""
from .base_model import OrmBase
from .session_manager import DatabaseSessionManager
from .models.transaction import Transaction, TransactionManager
from .models.address import Address, AddressTransaction, AddressManager

__all__ = ["OrmBase", "DatabaseSessionManager", "Transaction", "TransactionManager",
           "Address", "AddressTransaction", "AddressManager"]
