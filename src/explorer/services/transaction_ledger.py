import asyncio

from loguru import logger

from src.explorer.database.models.address import AddressManager
from src.explorer.database.models.transaction import TransactionManager
from src.explorer.protocol import UNKNOWN_SENDER, TransactionCreate
from src.explorer.services.resolver import CoinTransactionResolver


class TransactionLedger:
    """
    Owns the transaction write path.

    Creating a transaction persists it first, then links it into its parent's
    outputs and into the address directory. Removing one clears both directory
    sides in a single database transaction and only then deletes the record, so
    a failed deregistration leaves the record and the directory as they were.
    """

    def __init__(self,
                 transaction_manager: TransactionManager,
                 address_manager: AddressManager,
                 resolver: CoinTransactionResolver):
        self.transaction_manager = transaction_manager
        self.address_manager = address_manager
        self.resolver = resolver

    async def create_transaction(self, transaction: TransactionCreate) -> dict:
        stored = await self.transaction_manager.store_transaction(
            transaction_id=transaction.transaction_id,
            created_at=transaction.created_at,
            confirmation_block=transaction.confirmation_block,
            amount=transaction.amount,
            confirmations_number=transaction.confirmations_number,
            sender=transaction.sender,
            receiver=transaction.receiver,
            input=transaction.input.model_dump() if transaction.input else None,
        )
        await self._link(transaction)
        logger.info("Transaction indexed", transaction_id=transaction.transaction_id,
                    block_height=transaction.confirmation_block)
        return stored

    async def _link(self, transaction: TransactionCreate) -> None:
        effects = []
        if transaction.input:
            parent_transaction_id = await self.resolver.resolve_parent_transaction_id(transaction.input)
            effects.append(self.transaction_manager.append_output(parent_transaction_id, {
                "transaction_id": transaction.transaction_id,
                "address": transaction.receiver,
                "amount": transaction.amount,
            }))
        if transaction.sender != UNKNOWN_SENDER:
            effects.append(self.address_manager.register_transaction(
                transaction.sender, transaction.transaction_id, transaction.amount, is_sender=True))

        if effects:
            # let every branch settle, then surface the first failure
            results = await asyncio.gather(*effects, return_exceptions=True)
            for result in results:
                if isinstance(result, BaseException):
                    raise result

        await self.address_manager.register_transaction(
            transaction.receiver, transaction.transaction_id, transaction.amount, is_sender=False)

    async def remove_transaction(self, transaction_id: str) -> None:
        transaction = await self.transaction_manager.get_transaction(transaction_id)

        sides = []
        if transaction['sender'] != UNKNOWN_SENDER:
            sides.append((transaction['sender'], True))
        sides.append((transaction['receiver'], False))
        await self.address_manager.deregister_transaction_sides(transaction_id, sides)

        await self.transaction_manager.delete_transaction(transaction_id)
        logger.info("Transaction removed", transaction_id=transaction_id)
