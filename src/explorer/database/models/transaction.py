from datetime import datetime
from typing import List, Optional

from loguru import logger
from sqlalchemy import JSON, BigInteger, Column, DateTime, Integer, String, delete, func, select

from src.explorer.database.base_model import OrmBase, insert_for, to_dict
from src.explorer.database.session_manager import DatabaseSessionManager
from src.explorer.exceptions import NotFound, TransactionConflict

LIST_COLUMNS = ('transaction_id', 'created_at', 'sender', 'receiver', 'amount')


class Transaction(OrmBase):
    __tablename__ = 'transactions'
    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_id = Column(String, nullable=False, unique=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    confirmation_block = Column(BigInteger, nullable=False, index=True)
    amount = Column(BigInteger, nullable=False)
    confirmations_number = Column(Integer, nullable=False, default=0)
    sender = Column(String, nullable=False)
    receiver = Column(String, nullable=False)
    input = Column(JSON, nullable=True)
    outputs = Column(JSON, nullable=False, default=list)


def transaction_to_dict(transaction: Transaction) -> dict:
    return to_dict(transaction, exclude=('id',))


class TransactionManager:
    def __init__(self, session_manager: DatabaseSessionManager):
        self.session_manager = session_manager

    async def store_transaction(self, transaction_id: str, created_at: datetime, confirmation_block: int,
                                amount: int, confirmations_number: int, sender: str, receiver: str,
                                input: Optional[dict] = None) -> dict:
        """
        Inserts the transaction or refreshes its block data.

        Sender, receiver, amount and input are fixed once stored, they are what
        the address directory and the parent outputs were derived from. A store
        that disagrees on any of them raises ``TransactionConflict`` and leaves
        the existing row untouched.
        """
        values = dict(
            created_at=created_at,
            confirmation_block=confirmation_block,
            confirmations_number=confirmations_number,
        )
        async with self.session_manager.session() as session:
            async with session.begin():
                # outputs are owned by the linking step and survive a re-store
                stmt = insert_for(session, Transaction).values(
                    transaction_id=transaction_id,
                    amount=amount,
                    sender=sender,
                    receiver=receiver,
                    input=input,
                    outputs=[],
                    **values
                ).on_conflict_do_update(
                    index_elements=['transaction_id'],
                    set_=values,
                    where=(Transaction.sender == sender)
                    & (Transaction.receiver == receiver)
                    & (Transaction.amount == amount)
                )
                result = await session.execute(stmt)

                stored = (await session.execute(
                    select(Transaction).where(Transaction.transaction_id == transaction_id)
                )).scalars().one()
                if result.rowcount == 0 or stored.input != input:
                    logger.warning("Conflicting transaction rejected", transaction_id=transaction_id)
                    raise TransactionConflict(
                        f"Transaction {transaction_id} already exists with different contents")

                return transaction_to_dict(stored)

    async def append_output(self, parent_transaction_id: str, output: dict) -> bool:
        async with self.session_manager.session() as session:
            async with session.begin():
                result = await session.execute(
                    select(Transaction)
                    .where(Transaction.transaction_id == parent_transaction_id)
                    .with_for_update()
                )
                parent = result.scalars().first()
                if parent is None:
                    logger.debug("Parent transaction is not indexed", parent_transaction_id=parent_transaction_id)
                    return False

                outputs = list(parent.outputs or [])
                if any(o.get('transaction_id') == output['transaction_id'] for o in outputs):
                    return False

                parent.outputs = outputs + [output]
                return True

    async def get_transactions(self, limit: int, offset: int) -> List[dict]:
        columns = [getattr(Transaction, name) for name in LIST_COLUMNS]
        async with self.session_manager.session() as session:
            result = await session.execute(
                select(*columns)
                .order_by(Transaction.confirmation_block.desc(), Transaction.id.desc())
                .offset(offset)
                .limit(limit)
            )
            return [dict(row._mapping) for row in result.fetchall()]

    async def get_transaction(self, transaction_id: str) -> dict:
        async with self.session_manager.session() as session:
            result = await session.execute(
                select(Transaction).where(Transaction.transaction_id == transaction_id)
            )
            transaction = result.scalars().first()
            if transaction is None:
                raise NotFound("Transaction does not exist!")
            return transaction_to_dict(transaction)

    async def get_transactions_by_height(self, height: int) -> List[dict]:
        async with self.session_manager.session() as session:
            result = await session.execute(
                select(Transaction)
                .where(Transaction.confirmation_block == height)
                .order_by(Transaction.id)
            )
            return [transaction_to_dict(t) for t in result.scalars().all()]

    async def get_transactions_per_day(self) -> List[dict]:
        day = func.date(Transaction.created_at).label('day')
        async with self.session_manager.session() as session:
            result = await session.execute(
                select(day, func.count(Transaction.id).label('transactions_count'))
                .group_by(day)
                .order_by(day)
            )
            return [
                {"_id": str(row.day), "transactions_count": row.transactions_count}
                for row in result.fetchall()
            ]

    async def delete_transaction(self, transaction_id: str) -> None:
        async with self.session_manager.session() as session:
            async with session.begin():
                result = await session.execute(
                    delete(Transaction).where(Transaction.transaction_id == transaction_id)
                )
                if result.rowcount == 0:
                    raise NotFound("Transaction does not exist!")
