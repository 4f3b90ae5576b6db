import asyncio
import weakref
from contextlib import AsyncExitStack
from datetime import datetime
from typing import List, Tuple

from loguru import logger
from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    UniqueConstraint,
    delete,
    func,
    select,
    update,
)

from src.explorer.database.base_model import OrmBase, insert_for
from src.explorer.database.session_manager import DatabaseSessionManager
from src.explorer.exceptions import NotFound


class Address(OrmBase):
    __tablename__ = 'addresses'
    id = Column(Integer, primary_key=True, autoincrement=True)
    address = Column(String, nullable=False, unique=True)
    balance = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class AddressTransaction(OrmBase):
    __tablename__ = 'address_transactions'
    id = Column(Integer, primary_key=True, autoincrement=True)
    address = Column(String, nullable=False, index=True)
    transaction_id = Column(String, nullable=False)
    is_sender = Column(Boolean, nullable=False, default=False)
    # signed balance delta applied when the link was created
    amount = Column(BigInteger, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('address', 'transaction_id', 'is_sender', name='uq_address_transaction_side'),
    )


class AddressManager:
    """
    Address directory: per address balance and the transactions it takes part in.

    Registrations are idempotent, the link row is unique per address, transaction
    and side, and the balance only moves when a link is created or removed.
    Mutations for one address are serialized with an in-process lock on top of
    the database transaction.
    """

    def __init__(self, session_manager: DatabaseSessionManager):
        self.session_manager = session_manager
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, address: str) -> asyncio.Lock:
        lock = self._locks.get(address)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[address] = lock
        return lock

    async def register_transaction(self, address: str, transaction_id: str, amount: int, is_sender: bool = False) -> bool:
        delta = -amount if is_sender else amount
        async with self._lock_for(address):
            async with self.session_manager.session() as session:
                async with session.begin():
                    await session.execute(
                        insert_for(session, Address).values(
                            address=address,
                            balance=0,
                            created_at=datetime.utcnow()
                        ).on_conflict_do_nothing(index_elements=['address'])
                    )
                    result = await session.execute(
                        insert_for(session, AddressTransaction).values(
                            address=address,
                            transaction_id=transaction_id,
                            is_sender=is_sender,
                            amount=delta,
                            created_at=datetime.utcnow()
                        ).on_conflict_do_nothing(index_elements=['address', 'transaction_id', 'is_sender'])
                    )
                    if result.rowcount == 0:
                        logger.debug("Transaction already registered", address=address,
                                     transaction_id=transaction_id, is_sender=is_sender)
                        return False

                    await session.execute(
                        update(Address)
                        .where(Address.address == address)
                        .values(balance=Address.balance + delta)
                    )
                    return True

    async def deregister_transaction(self, address: str, transaction_id: str, is_sender: bool = False) -> bool:
        async with self._lock_for(address):
            async with self.session_manager.session() as session:
                async with session.begin():
                    return await self._remove_link(session, address, transaction_id, is_sender)

    async def deregister_transaction_sides(self, transaction_id: str, sides: List[Tuple[str, bool]]) -> int:
        """
        Removes the links of one transaction for every ``(address, is_sender)``
        side in a single database transaction. Either all sides are cleared or
        none are. Address locks are taken in sorted order.
        """
        async with AsyncExitStack() as stack:
            for address in sorted({address for address, _ in sides}):
                await stack.enter_async_context(self._lock_for(address))
            async with self.session_manager.session() as session:
                async with session.begin():
                    removed = 0
                    for address, is_sender in sides:
                        if await self._remove_link(session, address, transaction_id, is_sender):
                            removed += 1
                    return removed

    async def _remove_link(self, session, address: str, transaction_id: str, is_sender: bool) -> bool:
        result = await session.execute(
            select(AddressTransaction)
            .where(AddressTransaction.address == address,
                   AddressTransaction.transaction_id == transaction_id,
                   AddressTransaction.is_sender == is_sender)
            .with_for_update()
        )
        link = result.scalars().first()
        if link is None:
            return False

        await session.execute(
            delete(AddressTransaction).where(AddressTransaction.id == link.id)
        )
        await session.execute(
            update(Address)
            .where(Address.address == address)
            .values(balance=Address.balance - link.amount)
        )
        return True

    async def get_address(self, address: str) -> dict:
        async with self.session_manager.session() as session:
            result = await session.execute(select(Address).where(Address.address == address))
            record = result.scalars().first()
            if record is None:
                raise NotFound("Address does not exist!")

            links = await session.execute(
                select(AddressTransaction.transaction_id)
                .where(AddressTransaction.address == address)
                .order_by(AddressTransaction.id)
            )
            transactions = list(dict.fromkeys(links.scalars().all()))

            return {
                "address": record.address,
                "balance": record.balance,
                "transactions": transactions,
            }

    async def get_unique_address_count(self) -> int:
        async with self.session_manager.session() as session:
            result = await session.execute(select(func.count(Address.id)))
            return result.scalar()

    async def get_circulating_supply(self) -> dict:
        async with self.session_manager.session() as session:
            result = await session.execute(select(func.coalesce(func.sum(Address.balance), 0)))
            return {"circulating_supply": int(result.scalar())}
