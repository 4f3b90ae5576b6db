from typing import List

from src.explorer.database.models.address import AddressManager
from src.explorer.database.models.transaction import TransactionManager
from src.explorer.exceptions import NotFound
from src.explorer.nodes.chia.node import ChiaNode
from src.explorer.protocol import ADDRESS_PREFIX, HASH_PREFIX
from src.explorer.services.resolver import CoinTransactionResolver


class ExplorerQueryAPI:
    def __init__(self,
                 node: ChiaNode,
                 resolver: CoinTransactionResolver,
                 transaction_manager: TransactionManager,
                 address_manager: AddressManager,
                 address_prefix: str = ADDRESS_PREFIX):
        self.node = node
        self.address_prefix = address_prefix
        self.resolver = resolver
        self.transaction_manager = transaction_manager
        self.address_manager = address_manager

    # transactions

    async def list_transactions(self, limit: int, offset: int) -> List[dict]:
        return await self.transaction_manager.get_transactions(limit, offset)

    async def get_transaction(self, transaction_id: str) -> dict:
        return await self.transaction_manager.get_transaction(transaction_id)

    async def get_transactions_by_height(self, height: int) -> List[dict]:
        return await self.transaction_manager.get_transactions_by_height(height)

    async def get_transactions_per_day(self) -> List[dict]:
        return await self.transaction_manager.get_transactions_per_day()

    # chain

    async def get_blockchain_state(self) -> dict:
        state = (await self.node.get_blockchain_state()).model_dump()
        supply = await self.address_manager.get_circulating_supply()
        state["blockchain_state"]["circulating_supply"] = supply.get("circulating_supply") or 0
        state["blockchain_state"]["unique_address_count"] = await self.address_manager.get_unique_address_count()
        return state

    async def get_current_block_height(self) -> int:
        return await self.node.get_current_block_height()

    async def get_blocks(self, start_height: int, end_height: int) -> dict:
        return (await self.node.get_blocks(start_height, end_height)).model_dump()

    async def get_block_by_hash(self, header_hash: str) -> dict:
        return await self.resolver.get_block_by_hash(header_hash)

    async def get_block_by_height(self, height: int) -> dict:
        return await self.resolver.get_block_by_height(height)

    async def get_block_record_by_height(self, height: int) -> dict:
        return (await self.node.get_block_record_by_height(height)).model_dump()

    async def get_block_record_by_hash(self, header_hash: str) -> dict:
        return (await self.node.get_block_record(header_hash)).model_dump()

    async def get_unfinished_block_headers(self, height: int) -> dict:
        return (await self.node.get_unfinished_block_headers(height)).model_dump()

    async def get_unspent_coins(self, puzzle_hash: str) -> dict:
        return (await self.node.get_unspent_coins(puzzle_hash)).model_dump()

    async def get_coin_record(self, name: str) -> dict:
        return (await self.node.get_coin_record_by_name(name)).model_dump()

    async def get_additions_and_removals(self, header_hash: str) -> dict:
        return (await self.node.get_additions_and_removals(header_hash)).model_dump()

    async def get_network_space_between_blocks(self, older_block_hash: str, newer_block_hash: str) -> dict:
        return (await self.node.get_network_space(newer_block_hash, older_block_hash)).model_dump()

    async def convert_puzzle_hash_to_address(self, puzzle_hash: str) -> str:
        return await self.node.puzzle_hash_to_address(puzzle_hash)

    async def convert_address_to_puzzle_hash(self, address: str) -> str:
        return await self.node.address_to_puzzle_hash(address)

    # addresses

    async def get_address(self, address: str) -> dict:
        return await self.address_manager.get_address(address)

    async def find(self, search_id) -> dict:
        token = str(search_id)
        if token[:len(self.address_prefix)] == self.address_prefix:
            return {"address": await self.get_address(token)}

        if token[:len(HASH_PREFIX)] == HASH_PREFIX:
            try:
                return {"transaction": await self.get_transaction(token)}
            except NotFound:
                return await self.get_block_by_hash(token)

        if not (token.isascii() and token.isdigit()):
            raise NotFound(f"Nothing matches {token}")
        return await self.get_block_by_height(int(token))
