from loguru import logger

from src.explorer.database.models.transaction import TransactionManager
from src.explorer.nodes.abstract_node import Node
from src.explorer.protocol import CoinReference


class CoinTransactionResolver:
    def __init__(self, node: Node, transaction_manager: TransactionManager):
        self.node = node
        self.transaction_manager = transaction_manager

    async def resolve_parent_transaction_id(self, coin: CoinReference) -> str:
        return await self.node.get_coin_info(coin.parent_coin_info, coin.puzzle_hash, coin.amount)

    async def compute_block_amount(self, header_hash: str) -> int:
        additions_and_removals = await self.node.get_additions_and_removals(header_hash)
        amount = 0
        for addition in additions_and_removals.additions:
            amount += addition.coin.amount
        for removal in additions_and_removals.removals:
            amount -= removal.coin.amount
        return amount

    async def get_block_by_hash(self, header_hash: str) -> dict:
        response = await self.node.get_block(header_hash)
        block = response.block

        if block.reward_chain_block.is_transaction_block:
            height = block.reward_chain_block.height
            logger.debug("Attaching transactions to block", block_height=height)
            block.transactions_info = {
                **(block.transactions_info or {}),
                "amount": await self.compute_block_amount(header_hash),
                "transactions": await self.transaction_manager.get_transactions_by_height(height),
            }
        return response.model_dump()

    async def get_block_by_height(self, height: int) -> dict:
        record = await self.node.get_block_record_by_height(height)
        header_hash = record.block_record.header_hash

        response = await self.get_block_by_hash(header_hash)
        response["block"]["header_hash"] = header_hash
        return response
