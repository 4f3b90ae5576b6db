import pytest

from src.explorer.database import OrmBase
from src.explorer.database.models.address import AddressManager
from src.explorer.database.models.transaction import TransactionManager
from src.explorer.database.session_manager import DatabaseSessionManager
from src.explorer.exceptions import NotFound
from src.explorer.nodes.abstract_node import Node
from src.explorer.nodes.chia.models import (
    AdditionsAndRemovalsResponse,
    BlockRecordResponse,
    BlockResponse,
)
from src.explorer.nodes.chia.node_utils import coin_name

PARENT_COIN_INFO = "0x" + "11" * 32
PUZZLE_HASH = "0x" + "22" * 32


def coin_record(amount, parent_coin_info=PARENT_COIN_INFO, puzzle_hash=PUZZLE_HASH):
    return {
        "coin": {"parent_coin_info": parent_coin_info, "puzzle_hash": puzzle_hash, "amount": amount},
        "confirmed_block_index": 10,
        "spent_block_index": 0,
        "spent": False,
        "coinbase": False,
        "timestamp": 1700000000,
    }


class FakeNode(Node):
    """In-memory stand-in for the full node, keyed by header hash."""

    def __init__(self):
        super().__init__()
        self.blocks = {}
        self.heights = {}
        self.additions_and_removals = {}

    def add_block(self, header_hash, height, is_transaction_block=True, additions=(), removals=()):
        self.blocks[header_hash] = BlockResponse.model_validate({
            "success": True,
            "block": {
                "reward_chain_block": {"height": height, "is_transaction_block": is_transaction_block},
                "transactions_info": {"fees": 0} if is_transaction_block else None,
            },
        })
        self.heights[height] = header_hash
        self.additions_and_removals[header_hash] = AdditionsAndRemovalsResponse.model_validate({
            "success": True,
            "additions": [coin_record(a) for a in additions],
            "removals": [coin_record(r) for r in removals],
        })

    async def get_current_block_height(self):
        return max(self.heights) if self.heights else 0

    async def get_block(self, header_hash):
        if header_hash not in self.blocks:
            raise NotFound("Block not found")
        return self.blocks[header_hash].model_copy(deep=True)

    async def get_block_record_by_height(self, height):
        if height not in self.heights:
            raise NotFound("Block not found")
        return BlockRecordResponse.model_validate({
            "success": True,
            "block_record": {"header_hash": self.heights[height], "height": height},
        })

    async def get_additions_and_removals(self, header_hash):
        if header_hash not in self.additions_and_removals:
            raise NotFound("Block not found")
        return self.additions_and_removals[header_hash]

    async def get_coin_info(self, parent_coin_info, puzzle_hash, amount):
        return coin_name(parent_coin_info, puzzle_hash, amount)


@pytest.fixture
def fake_node():
    return FakeNode()


@pytest.fixture
async def session_manager(tmp_path):
    manager = DatabaseSessionManager()
    manager.init(f"sqlite+aiosqlite:///{tmp_path / 'explorer.db'}")
    await manager.create_all(OrmBase.metadata)
    yield manager
    await manager.close()


@pytest.fixture
def transaction_manager(session_manager):
    return TransactionManager(session_manager)


@pytest.fixture
def address_manager(session_manager):
    return AddressManager(session_manager)
