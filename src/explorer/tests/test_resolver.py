from unittest.mock import AsyncMock

import pytest

from src.explorer.exceptions import NodeUnavailable, NotFound
from src.explorer.nodes.chia.node_utils import coin_name
from src.explorer.protocol import CoinReference
from src.explorer.services.resolver import CoinTransactionResolver

BLOCK_HASH = "0x" + "ab" * 32


@pytest.fixture
def stub_transaction_manager():
    manager = AsyncMock()
    manager.get_transactions_by_height.return_value = [{"transaction_id": "0x01", "confirmation_block": 7}]
    return manager


@pytest.fixture
def resolver(fake_node, stub_transaction_manager):
    return CoinTransactionResolver(fake_node, stub_transaction_manager)


@pytest.mark.asyncio
async def test_compute_block_amount_is_additions_minus_removals(fake_node, resolver):
    fake_node.add_block(BLOCK_HASH, 7, additions=[100, 250, 50], removals=[300])

    assert await resolver.compute_block_amount(BLOCK_HASH) == 100


@pytest.mark.asyncio
async def test_compute_block_amount_of_empty_block_is_zero(fake_node, resolver):
    fake_node.add_block(BLOCK_HASH, 7)

    assert await resolver.compute_block_amount(BLOCK_HASH) == 0


@pytest.mark.asyncio
async def test_compute_block_amount_propagates_node_errors(resolver):
    with pytest.raises(NotFound):
        await resolver.compute_block_amount("0xmissing")


@pytest.mark.asyncio
async def test_transaction_block_gets_amount_and_transactions(fake_node, resolver, stub_transaction_manager):
    fake_node.add_block(BLOCK_HASH, 7, additions=[500], removals=[200])

    result = await resolver.get_block_by_hash(BLOCK_HASH)

    transactions_info = result["block"]["transactions_info"]
    assert transactions_info["amount"] == 300
    assert transactions_info["transactions"] == [{"transaction_id": "0x01", "confirmation_block": 7}]
    assert transactions_info["fees"] == 0
    stub_transaction_manager.get_transactions_by_height.assert_awaited_once_with(7)


@pytest.mark.asyncio
async def test_non_transaction_block_is_returned_untouched(fake_node, resolver, stub_transaction_manager):
    fake_node.add_block(BLOCK_HASH, 8, is_transaction_block=False, additions=[500])

    result = await resolver.get_block_by_hash(BLOCK_HASH)

    assert result["block"]["transactions_info"] is None
    stub_transaction_manager.get_transactions_by_height.assert_not_awaited()


@pytest.mark.asyncio
async def test_block_by_height_carries_its_header_hash(fake_node, resolver):
    fake_node.add_block(BLOCK_HASH, 7)

    result = await resolver.get_block_by_height(7)

    assert result["block"]["header_hash"] == BLOCK_HASH
    assert result["block"]["reward_chain_block"]["height"] == 7


@pytest.mark.asyncio
async def test_block_by_unknown_height_raises_not_found(resolver):
    with pytest.raises(NotFound):
        await resolver.get_block_by_height(99)


@pytest.mark.asyncio
async def test_resolve_parent_transaction_id_uses_coin_name(resolver):
    coin = CoinReference(parent_coin_info="0x" + "01" * 32, puzzle_hash="0x" + "02" * 32, amount=10)

    assert await resolver.resolve_parent_transaction_id(coin) == coin_name(coin.parent_coin_info, coin.puzzle_hash, 10)


@pytest.mark.asyncio
async def test_resolve_parent_transaction_id_propagates_unavailable_node(stub_transaction_manager):
    node = AsyncMock()
    node.get_coin_info.side_effect = NodeUnavailable()
    resolver = CoinTransactionResolver(node, stub_transaction_manager)
    coin = CoinReference(parent_coin_info="0x" + "01" * 32, puzzle_hash="0x" + "02" * 32, amount=10)

    with pytest.raises(NodeUnavailable):
        await resolver.resolve_parent_transaction_id(coin)
