from datetime import datetime

import pytest

from src.explorer.exceptions import NotFound, TransactionConflict


async def store(manager, transaction_id, confirmation_block=1, created_at=datetime(2024, 1, 1, 12, 0),
                sender="cgn1sender", receiver="cgn1receiver", amount=100, input=None):
    return await manager.store_transaction(
        transaction_id=transaction_id,
        created_at=created_at,
        confirmation_block=confirmation_block,
        amount=amount,
        confirmations_number=1,
        sender=sender,
        receiver=receiver,
        input=input,
    )


@pytest.mark.asyncio
async def test_store_and_get_transaction(transaction_manager):
    coin = {"parent_coin_info": "0x01", "puzzle_hash": "0x02", "amount": 100}
    stored = await store(transaction_manager, "0xaa", input=coin)

    fetched = await transaction_manager.get_transaction("0xaa")

    assert stored == fetched
    assert fetched["input"] == coin
    assert fetched["outputs"] == []
    assert "id" not in fetched


@pytest.mark.asyncio
async def test_get_missing_transaction_raises_not_found(transaction_manager):
    with pytest.raises(NotFound):
        await transaction_manager.get_transaction("0xmissing")


@pytest.mark.asyncio
async def test_store_is_an_upsert_that_keeps_outputs(transaction_manager):
    await store(transaction_manager, "0xaa", confirmation_block=1)
    await transaction_manager.append_output("0xaa", {"transaction_id": "0xbb", "address": "cgn1x", "amount": 5})

    await store(transaction_manager, "0xaa", confirmation_block=4)
    fetched = await transaction_manager.get_transaction("0xaa")

    assert fetched["confirmation_block"] == 4
    assert fetched["outputs"] == [{"transaction_id": "0xbb", "address": "cgn1x", "amount": 5}]


@pytest.mark.asyncio
@pytest.mark.parametrize("changes", [
    {"amount": 150},
    {"receiver": "cgn1carol"},
    {"sender": "cgn1mallory"},
    {"input": {"parent_coin_info": "0x01", "puzzle_hash": "0x02", "amount": 100}},
])
async def test_store_rejects_changed_contents(transaction_manager, changes):
    await store(transaction_manager, "0xaa", confirmation_block=1)

    with pytest.raises(TransactionConflict):
        await store(transaction_manager, "0xaa", confirmation_block=2, **changes)

    fetched = await transaction_manager.get_transaction("0xaa")
    assert (fetched["amount"], fetched["sender"], fetched["receiver"]) == (100, "cgn1sender", "cgn1receiver")
    assert fetched["input"] is None
    assert fetched["confirmation_block"] == 1


@pytest.mark.asyncio
async def test_list_transactions_is_limited_and_sorted_by_block_desc(transaction_manager):
    for height in [3, 12, 7, 1, 15, 9, 4, 11, 2, 14, 6, 13, 5, 10, 8]:
        await store(transaction_manager, f"0x{height:02x}", confirmation_block=height)

    result = await transaction_manager.get_transactions(10, 0)

    assert len(result) == 10
    assert [r["transaction_id"] for r in result] == [f"0x{h:02x}" for h in range(15, 5, -1)]
    assert set(result[0].keys()) == {"transaction_id", "created_at", "sender", "receiver", "amount"}


@pytest.mark.asyncio
async def test_list_transactions_applies_offset(transaction_manager):
    for height in range(1, 6):
        await store(transaction_manager, f"0x{height:02x}", confirmation_block=height)

    result = await transaction_manager.get_transactions(2, 3)

    assert [r["transaction_id"] for r in result] == ["0x02", "0x01"]


@pytest.mark.asyncio
async def test_transactions_by_height(transaction_manager):
    await store(transaction_manager, "0xaa", confirmation_block=5)
    await store(transaction_manager, "0xbb", confirmation_block=5)
    await store(transaction_manager, "0xcc", confirmation_block=6)

    result = await transaction_manager.get_transactions_by_height(5)

    assert [r["transaction_id"] for r in result] == ["0xaa", "0xbb"]
    assert await transaction_manager.get_transactions_by_height(100) == []


@pytest.mark.asyncio
async def test_transactions_per_day(transaction_manager):
    await store(transaction_manager, "0xaa", created_at=datetime(2024, 1, 2, 8, 30))
    await store(transaction_manager, "0xbb", created_at=datetime(2024, 1, 1, 0, 0))
    await store(transaction_manager, "0xcc", created_at=datetime(2024, 1, 1, 23, 59))

    result = await transaction_manager.get_transactions_per_day()

    assert result == [
        {"_id": "2024-01-01", "transactions_count": 2},
        {"_id": "2024-01-02", "transactions_count": 1},
    ]


@pytest.mark.asyncio
async def test_transactions_per_day_without_transactions(transaction_manager):
    assert await transaction_manager.get_transactions_per_day() == []


@pytest.mark.asyncio
async def test_append_output_is_idempotent_per_child(transaction_manager):
    await store(transaction_manager, "0xparent")
    output = {"transaction_id": "0xchild", "address": "cgn1receiver", "amount": 40}

    assert await transaction_manager.append_output("0xparent", output) is True
    assert await transaction_manager.append_output("0xparent", output) is False

    parent = await transaction_manager.get_transaction("0xparent")
    assert parent["outputs"] == [output]


@pytest.mark.asyncio
async def test_append_output_to_unknown_parent_is_a_no_op(transaction_manager):
    output = {"transaction_id": "0xchild", "address": "cgn1receiver", "amount": 40}

    assert await transaction_manager.append_output("0xunknown", output) is False


@pytest.mark.asyncio
async def test_delete_transaction(transaction_manager):
    await store(transaction_manager, "0xaa")

    await transaction_manager.delete_transaction("0xaa")

    with pytest.raises(NotFound):
        await transaction_manager.get_transaction("0xaa")
    with pytest.raises(NotFound):
        await transaction_manager.delete_transaction("0xaa")
