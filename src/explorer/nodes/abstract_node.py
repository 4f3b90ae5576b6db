from abc import ABC, abstractmethod


class Node(ABC):
    def __init__(self):
        ...

    @abstractmethod
    async def get_current_block_height(self):
        ...

    @abstractmethod
    async def get_block(self, header_hash: str):
        ...

    @abstractmethod
    async def get_block_record_by_height(self, height: int):
        ...

    @abstractmethod
    async def get_additions_and_removals(self, header_hash: str):
        ...

    @abstractmethod
    async def get_coin_info(self, parent_coin_info: str, puzzle_hash: str, amount: int) -> str:
        ...
