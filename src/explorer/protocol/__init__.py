from datetime import datetime, timezone
from string import hexdigits
from typing import Optional

from pydantic import BaseModel, Field, field_validator

HASH_PREFIX = "0x"
ADDRESS_PREFIX = "cgn"

# Placeholder sender of reward transactions, never tracked in the address directory
UNKNOWN_SENDER = " "


class CoinReference(BaseModel):
    parent_coin_info: str
    puzzle_hash: str
    amount: int

    @field_validator("parent_coin_info", "puzzle_hash")
    @classmethod
    def check_hash(cls, value: str) -> str:
        digits = value[2:] if value[:2] == HASH_PREFIX else value
        if len(digits) != 64 or any(c not in hexdigits for c in digits):
            raise ValueError("expected a 32 byte hex hash")
        return HASH_PREFIX + digits.lower()


class TransactionCreate(BaseModel):
    transaction_id: str
    created_at: datetime
    confirmation_block: int = Field(ge=0)
    amount: int
    confirmations_number: int = 0
    sender: str = UNKNOWN_SENDER
    receiver: str
    input: Optional[CoinReference] = None

    @field_validator("created_at")
    @classmethod
    def to_naive_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
