from typing import Annotated, Any, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict

from src.explorer.nodes.chia.node_utils import ensure_hex_prefix

HexHash = Annotated[str, AfterValidator(ensure_hex_prefix)]


class NodeModel(BaseModel):
    model_config = ConfigDict(extra='allow')


class NodeResponse(NodeModel):
    success: bool = False
    error: Optional[str] = None


class Coin(NodeModel):
    parent_coin_info: HexHash
    puzzle_hash: HexHash
    amount: int


class CoinRecord(NodeModel):
    coin: Coin
    confirmed_block_index: int
    spent_block_index: int = 0
    spent: bool = False
    coinbase: bool = False
    timestamp: int = 0


class BlockRecord(NodeModel):
    header_hash: HexHash
    height: int
    prev_hash: Optional[HexHash] = None


class RewardChainBlock(NodeModel):
    height: int
    is_transaction_block: bool = False


class FullBlock(NodeModel):
    reward_chain_block: RewardChainBlock
    transactions_info: Optional[Dict[str, Any]] = None
    header_hash: Optional[HexHash] = None


class Peak(NodeModel):
    height: int
    header_hash: Optional[HexHash] = None


class BlockchainState(NodeModel):
    peak: Optional[Peak] = None


class BlockchainStateResponse(NodeResponse):
    blockchain_state: BlockchainState


class BlocksResponse(NodeResponse):
    blocks: List[FullBlock] = []


class BlockResponse(NodeResponse):
    block: FullBlock


class BlockRecordResponse(NodeResponse):
    block_record: BlockRecord


class UnfinishedBlockHeadersResponse(NodeResponse):
    headers: List[Dict[str, Any]] = []


class CoinRecordsResponse(NodeResponse):
    coin_records: List[CoinRecord] = []


class CoinRecordResponse(NodeResponse):
    coin_record: CoinRecord


class AdditionsAndRemovalsResponse(NodeResponse):
    additions: List[CoinRecord] = []
    removals: List[CoinRecord] = []


class NetworkSpaceResponse(NodeResponse):
    space: int
