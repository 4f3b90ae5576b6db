import asyncio
import ssl
from typing import Optional, Type

import aiohttp
from loguru import logger
from pydantic import BaseModel, ValidationError

from src.explorer.exceptions import (
    ExplorerError,
    InvalidAddress,
    InvalidNodeResponse,
    NodeUnavailable,
    NotFound,
    UpstreamError,
)
from src.explorer.nodes.abstract_node import Node
from src.explorer.nodes.chia.models import (
    AdditionsAndRemovalsResponse,
    BlockchainStateResponse,
    BlockRecordResponse,
    BlockResponse,
    BlocksResponse,
    CoinRecordResponse,
    CoinRecordsResponse,
    NetworkSpaceResponse,
    UnfinishedBlockHeadersResponse,
)
from src.explorer.nodes.chia.node_utils import (
    coin_name,
    decode_puzzle_hash,
    encode_puzzle_hash,
    ensure_hex_prefix,
)
from src.explorer.protocol import ADDRESS_PREFIX


class ChiaNode(Node):
    """
    Full node RPC gateway.

    Every RPC answer carries a ``success`` flag. A false flag on a record lookup
    becomes ``NotFound``, on anything else ``UpstreamError``. Transport failures
    become ``NodeUnavailable``. Payloads are validated before they leave the
    gateway.
    """

    def __init__(self,
                 rpc_url: str,
                 cert_path: Optional[str] = None,
                 key_path: Optional[str] = None,
                 ca_path: Optional[str] = None,
                 address_prefix: str = ADDRESS_PREFIX,
                 retry_delay: float = 5,
                 request_timeout: int = 30):
        super().__init__()
        self.rpc_url = rpc_url.rstrip('/')
        self.cert_path = cert_path
        self.key_path = key_path
        self.ca_path = ca_path
        self.address_prefix = address_prefix
        self.retry_delay = retry_delay
        self.request_timeout = request_timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self._connect_task: Optional[asyncio.Task] = None
        self._connected = asyncio.Event()

    @classmethod
    def from_settings(cls, settings):
        return cls(
            rpc_url=settings.FULL_NODE_RPC_URL,
            cert_path=settings.FULL_NODE_CERT_PATH,
            key_path=settings.FULL_NODE_KEY_PATH,
            ca_path=settings.FULL_NODE_CA_PATH,
            address_prefix=settings.ADDRESS_PREFIX,
            retry_delay=settings.FULL_NODE_RETRY_DELAY,
            request_timeout=settings.FULL_NODE_REQUEST_TIMEOUT,
        )

    # connection lifecycle

    def _create_ssl_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context(cafile=self.ca_path)
        if self.ca_path is None:
            # node certificates are signed by a private CA
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        if self.cert_path and self.key_path:
            context.load_cert_chain(self.cert_path, self.key_path)
        return context

    def _open_session(self) -> aiohttp.ClientSession:
        connector = aiohttp.TCPConnector(ssl=self._create_ssl_context())
        return aiohttp.ClientSession(connector=connector)

    async def connect(self) -> None:
        session = self._open_session()
        self._session = session
        try:
            await self.get_blockchain_state()
        except ExplorerError:
            self._session = None
            await session.close()
            raise
        self._connected.set()
        logger.info("Connected to full node", rpc_url=self.rpc_url)

    async def connect_forever(self) -> None:
        while not self._connected.is_set():
            try:
                await self.connect()
            except (ExplorerError, OSError, ssl.SSLError) as e:
                logger.error("Unable to connect to full node!", rpc_url=self.rpc_url, error=str(e))
                await asyncio.sleep(self.retry_delay)

    def start(self) -> asyncio.Task:
        if self._connect_task is None or self._connect_task.done():
            self._connect_task = asyncio.create_task(self.connect_forever())
        return self._connect_task

    async def wait_connected(self) -> None:
        await self._connected.wait()

    @property
    def is_connected(self) -> bool:
        return self._connected.is_set()

    async def close(self) -> None:
        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()
            try:
                await self._connect_task
            except asyncio.CancelledError:
                pass
        self._connect_task = None
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
        self._connected.clear()

    # rpc plumbing

    async def _call(self, endpoint: str, payload: Optional[dict] = None) -> dict:
        if self._session is None:
            raise NodeUnavailable("Full node connection is not established")
        try:
            async with self._session.post(
                    f"{self.rpc_url}/{endpoint}",
                    json=payload or {},
                    timeout=aiohttp.ClientTimeout(total=self.request_timeout)
            ) as response:
                if response.status != 200:
                    raise UpstreamError(f"{endpoint} returned HTTP {response.status}")
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NodeUnavailable(str(e) or "Connection refused") from e

    async def _request(self, endpoint: str, payload: Optional[dict], model: Type[BaseModel],
                       failure: Type[ExplorerError] = NotFound):
        data = await self._call(endpoint, payload)
        if not isinstance(data, dict):
            raise InvalidNodeResponse(f"{endpoint} returned a non-object payload")
        if not data.get('success'):
            raise failure(data.get('error') or "")
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error("Malformed full node response", endpoint=endpoint, error=str(e))
            raise InvalidNodeResponse(f"Malformed {endpoint} response") from e

    # queries

    async def get_blockchain_state(self) -> BlockchainStateResponse:
        return await self._request('get_blockchain_state', {}, BlockchainStateResponse, UpstreamError)

    async def get_current_block_height(self) -> int:
        state = await self.get_blockchain_state()
        if state.blockchain_state.peak is None:
            return 0
        return state.blockchain_state.peak.height

    async def get_blocks(self, start_height: int, end_height: int) -> BlocksResponse:
        blocks = await self._request('get_blocks', {'start': start_height, 'end': end_height}, BlocksResponse)
        for block in blocks.blocks:
            block.header_hash = ensure_hex_prefix(block.header_hash or "")
        return blocks

    async def get_block(self, header_hash: str) -> BlockResponse:
        return await self._request('get_block', {'header_hash': header_hash}, BlockResponse)

    async def get_block_record_by_height(self, height: int) -> BlockRecordResponse:
        return await self._request('get_block_record_by_height', {'height': height}, BlockRecordResponse)

    async def get_block_record(self, header_hash: str) -> BlockRecordResponse:
        return await self._request('get_block_record', {'header_hash': header_hash}, BlockRecordResponse)

    async def get_unfinished_block_headers(self, height: int) -> UnfinishedBlockHeadersResponse:
        return await self._request('get_unfinished_block_headers', {'height': height},
                                   UnfinishedBlockHeadersResponse)

    async def get_unspent_coins(self, puzzle_hash: str) -> CoinRecordsResponse:
        return await self._request('get_coin_records_by_puzzle_hash',
                                   {'puzzle_hash': puzzle_hash, 'include_spent_coins': False},
                                   CoinRecordsResponse)

    async def get_coin_record_by_name(self, name: str) -> CoinRecordResponse:
        return await self._request('get_coin_record_by_name', {'name': name}, CoinRecordResponse)

    async def get_additions_and_removals(self, header_hash: str) -> AdditionsAndRemovalsResponse:
        return await self._request('get_additions_and_removals', {'header_hash': header_hash},
                                   AdditionsAndRemovalsResponse)

    async def get_network_space(self, newer_block_header_hash: str, older_block_header_hash: str) -> NetworkSpaceResponse:
        return await self._request('get_network_space',
                                   {'newer_block_header_hash': newer_block_header_hash,
                                    'older_block_header_hash': older_block_header_hash},
                                   NetworkSpaceResponse, UpstreamError)

    # local conversions

    async def puzzle_hash_to_address(self, puzzle_hash: str) -> str:
        try:
            return encode_puzzle_hash(puzzle_hash, self.address_prefix)
        except ValueError as e:
            raise InvalidAddress(f"Invalid puzzle hash: {puzzle_hash}") from e

    async def address_to_puzzle_hash(self, address: str) -> str:
        try:
            puzzle_hash = decode_puzzle_hash(address)
        except ValueError as e:
            raise InvalidAddress(str(e)) from e
        if len(puzzle_hash) == 0:
            raise InvalidAddress("Empty hash")
        return ensure_hex_prefix(puzzle_hash.hex())

    async def get_coin_info(self, parent_coin_info: str, puzzle_hash: str, amount: int) -> str:
        try:
            result = coin_name(parent_coin_info, puzzle_hash, amount)
        except ValueError as e:
            raise NotFound(f"Unable to resolve coin of parent {parent_coin_info}") from e
        if not result:
            raise NodeUnavailable("Connection refused")
        return result
