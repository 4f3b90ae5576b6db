import os
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict


def load_environment(env: str):
    if env == 'mainnet':
        dotenv_path = os.path.abspath('../env/.env.explorer.mainnet')
    elif env == 'testnet':
        dotenv_path = os.path.abspath('../env/.env.explorer.testnet')
    else:
        raise ValueError(f"Unknown environment: {env}")

    if os.path.exists(dotenv_path):
        load_dotenv(dotenv_path=dotenv_path)
    else:
        load_dotenv()


class ExplorerSettings(BaseSettings):
    FULL_NODE_RPC_URL: str = 'https://localhost:8555'
    FULL_NODE_CERT_PATH: str
    FULL_NODE_KEY_PATH: str
    FULL_NODE_CA_PATH: Optional[str] = None
    FULL_NODE_RETRY_DELAY: float = 5
    FULL_NODE_REQUEST_TIMEOUT: int = 30

    ADDRESS_PREFIX: str = 'cgn'

    DATABASE_URL: str

    PORT: int = 8000
    LOG_PATH: str = '../logs/explorer.log'

    model_config = SettingsConfigDict(
        extra='ignore',
        frozen=True
    )
