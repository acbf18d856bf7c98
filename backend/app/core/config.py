import os
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

_DEFAULT_ABI_PATH = os.path.join(
    os.path.dirname(__file__),
    "..",
    "infrastructure",
    "blockchain",
    "contracts",
    "JwtVerifier.json",
)


class Settings(BaseSettings):
    PROJECT_NAME: str = "ZK-JWT Relayer"

    # Deployment
    PORT: int = 8000
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Relayer wallet (hex, with or without 0x)
    PRIVATE_KEY: str

    # Base Sepolia
    RPC_URL: str = "https://sepolia.base.org"
    WRITE_RPC_URL: Optional[str] = None
    CHAIN_ID: int = 84532

    # JwtVerifier Contract
    JWT_VERIFIER_CONTRACT: str = "0x04Dd7D48dbe268A957A7aED7FA6206D833c6A3bF"
    JWT_VERIFIER_ABI_PATH: str = _DEFAULT_ABI_PATH
    GAS_LIMIT: int = 1_000_000
    RECEIPT_TIMEOUT_SECONDS: float = 120.0
    RECEIPT_POLL_SECONDS: float = 0.1

    class Config:
        case_sensitive = True
        env_file = ".env"

    @field_validator("PRIVATE_KEY")
    @classmethod
    def _normalize_private_key(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("PRIVATE_KEY environment variable is not set")
        return v if v.startswith("0x") else f"0x{v}"

    @property
    def write_rpc_url(self) -> str:
        return self.WRITE_RPC_URL or self.RPC_URL


settings = Settings()
