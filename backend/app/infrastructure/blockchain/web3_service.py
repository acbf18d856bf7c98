"""
JwtVerifier Service — Proof Relay to Base Sepolia.

Submits an encoded JwtProof to `JwtVerifier.verifyEmailProof` in three
sequential stages, each of which may suspend on network I/O:

    1. SIMULATION    — eth_call with the gas ceiling, then build the tx.
    2. SUBMISSION    — sign locally, broadcast through the write RPC.
    3. CONFIRMATION  — wait for the receipt; status 0 counts as a failure.

There is no retry. A failure in any stage raises BlockchainError tagged with
the stage, and CONFIRMATION failures carry the broadcast tx hash so callers
can tell "never submitted" apart from "submitted but unconfirmed".
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from eth_account import Account
from fastapi import Request
from web3 import AsyncHTTPProvider, AsyncWeb3

from app.core.config import Settings
from app.core.crypto.jwt_proof import JwtProof

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error occurred"


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════════

class SubmissionStage(str, Enum):
    SIMULATION = "SIMULATION"
    SUBMISSION = "SUBMISSION"
    CONFIRMATION = "CONFIRMATION"


class BlockchainError(Exception):
    """
    Raised when a stage of the relay pipeline fails.

    `str(error)` is the underlying error's message, unchanged. `tx_hash` is
    only set once the transaction has been broadcast.
    """

    def __init__(self, stage: SubmissionStage, reason: str, tx_hash: Optional[str] = None):
        self.stage = stage
        self.reason = reason
        self.tx_hash = tx_hash
        super().__init__(reason)


def _error_message(exc: BaseException) -> str:
    return str(exc) or UNKNOWN_ERROR


@dataclass(frozen=True)
class TransactionResult:
    tx_hash: str
    block_number: int


# ═══════════════════════════════════════════════════════════════════════════════
# SERVICE
# ═══════════════════════════════════════════════════════════════════════════════

def load_abi(path: str) -> List[Dict[str, Any]]:
    """Read the ABI from a Hardhat/Foundry artifact or a bare ABI list."""
    with open(path, "r") as f:
        artifact = json.load(f)
    return artifact["abi"] if isinstance(artifact, dict) else artifact


class JwtVerifierService:
    def __init__(
        self,
        w3: AsyncWeb3,
        write_w3: AsyncWeb3,
        account,
        contract_address: str,
        abi: List[Dict[str, Any]],
        chain_id: int,
        gas_limit: int = 1_000_000,
        receipt_timeout: float = 120.0,
        poll_latency: float = 0.1,
    ):
        self.w3 = w3
        self.write_w3 = write_w3
        self.account = account
        self.contract_address = AsyncWeb3.to_checksum_address(contract_address)
        self.contract = self.w3.eth.contract(address=self.contract_address, abi=abi)
        self.chain_id = chain_id
        self.gas_limit = gas_limit
        self.receipt_timeout = receipt_timeout
        self.poll_latency = poll_latency

    @classmethod
    def from_settings(cls, settings: Settings) -> "JwtVerifierService":
        w3 = AsyncWeb3(AsyncHTTPProvider(settings.RPC_URL))
        if settings.write_rpc_url == settings.RPC_URL:
            write_w3 = w3
        else:
            write_w3 = AsyncWeb3(AsyncHTTPProvider(settings.write_rpc_url))

        account = Account.from_key(settings.PRIVATE_KEY)
        logger.info(
            f"[CHAIN] Relayer {account.address} → JwtVerifier "
            f"{settings.JWT_VERIFIER_CONTRACT} (chain {settings.CHAIN_ID})"
        )
        return cls(
            w3=w3,
            write_w3=write_w3,
            account=account,
            contract_address=settings.JWT_VERIFIER_CONTRACT,
            abi=load_abi(settings.JWT_VERIFIER_ABI_PATH),
            chain_id=settings.CHAIN_ID,
            gas_limit=settings.GAS_LIMIT,
            receipt_timeout=settings.RECEIPT_TIMEOUT_SECONDS,
            poll_latency=settings.RECEIPT_POLL_SECONDS,
        )

    async def simulate(self, jwt_proof: JwtProof) -> Dict[str, Any]:
        """Dry-run verifyEmailProof and return a ready-to-sign transaction."""
        func = self.contract.functions.verifyEmailProof(jwt_proof.to_contract_args())
        params = {"from": self.account.address, "gas": self.gas_limit}
        try:
            await func.call(params)
            nonce = await self.w3.eth.get_transaction_count(self.account.address, "pending")
            tx = await func.build_transaction({
                **params,
                "nonce": nonce,
                "chainId": self.chain_id,
            })
        except Exception as e:
            logger.error(f"[CHAIN] Simulation failed: {e}")
            raise BlockchainError(SubmissionStage.SIMULATION, _error_message(e)) from e

        logger.info(f"[CHAIN] Simulation passed, nonce={tx.get('nonce')} gas={tx.get('gas')}")
        return tx

    async def submit(self, tx: Dict[str, Any]) -> str:
        """Sign and broadcast; returns as soon as the node accepts the tx."""
        try:
            signed_tx = self.account.sign_transaction(tx)
            tx_hash = await self.write_w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        except Exception as e:
            logger.error(f"[CHAIN] Broadcast failed: {e}")
            raise BlockchainError(SubmissionStage.SUBMISSION, _error_message(e)) from e

        tx_hash_hex = AsyncWeb3.to_hex(tx_hash)
        logger.info(f"[CHAIN] verifyEmailProof TX sent: {tx_hash_hex}")
        return tx_hash_hex

    async def confirm(self, tx_hash: str) -> TransactionResult:
        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self.receipt_timeout,
                poll_latency=self.poll_latency,
            )
        except Exception as e:
            logger.error(f"[CHAIN] No receipt for {tx_hash}: {e}")
            raise BlockchainError(
                SubmissionStage.CONFIRMATION, _error_message(e), tx_hash=tx_hash
            ) from e

        logger.info(f"[CHAIN] Receipt for {tx_hash}: block={receipt['blockNumber']} status={receipt['status']}")
        if receipt["status"] != 1:
            raise BlockchainError(
                SubmissionStage.CONFIRMATION, "Transaction reverted on-chain", tx_hash=tx_hash
            )

        return TransactionResult(
            tx_hash=tx_hash,
            block_number=int(receipt["blockNumber"]),
        )

    async def submit_proof(self, jwt_proof: JwtProof) -> TransactionResult:
        tx = await self.simulate(jwt_proof)
        tx_hash = await self.submit(tx)
        return await self.confirm(tx_hash)


# ── FastAPI dependency ─────────────────────────────────────────────────────────

def get_service(request: Request) -> JwtVerifierService:
    """Service built once in the app lifespan; read-only afterwards."""
    return request.app.state.verifier_service
