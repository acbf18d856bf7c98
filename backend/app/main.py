"""
ZK-JWT Relayer — Core API Entry Point.

Relays zero-knowledge JWT proofs to the JwtVerifier contract on Base Sepolia.

Submission Pipeline:
    1. Request validation (proof, pub_signals, header, payload)
    2. JwtProof encoding — bytes32 signals, pi_b swap, ABI-encoded proof
    3. eth_call simulation with a fixed gas ceiling
    4. Signed transaction broadcast
    5. Receipt wait → transaction hash + block number
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.proofs import method_not_allowed_handler, proofs_router
from app.core.config import settings
from app.infrastructure.blockchain.web3_service import JwtVerifierService

logger = logging.getLogger(__name__)

# --- Application boot timestamp for uptime tracking ---
_BOOT_TIME: float = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Clients and signer are built once and shared read-only across requests.
    if getattr(app.state, "verifier_service", None) is None:
        app.state.verifier_service = JwtVerifierService.from_settings(settings)
    logger.info("[MAIN] JwtVerifier relay ready")
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Relays ZK JWT proofs to the JwtVerifier contract",
    version="0.1.0",
    lifespan=lifespan,
)

# --- CORS Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(proofs_router)
app.add_exception_handler(StarletteHTTPException, method_not_allowed_handler)


# ═══════════════════════════════════════════════════════════════════════════════
# SYSTEM ENDPOINTS
# ═══════════════════════════════════════════════════════════════════════════════

@app.get("/", tags=["System"])
def root() -> dict:
    """Root endpoint — confirms the API process is alive."""
    return {"message": "ZK-JWT Relayer is operational", "status": "online"}


@app.get("/health", tags=["System"])
def health_check() -> dict:
    """
    Health check for uptime monitoring.

    Reports configuration only; it never calls the RPC endpoint so it stays
    fast when the chain is slow.
    """
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime_seconds": round(time.time() - _BOOT_TIME, 2),
        "chain_id": settings.CHAIN_ID,
        "contract": settings.JWT_VERIFIER_CONTRACT,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT, reload=True)
