import os

# Settings are read at import time; a throwaway key lets the app module load.
os.environ.setdefault(
    "PRIVATE_KEY", "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
)

import pytest
from fastapi.testclient import TestClient

from app.core.crypto.jwt_proof import build_jwt_proof
from app.infrastructure.blockchain.web3_service import TransactionResult, get_service
from app.main import app
from app.schemas.zkp import ProofSubmission

SUBMIT_URL = "/api/submitProofToContract"


class FakeVerifierService:
    """Stands in for JwtVerifierService; `errors` are raised per call in order."""

    def __init__(self, errors=None):
        self.errors = list(errors or [])
        self.submitted = []

    async def submit_proof(self, jwt_proof):
        self.submitted.append(jwt_proof)
        if self.errors:
            err = self.errors.pop(0)
            if err is not None:
                raise err
        n = len(self.submitted)
        return TransactionResult(
            tx_hash="0x" + format(0xBEEF0000 + n, "064x"),
            block_number=2 ** 53 + n,
        )


@pytest.fixture
def valid_body():
    pub_signals = [str(1000 + i) for i in range(31)]
    pub_signals[3] = "255"
    pub_signals[4] = "4096"
    pub_signals[5] = "1718000000"
    pub_signals[26] = "123456789"
    pub_signals[30] = "1"
    return {
        "proof": {
            "pi_a": ["11", "12", "1"],
            "pi_b": [["21", "22"], ["23", "24"], ["1", "0"]],
            "pi_c": ["31", "32", "1"],
            "protocol": "groth16",
            "curve": "bn128",
        },
        "pub_signals": pub_signals,
        "header": {"alg": "RS256", "kid": "abc", "typ": "JWT"},
        "payload": {"iss": "def", "azp": "ghi", "nonce": "Send 0.1 ETH to 0x00"},
    }


@pytest.fixture
def jwt_proof(valid_body):
    submission = ProofSubmission.model_validate(valid_body)
    return build_jwt_proof(
        submission.pub_signals, submission.proof, submission.header, submission.payload
    )


@pytest.fixture
def fake_service():
    return FakeVerifierService()


@pytest.fixture
def client(fake_service):
    app.dependency_overrides[get_service] = lambda: fake_service
    yield TestClient(app)
    app.dependency_overrides.clear()
