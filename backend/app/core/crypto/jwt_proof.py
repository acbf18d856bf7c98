"""
JWT Proof Encoder — Groth16 output → JwtVerifier call arguments.

Converts the snarkjs proof bundle and the circuit's public signals into the
EmailProof struct consumed by `JwtVerifier.verifyEmailProof`.

Public signal layout (defined by the JWT circuit, not by this service):
    [3]  publicKeyHash    → bytes32
    [4]  emailNullifier   → bytes32
    [5]  timestamp        → uint256 (kept as a decimal string)
    [26] accountSalt      → bytes32
    [30] isCodeExist      → bool (value == 1)

Proof layout:
    abi.encode(uint256[2] a, uint256[2][2] b, uint256[2] c)
    where each row of b has its two coordinates swapped, matching the
    Fp2 ordering expected by the EVM pairing precompile.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from eth_abi import encode

from app.schemas.zkp import JwtHeader, JwtPayload, Proof

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════════

PUBLIC_KEY_HASH_INDEX = 3
EMAIL_NULLIFIER_INDEX = 4
TIMESTAMP_INDEX = 5
ACCOUNT_SALT_INDEX = 26
IS_CODE_EXIST_INDEX = 30

MIN_PUBLIC_SIGNALS = IS_CODE_EXIST_INDEX + 1
DOMAIN_SEPARATOR = "|"
PROOF_ABI_TYPES = ["uint256[2]", "uint256[2][2]", "uint256[2]"]

_UINT256_MAX = 2 ** 256 - 1
_DECIMAL_RE = re.compile(r"[0-9]+")


class ProofFormatError(ValueError):
    """Raised when the proof bundle or public signals cannot be encoded."""
    pass


# ═══════════════════════════════════════════════════════════════════════════════
# DATA MODEL
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class JwtProof:
    """EmailProof struct argument for verifyEmailProof."""
    domainName: str
    publicKeyHash: str
    timestamp: str
    maskedCommand: str
    emailNullifier: str
    accountSalt: str
    isCodeExist: bool
    proof: bytes

    def to_contract_args(self) -> Tuple[Any, ...]:
        """Tuple in ABI component order; timestamp goes on-chain as uint256."""
        return (
            self.domainName,
            self.publicKeyHash,
            int(self.timestamp),
            self.maskedCommand,
            self.emailNullifier,
            self.accountSalt,
            self.isCodeExist,
            self.proof,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domainName": self.domainName,
            "publicKeyHash": self.publicKeyHash,
            "timestamp": self.timestamp,
            "maskedCommand": self.maskedCommand,
            "emailNullifier": self.emailNullifier,
            "accountSalt": self.accountSalt,
            "isCodeExist": self.isCodeExist,
            "proof": "0x" + self.proof.hex(),
        }


# ═══════════════════════════════════════════════════════════════════════════════
# FIELD CONVERSIONS
# ═══════════════════════════════════════════════════════════════════════════════

def _is_decimal(value: str) -> bool:
    return isinstance(value, str) and _DECIMAL_RE.fullmatch(value) is not None


def _parse_uint256(value: str, label: str) -> int:
    if not _is_decimal(value):
        raise ProofFormatError(f"{label} is not a decimal integer: {value!r}")
    n = int(value, 10)
    if n > _UINT256_MAX:
        raise ProofFormatError(f"{label} is outside the uint256 range: {value!r}")
    return n


def to_bytes32_hex(value: str, label: str = "value") -> str:
    """Decimal string → 0x-prefixed, zero-padded 64-char big-endian hex."""
    return "0x" + format(_parse_uint256(value, label), "064x")


def domain_name(kid: str, iss: str, azp: str) -> str:
    return DOMAIN_SEPARATOR.join((kid, iss, azp))


def is_code_exist(value: str) -> bool:
    return _is_decimal(value) and int(value, 10) == 1


def encode_proof(proof: Proof) -> bytes:
    """ABI-encode (a, b, c); only the first two entries of each array are used."""
    a = [_parse_uint256(v, f"pi_a[{i}]") for i, v in enumerate(proof.pi_a[:2])]
    b = [
        [
            _parse_uint256(proof.pi_b[row][1], f"pi_b[{row}][1]"),
            _parse_uint256(proof.pi_b[row][0], f"pi_b[{row}][0]"),
        ]
        for row in range(2)
    ]
    c = [_parse_uint256(v, f"pi_c[{i}]") for i, v in enumerate(proof.pi_c[:2])]
    return encode(PROOF_ABI_TYPES, [a, b, c])


# ═══════════════════════════════════════════════════════════════════════════════
# ASSEMBLY
# ═══════════════════════════════════════════════════════════════════════════════

def build_jwt_proof(
    pub_signals: Sequence[str],
    proof: Proof,
    header: JwtHeader,
    payload: JwtPayload,
) -> JwtProof:
    """
    Assemble the verifyEmailProof argument from a proof submission.

    Raises:
        ProofFormatError: If pub_signals is too short or a value used as a
            uint256 is not a non-negative decimal integer.
    """
    if len(pub_signals) < MIN_PUBLIC_SIGNALS:
        raise ProofFormatError(
            f"pub_signals must contain at least {MIN_PUBLIC_SIGNALS} entries, "
            f"got {len(pub_signals)}"
        )

    signals: List[str] = list(pub_signals)
    jwt_proof = JwtProof(
        domainName=domain_name(header.kid, payload.iss, payload.azp),
        publicKeyHash=to_bytes32_hex(
            signals[PUBLIC_KEY_HASH_INDEX], f"pub_signals[{PUBLIC_KEY_HASH_INDEX}]"
        ),
        timestamp=str(_parse_uint256(signals[TIMESTAMP_INDEX], f"pub_signals[{TIMESTAMP_INDEX}]")),
        maskedCommand=payload.nonce,
        emailNullifier=to_bytes32_hex(
            signals[EMAIL_NULLIFIER_INDEX], f"pub_signals[{EMAIL_NULLIFIER_INDEX}]"
        ),
        accountSalt=to_bytes32_hex(
            signals[ACCOUNT_SALT_INDEX], f"pub_signals[{ACCOUNT_SALT_INDEX}]"
        ),
        isCodeExist=is_code_exist(signals[IS_CODE_EXIST_INDEX]),
        proof=encode_proof(proof),
    )
    logger.info(f"[PROOF] Encoded JwtProof for domain {jwt_proof.domainName}")
    return jwt_proof
