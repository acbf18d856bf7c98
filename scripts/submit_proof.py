"""
Submit Proof — CLI client for the ZK-JWT Relayer.

Reads snarkjs output (proof.json, public.json) and the JWT the proof was
generated from, then POSTs them to /api/submitProofToContract.

Usage:
    python scripts/submit_proof.py --proof proof.json --public public.json --jwt "$JWT"
    python scripts/submit_proof.py --proof proof.json --public public.json \
        --jwt-file token.txt --url http://localhost:8000
"""

import argparse
import asyncio
import base64
import json
import sys
from pathlib import Path
from typing import Any, Dict, Tuple

import aiohttp

SUBMIT_PATH = "/api/submitProofToContract"


def _b64url_json(segment: str) -> Dict[str, Any]:
    padded = segment + "=" * (-len(segment) % 4)
    return json.loads(base64.urlsafe_b64decode(padded.encode()))


def decode_jwt_claims(token: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Split a JWT into (header, payload). The signature is not checked."""
    parts = token.strip().split(".")
    if len(parts) != 3:
        raise ValueError("JWT must have three dot-separated segments")
    return _b64url_json(parts[0]), _b64url_json(parts[1])


def build_request_body(proof: Dict[str, Any], pub_signals: list, token: str) -> Dict[str, Any]:
    header, payload = decode_jwt_claims(token)
    return {
        "proof": proof,
        "pub_signals": pub_signals,
        "header": header,
        "payload": payload,
    }


async def submit(url: str, body: Dict[str, Any]) -> int:
    async with aiohttp.ClientSession() as session:
        async with session.post(url.rstrip("/") + SUBMIT_PATH, json=body) as resp:
            text = await resp.text()
            print(f"Status: {resp.status}")
            try:
                print(json.dumps(json.loads(text), indent=2))
            except json.JSONDecodeError:
                print(text)
            return 0 if resp.status == 200 else 1


def main() -> int:
    parser = argparse.ArgumentParser(description="Submit a ZK JWT proof to the relayer")
    parser.add_argument("--proof", required=True, type=Path, help="snarkjs proof.json")
    parser.add_argument("--public", required=True, type=Path, help="snarkjs public.json")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--jwt", help="JWT string the proof was generated from")
    group.add_argument("--jwt-file", type=Path, help="File containing the JWT")
    parser.add_argument("--url", default="http://localhost:8000", help="Relayer base URL")
    args = parser.parse_args()

    token = args.jwt if args.jwt is not None else args.jwt_file.read_text()
    body = build_request_body(
        json.loads(args.proof.read_text()),
        json.loads(args.public.read_text()),
        token,
    )
    return asyncio.run(submit(args.url, body))


if __name__ == "__main__":
    sys.exit(main())
