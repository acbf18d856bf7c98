import base64
import json

import pytest

from scripts.submit_proof import build_request_body, decode_jwt_claims


def _segment(obj):
    return base64.urlsafe_b64encode(json.dumps(obj).encode()).decode().rstrip("=")


def test_decode_jwt_claims_splits_header_and_payload():
    header = {"alg": "RS256", "kid": "abc"}
    payload = {"iss": "def", "azp": "ghi", "nonce": "cmd"}
    token = f"{_segment(header)}.{_segment(payload)}.sig"
    assert decode_jwt_claims(token) == (header, payload)


def test_decode_jwt_claims_rejects_bad_token():
    with pytest.raises(ValueError):
        decode_jwt_claims("only.two")


def test_build_request_body_shape():
    token = f"{_segment({'kid': 'k'})}.{_segment({'nonce': 'n'})}.s"
    body = build_request_body({"pi_a": []}, ["1"], token)
    assert set(body) == {"proof", "pub_signals", "header", "payload"}
    assert body["header"] == {"kid": "k"}
