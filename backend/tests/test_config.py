import pytest
from pydantic import ValidationError

from app.core.config import Settings

KEY = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


def test_private_key_gets_0x_prefix():
    assert Settings(_env_file=None, PRIVATE_KEY=KEY).PRIVATE_KEY == "0x" + KEY
    assert Settings(_env_file=None, PRIVATE_KEY="0x" + KEY).PRIVATE_KEY == "0x" + KEY


def test_missing_private_key_fails(monkeypatch):
    monkeypatch.delenv("PRIVATE_KEY", raising=False)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_blank_private_key_fails():
    with pytest.raises(ValidationError, match="PRIVATE_KEY"):
        Settings(_env_file=None, PRIVATE_KEY="   ")


def test_write_rpc_defaults_to_read_rpc():
    s = Settings(_env_file=None, PRIVATE_KEY=KEY, RPC_URL="http://127.0.0.1:8545")
    assert s.write_rpc_url == "http://127.0.0.1:8545"
    s = Settings(_env_file=None, PRIVATE_KEY=KEY, WRITE_RPC_URL="http://relay:8545")
    assert s.write_rpc_url == "http://relay:8545"


def test_base_sepolia_defaults():
    s = Settings(_env_file=None, PRIVATE_KEY=KEY)
    assert s.CHAIN_ID == 84532
    assert s.GAS_LIMIT == 1_000_000
    assert s.JWT_VERIFIER_CONTRACT == "0x04Dd7D48dbe268A957A7aED7FA6206D833c6A3bF"
