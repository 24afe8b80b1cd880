import pytest

from nft_grid.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("RPC_URL", raising=False)
    monkeypatch.delenv("NFT_CONTRACT_ADDRESS", raising=False)


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("RPC_URL", "http://localhost:8545")
    monkeypatch.setenv("NFT_CONTRACT_ADDRESS", "0xabc")
    assert Settings.from_env() == Settings("http://localhost:8545", "0xabc")


def test_overrides_win(monkeypatch):
    monkeypatch.setenv("RPC_URL", "http://env")
    monkeypatch.setenv("NFT_CONTRACT_ADDRESS", "0xenv")
    s = Settings.from_env(rpc_url_override="http://cli", contract_override="0xcli")
    assert s == Settings("http://cli", "0xcli")


def test_missing_values_raise(monkeypatch):
    with pytest.raises(RuntimeError, match="RPC_URL"):
        Settings.from_env()
    monkeypatch.setenv("RPC_URL", "http://env")
    with pytest.raises(RuntimeError, match="NFT_CONTRACT_ADDRESS"):
        Settings.from_env()
