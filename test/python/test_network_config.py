#!/usr/bin/env python3
"""Tests for network configuration and .env loading"""

import os

import pytest

from conftest import ALICE, BOB
from eip712_errors import ConfigurationError
from network_config import (
    CHAIN_IDS,
    LOCAL_RPC_URL,
    NetworkConfig,
    create_testnet_config,
    get_accounts,
    get_network_config,
    load_env,
)


def test_testnet_config_uses_infura(monkeypatch):
    monkeypatch.setenv("INFURA_API_KEY", "abc123")
    monkeypatch.setenv("MNEMONIC", "word " * 11 + "word")
    config = create_testnet_config("kovan")
    assert config.chain_id == 42
    assert config.url == "https://kovan.infura.io/v3/abc123"
    assert config.path == "m/44'/60'/0'/0"
    assert config.count == 10
    assert not config.is_local


def test_rinkeby_carries_gas_settings(monkeypatch):
    monkeypatch.setenv("INFURA_API_KEY", "")
    config = get_network_config("rinkeby")
    assert config.chain_id == CHAIN_IDS["rinkeby"]
    assert config.gas == 2100000
    assert config.gas_price == 8000000000


def test_hardhat_is_local():
    config = get_network_config("hardhat")
    assert config.chain_id == 31337
    assert config.url == LOCAL_RPC_URL
    assert config.is_local


def test_unknown_network():
    with pytest.raises(ConfigurationError):
        get_network_config("sepolia-typo")
    with pytest.raises(ConfigurationError):
        create_testnet_config("nowhere")


def test_hardhat_accounts_derive_from_mnemonic():
    accounts = get_accounts(get_network_config("hardhat"))
    assert len(accounts) == 10
    assert accounts[0].address == ALICE
    assert accounts[1].address == BOB


def test_missing_mnemonic(monkeypatch):
    monkeypatch.delenv("MNEMONIC", raising=False)
    config = NetworkConfig(name="kovan", chain_id=42, url="https://kovan.infura.io/v3/")
    with pytest.raises(ConfigurationError):
        get_accounts(config)


def test_load_env_reads_dotenv_file(tmp_path, monkeypatch):
    monkeypatch.delenv("INFURA_API_KEY", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("INFURA_API_KEY=from-dotenv\n")

    assert load_env(env_file)
    assert create_testnet_config("goerli").url.endswith("/from-dotenv")
    os.environ.pop("INFURA_API_KEY", None)
