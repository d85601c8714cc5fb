#!/usr/bin/env python3
"""
Network configuration for Duck deployments

Values come from the environment (a .env file at the project root is loaded
with python-dotenv): MNEMONIC and INFURA_API_KEY.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from dotenv import load_dotenv
from eth_account import Account

from eip712_errors import ConfigurationError

PROJECT_ROOT = Path(__file__).resolve().parent

CHAIN_IDS = {
    "ganache": 1337,
    "goerli": 5,
    "hardhat": 31337,
    "kovan": 42,
    "mainnet": 1,
    "matic": 137,
    "rinkeby": 4,
    "ropsten": 3,
}

# Deployments on these networks skip the console banner
LOCAL_NETWORKS = ("hardhat", "coverage")

DEFAULT_HD_PATH = "m/44'/60'/0'/0"
LOCAL_RPC_URL = "http://127.0.0.1:8545"
MATIC_RPC_URL = "https://rpc-mainnet.maticvigil.com/v1/476abba7bd6ae0c950a9880685600bace7e89ee9"
HARDHAT_MNEMONIC = "test test test test test test test test test test test junk"


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    chain_id: int
    url: str
    mnemonic: str = ""
    path: str = DEFAULT_HD_PATH
    count: int = 10
    initial_index: int = 0
    gas: Optional[int] = None
    gas_price: Optional[int] = None

    @property
    def is_local(self) -> bool:
        return self.name in LOCAL_NETWORKS


def load_env(path: Optional[Union[str, Path]] = None) -> bool:
    """Load .env into os.environ without overriding values already set"""
    return load_dotenv(dotenv_path=path or PROJECT_ROOT / ".env")


def create_testnet_config(network: str) -> NetworkConfig:
    if network not in CHAIN_IDS:
        raise ConfigurationError(f"Unknown network: {network}")
    infura_api_key = os.getenv("INFURA_API_KEY", "")
    return NetworkConfig(
        name=network,
        chain_id=CHAIN_IDS[network],
        url=f"https://{network}.infura.io/v3/{infura_api_key}",
        mnemonic=os.getenv("MNEMONIC", ""),
    )


def get_network_config(name: str) -> NetworkConfig:
    if name == "hardhat":
        return NetworkConfig(name=name, chain_id=CHAIN_IDS[name], url=LOCAL_RPC_URL, mnemonic=HARDHAT_MNEMONIC)
    if name == "matic":
        return NetworkConfig(
            name=name, chain_id=CHAIN_IDS[name], url=MATIC_RPC_URL, mnemonic=os.getenv("MNEMONIC", "")
        )
    if name == "rinkeby":
        base = create_testnet_config(name)
        return NetworkConfig(
            name=base.name,
            chain_id=base.chain_id,
            url=base.url,
            mnemonic=base.mnemonic,
            gas=2100000,
            gas_price=8000000000,
        )
    if name in ("goerli", "kovan", "mainnet", "ropsten"):
        return create_testnet_config(name)
    raise ConfigurationError(f"Unknown network: {name}")


def get_accounts(config: NetworkConfig) -> List:
    """Derive the configured HD accounts (m/44'/60'/0'/0/i)"""
    if not config.mnemonic:
        raise ConfigurationError(f"MNEMONIC is not set for network {config.name}")
    Account.enable_unaudited_hdwallet_features()
    return [
        Account.from_mnemonic(config.mnemonic, account_path=f"{config.path}/{index}")
        for index in range(config.initial_index, config.initial_index + config.count)
    ]
