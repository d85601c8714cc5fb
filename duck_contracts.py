#!/usr/bin/env python3
"""
Contract helpers for Duck deployments: artifact loading, deploy + registry
bookkeeping, and the argument tuples delegateBySig / permit expect
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from web3 import Web3

from deployment_registry import DeploymentRegistry
from eip712_errors import ConfigurationError
from eip712_helpers import Signature
from network_config import LOCAL_NETWORKS, PROJECT_ROOT, NetworkConfig
from typed_data_builder import Delegate, Permit, TypedMessage

ARTIFACTS_DIR = PROJECT_ROOT / "artifacts" / "contracts"


class ContractId(str, Enum):
    Duck = "Duck"
    DuckMinter = "DuckMinter"


class TransactionFailedError(RuntimeError):
    """A mined transaction came back with status 0"""


def load_artifact(contract_name: str, artifacts_dir: Union[str, Path] = ARTIFACTS_DIR) -> Dict[str, Any]:
    """Load a Hardhat artifact (artifacts/contracts/<Name>.sol/<Name>.json)"""
    artifact_path = Path(artifacts_dir) / f"{contract_name}.sol" / f"{contract_name}.json"
    if not artifact_path.exists():
        raise ConfigurationError(f"Artifact not found: {artifact_path}")
    with open(artifact_path, 'r') as f:
        artifact = json.load(f)
    if "abi" not in artifact or "bytecode" not in artifact:
        raise ConfigurationError(f"Artifact {artifact_path} is missing abi or bytecode")
    return artifact


def get_web3(config: NetworkConfig) -> Web3:
    return Web3(Web3.HTTPProvider(config.url))


def wait_for_tx(w3: Web3, tx_hash, timeout: int = 120):
    receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
    if receipt['status'] != 1:
        raise TransactionFailedError(f"Transaction {Web3.to_hex(tx_hash)} reverted")
    return receipt


def send_transaction(w3: Web3, tx: Dict[str, Any], account):
    """Sign locally and broadcast; returns the mined receipt"""
    signed_tx = account.sign_transaction(tx)
    tx_hash = w3.eth.send_raw_transaction(signed_tx.raw_transaction)
    return wait_for_tx(w3, tx_hash)


def get_contract(w3: Web3, contract_name: str, address: str, artifacts_dir: Union[str, Path] = ARTIFACTS_DIR):
    artifact = load_artifact(contract_name, artifacts_dir)
    return w3.eth.contract(address=Web3.to_checksum_address(address), abi=artifact["abi"])


def get_duck_token(
    w3: Web3,
    network: str,
    address: Optional[str] = None,
    registry: Optional[DeploymentRegistry] = None,
    artifacts_dir: Union[str, Path] = ARTIFACTS_DIR,
):
    """Duck at `address`, or at the address recorded for `network`"""
    if address is None:
        address = (registry or DeploymentRegistry()).get_address(ContractId.Duck, network)
    return get_contract(w3, ContractId.Duck.value, address, artifacts_dir)


def register_contract_in_json_db(
    contract_id: ContractId,
    network: str,
    address: str,
    receipt,
    tx: Dict[str, Any],
    registry: Optional[DeploymentRegistry] = None,
) -> Dict[str, str]:
    deployer = receipt['from']
    if network not in LOCAL_NETWORKS:
        print(f"\n\t  *** {contract_id.value} ***\n")
        print(f"\t  Network: {network}")
        print(f"\t  tx: {Web3.to_hex(receipt['transactionHash'])}")
        print(f"\t  contract address: {address}")
        print(f"\t  deployer address: {deployer}")
        print(f"\t  gas price: {tx.get('gasPrice', tx.get('maxFeePerGas'))}")
        print(f"\t  gas used: {receipt['gasUsed']}")
        print(f"\t  ******")

    return (registry or DeploymentRegistry()).set(contract_id, network, address, deployer)


def deploy_contract(
    w3: Web3,
    contract_id: ContractId,
    args: Sequence[Any],
    deployer,
    config: NetworkConfig,
    registry: Optional[DeploymentRegistry] = None,
    artifacts_dir: Union[str, Path] = ARTIFACTS_DIR,
):
    """Deploy, wait for the receipt, record the address and return the contract"""
    artifact = load_artifact(contract_id.value, artifacts_dir)
    factory = w3.eth.contract(abi=artifact["abi"], bytecode=artifact["bytecode"])

    tx_params: Dict[str, Any] = {
        'from': deployer.address,
        'nonce': w3.eth.get_transaction_count(deployer.address),
        'chainId': config.chain_id,
    }
    if config.gas is not None:
        tx_params['gas'] = config.gas
    if config.gas_price is not None:
        tx_params['gasPrice'] = config.gas_price

    tx = factory.constructor(*args).build_transaction(tx_params)
    receipt = send_transaction(w3, tx, deployer)
    address = receipt['contractAddress']
    register_contract_in_json_db(contract_id, config.name, address, receipt, tx, registry)
    return w3.eth.contract(address=address, abi=artifact["abi"])


def deploy_duck(w3: Web3, deployer, config: NetworkConfig, args: Sequence[Any] = (), **kwargs):
    return deploy_contract(w3, ContractId.Duck, list(args), deployer, config, **kwargs)


def deploy_duck_minter(w3: Web3, duck_address: str, deployer, config: NetworkConfig, **kwargs):
    return deploy_contract(
        w3, ContractId.DuckMinter, [Web3.to_checksum_address(duck_address)], deployer, config, **kwargs
    )


def get_nonce(token, owner: str) -> int:
    """Current signature nonce; read it before building a Delegate or Permit"""
    return token.functions.nonces(Web3.to_checksum_address(owner)).call()


def delegate_by_sig_args(typed_message: TypedMessage, signature: Signature) -> Tuple[str, int, int, int, bytes, bytes]:
    message = typed_message.message
    if not isinstance(message, Delegate):
        raise TypeError(f"Expected a Delegate message, got {typed_message.primary_type}")
    return (message.delegatee, message.nonce, message.expiry, signature.v, signature.r_bytes, signature.s_bytes)


def permit_args(typed_message: TypedMessage, signature: Signature) -> Tuple[str, str, int, int, int, bytes, bytes]:
    message = typed_message.message
    if not isinstance(message, Permit):
        raise TypeError(f"Expected a Permit message, got {typed_message.primary_type}")
    return (
        message.owner,
        message.spender,
        message.value,
        message.deadline,
        signature.v,
        signature.r_bytes,
        signature.s_bytes,
    )


def submit_delegate_by_sig(w3: Web3, token, typed_message: TypedMessage, signature: Signature, sender):
    """Relay a signed delegation; any account can pay for it"""
    tx = token.functions.delegateBySig(*delegate_by_sig_args(typed_message, signature)).build_transaction({
        'from': sender.address,
        'nonce': w3.eth.get_transaction_count(sender.address),
    })
    return send_transaction(w3, tx, sender)


def submit_permit(w3: Web3, token, typed_message: TypedMessage, signature: Signature, sender):
    tx = token.functions.permit(*permit_args(typed_message, signature)).build_transaction({
        'from': sender.address,
        'nonce': w3.eth.get_transaction_count(sender.address),
    })
    return send_transaction(w3, tx, sender)
