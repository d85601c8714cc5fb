#!/usr/bin/env python3
"""Tests for the web3 contract helpers (web3 is mocked, no node required)"""

import json
from unittest.mock import MagicMock

import pytest

from conftest import ALICE, ALICE_KEY, BOB, CHAIN_ID, TOKEN
from deployment_registry import DeploymentRegistry
from duck_contracts import (
    ContractId,
    TransactionFailedError,
    delegate_by_sig_args,
    deploy_duck,
    deploy_duck_minter,
    get_duck_token,
    get_nonce,
    load_artifact,
    permit_args,
    submit_delegate_by_sig,
    wait_for_tx,
)
from eip712_config import MAX_UINT256
from eip712_errors import ConfigurationError
from eip712_helpers import DomainLayout, get_signature_from_typed_data
from network_config import get_network_config
from typed_data_builder import build_delegate_params, build_permit_params

ABI = [{"type": "function", "name": "nonces", "inputs": [], "outputs": []}]
TX_HASH = b"\xab" * 32


@pytest.fixture
def artifacts_dir(tmp_path):
    for name in ("Duck", "DuckMinter"):
        artifact_dir = tmp_path / f"{name}.sol"
        artifact_dir.mkdir()
        (artifact_dir / f"{name}.json").write_text(json.dumps({"abi": ABI, "bytecode": "0x6080"}))
    return tmp_path


def mock_web3(receipt_status=1, contract_address=TOKEN):
    w3 = MagicMock()
    w3.eth.get_transaction_count.return_value = 4
    w3.eth.send_raw_transaction.return_value = TX_HASH
    w3.eth.wait_for_transaction_receipt.return_value = {
        "status": receipt_status,
        "contractAddress": contract_address,
        "from": ALICE,
        "transactionHash": TX_HASH,
        "gasUsed": 1234567,
    }
    factory = w3.eth.contract.return_value
    factory.constructor.return_value.build_transaction.return_value = {"gasPrice": 8000000000}
    return w3


def mock_deployer():
    deployer = MagicMock()
    deployer.address = ALICE
    deployer.sign_transaction.return_value.raw_transaction = b"signed"
    return deployer


def test_load_artifact(artifacts_dir):
    artifact = load_artifact("Duck", artifacts_dir)
    assert artifact["abi"] == ABI

    with pytest.raises(ConfigurationError):
        load_artifact("Goose", artifacts_dir)

    (artifacts_dir / "Duck.sol" / "Duck.json").write_text(json.dumps({"abi": ABI}))
    with pytest.raises(ConfigurationError):
        load_artifact("Duck", artifacts_dir)


def test_deploy_duck_records_address(tmp_path, artifacts_dir, capsys):
    w3 = mock_web3()
    deployer = mock_deployer()
    registry = DeploymentRegistry(tmp_path / "deployed-contracts.json")
    config = get_network_config("hardhat")

    deploy_duck(w3, deployer, config, registry=registry, artifacts_dir=artifacts_dir)

    w3.eth.contract.assert_any_call(abi=ABI, bytecode="0x6080")
    w3.eth.contract.assert_called_with(address=TOKEN, abi=ABI)
    tx_params = w3.eth.contract.return_value.constructor.return_value.build_transaction.call_args[0][0]
    assert tx_params == {"from": ALICE, "nonce": 4, "chainId": 31337}
    w3.eth.send_raw_transaction.assert_called_once_with(b"signed")
    assert registry.get(ContractId.Duck, "hardhat") == {"address": TOKEN, "deployer": ALICE}
    # no banner on local networks
    assert "***" not in capsys.readouterr().out


def test_deploy_prints_banner_on_remote_networks(tmp_path, artifacts_dir, capsys, monkeypatch):
    monkeypatch.setenv("INFURA_API_KEY", "key")
    w3 = mock_web3()
    registry = DeploymentRegistry(tmp_path / "deployed-contracts.json")
    config = get_network_config("rinkeby")

    deploy_duck_minter(w3, TOKEN, mock_deployer(), config, registry=registry, artifacts_dir=artifacts_dir)

    w3.eth.contract.return_value.constructor.assert_called_once_with(TOKEN)
    tx_params = w3.eth.contract.return_value.constructor.return_value.build_transaction.call_args[0][0]
    assert tx_params["gas"] == 2100000
    assert tx_params["gasPrice"] == 8000000000

    out = capsys.readouterr().out
    assert "*** DuckMinter ***" in out
    assert "Network: rinkeby" in out
    assert "gas used: 1234567" in out
    assert registry.get_address(ContractId.DuckMinter, "rinkeby") == TOKEN


def test_reverted_transaction_raises():
    w3 = mock_web3(receipt_status=0)
    with pytest.raises(TransactionFailedError):
        wait_for_tx(w3, TX_HASH)


def test_get_duck_token_from_registry(tmp_path, artifacts_dir):
    registry = DeploymentRegistry(tmp_path / "deployed-contracts.json")
    registry.set(ContractId.Duck, "kovan", TOKEN, ALICE)
    w3 = MagicMock()

    get_duck_token(w3, "kovan", registry=registry, artifacts_dir=artifacts_dir)
    w3.eth.contract.assert_called_once_with(address=TOKEN, abi=ABI)

    with pytest.raises(ConfigurationError):
        get_duck_token(w3, "mainnet", registry=registry, artifacts_dir=artifacts_dir)


def test_get_nonce():
    token = MagicMock()
    token.functions.nonces.return_value.call.return_value = 3
    assert get_nonce(token, ALICE.lower()) == 3
    token.functions.nonces.assert_called_once_with(ALICE)


def test_call_argument_tuples():
    delegate = build_delegate_params(CHAIN_ID, TOKEN, BOB, 0, 10_000_000_000)
    signature = get_signature_from_typed_data(ALICE_KEY, delegate, DomainLayout.FULL)
    assert delegate_by_sig_args(delegate, signature) == (
        BOB, 0, 10_000_000_000, signature.v, signature.r_bytes, signature.s_bytes,
    )

    permit = build_permit_params(CHAIN_ID, TOKEN, ALICE, BOB, 0, MAX_UINT256, 5)
    signature = get_signature_from_typed_data(ALICE_KEY, permit, DomainLayout.FULL)
    assert permit_args(permit, signature) == (
        ALICE, BOB, 5, MAX_UINT256, signature.v, signature.r_bytes, signature.s_bytes,
    )

    with pytest.raises(TypeError):
        permit_args(delegate, signature)
    with pytest.raises(TypeError):
        delegate_by_sig_args(permit, signature)


def test_submit_delegate_by_sig():
    w3 = mock_web3()
    token = MagicMock()
    sender = mock_deployer()
    typed = build_delegate_params(CHAIN_ID, TOKEN, BOB, 0, 10_000_000_000)
    signature = get_signature_from_typed_data(ALICE_KEY, typed, DomainLayout.FULL)

    receipt = submit_delegate_by_sig(w3, token, typed, signature, sender)

    token.functions.delegateBySig.assert_called_once_with(*delegate_by_sig_args(typed, signature))
    assert receipt["status"] == 1
