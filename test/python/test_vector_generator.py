#!/usr/bin/env python3
"""Tests for the Duck signature vector generator"""

import json

import pytest
from eth_account.messages import encode_typed_data
from eth_utils import keccak

from conftest import ALICE, BOB, CHARLIE
from eip712_helpers import DomainLayout, Signature, recover_signer
from vector_generator import generate_vectors, main


def test_vectors_recover_to_their_signers():
    vectors = generate_vectors()
    assert len(vectors["delegate"]) == 3
    assert len(vectors["permit"]) == 3

    for vector in vectors["delegate"] + vectors["permit"]:
        digest = bytes.fromhex(vector["digest"][2:])
        signature = Signature.from_rpc_sig(vector["signature"]["signature"])
        assert recover_signer(digest, signature) == vector["signer"]


def test_each_actor_targets_the_next_one():
    vectors = generate_vectors()
    delegatees = [v["typed_data"]["message"]["delegatee"] for v in vectors["delegate"]]
    assert [v["signer"] for v in vectors["delegate"]] == [ALICE, BOB, CHARLIE]
    assert delegatees == [BOB, CHARLIE, ALICE]


def test_layout_changes_every_digest():
    full = generate_vectors(layout=DomainLayout.FULL)
    legacy = generate_vectors(layout=DomainLayout.LEGACY)
    for kind in ("delegate", "permit"):
        for a, b in zip(full[kind], legacy[kind]):
            assert a["digest"] != b["digest"]
            assert b["layout"] == "legacy"


@pytest.mark.parametrize("layout", list(DomainLayout))
def test_typed_data_reproduces_recorded_hashes(layout):
    vectors = generate_vectors(layout=layout)
    for vector in vectors["delegate"] + vectors["permit"]:
        signable = encode_typed_data(full_message=vector["typed_data"])
        digest = keccak(b"\x19" + signable.version + signable.header + signable.body)
        assert "0x" + bytes(signable.header).hex() == vector["domain_separator"]
        assert "0x" + digest.hex() == vector["digest"]


def test_main_writes_json(tmp_path):
    output = tmp_path / "vectors" / "duck.json"
    assert main(["--output", str(output), "--chain-id", "5", "--layout", "legacy"]) == 0

    with open(output) as f:
        vectors = json.load(f)
    legacy_domain = vectors["delegate"][0]["typed_data"]["domain"]
    assert legacy_domain["chainId"] == 1
    assert "version" not in legacy_domain
    assert vectors["permit"][0]["layout"] == "legacy"

    assert main(["--output", str(output), "--chain-id", "5"]) == 0
    with open(output) as f:
        vectors = json.load(f)
    assert vectors["delegate"][0]["typed_data"]["domain"]["chainId"] == 5
