#!/usr/bin/env python3
"""
Signature vector generator for the Duck token tests

Each actor signs a Delegate to the next actor and a Permit for the next actor,
both at nonce 0, so contract-side tests can replay delegateBySig / permit.

Usage:
    python3 vector_generator.py [--chain-id 31337] [--token 0x...] [--layout full|legacy] [--output path]
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

from eip712_config import MAX_UINT256
from eip712_helpers import (
    DomainLayout,
    address_of,
    get_domain_separator,
    get_signature_from_typed_data,
    get_typed_data_digest,
)
from typed_data_builder import TypedMessage, build_delegate_params, build_permit_params

# Hardhat default accounts 0-2 (publicly known keys, test use only)
DEFAULT_ACTORS = {
    "alice": "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80",
    "bob": "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d",
    "charlie": "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a",
}

HARDHAT_CHAIN_ID = 31337
# First contract deployed by hardhat account 0
DEFAULT_TOKEN_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
DEFAULT_EXPIRY = 10_000_000_000
DEFAULT_PERMIT_VALUE = 10**18
DEFAULT_OUTPUT = Path(__file__).resolve().parent / "test" / "test_vectors" / "duck_signature_vectors.json"


def _vector(actor: str, private_key: str, typed_message: TypedMessage, layout: DomainLayout) -> Dict[str, Any]:
    signature = get_signature_from_typed_data(private_key, typed_message, layout)
    return {
        "actor": actor,
        "signer": address_of(private_key),
        "layout": layout.value,
        "typed_data": typed_message.to_typed_data(layout),
        "domain_separator": "0x" + get_domain_separator(typed_message.domain, layout).hex(),
        "digest": "0x" + get_typed_data_digest(typed_message, layout).hex(),
        "signature": signature.as_dict(),
    }


def generate_vectors(
    actors: Dict[str, str] = DEFAULT_ACTORS,
    chain_id: int = HARDHAT_CHAIN_ID,
    token: str = DEFAULT_TOKEN_ADDRESS,
    layout: DomainLayout = DomainLayout.FULL,
    expiry: int = DEFAULT_EXPIRY,
) -> Dict[str, List[Dict[str, Any]]]:
    names = list(actors)
    vectors = {"delegate": [], "permit": []}
    for index, name in enumerate(names):
        private_key = actors[name]
        counterparty = address_of(actors[names[(index + 1) % len(names)]])

        delegate = build_delegate_params(chain_id, token, counterparty, 0, expiry)
        vectors["delegate"].append(_vector(name, private_key, delegate, layout))

        permit = build_permit_params(
            chain_id, token, address_of(private_key), counterparty, 0, MAX_UINT256, DEFAULT_PERMIT_VALUE
        )
        vectors["permit"].append(_vector(name, private_key, permit, layout))
    return vectors


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Generate Duck delegate / permit signature vectors")
    parser.add_argument("--chain-id", type=int, default=HARDHAT_CHAIN_ID)
    parser.add_argument("--token", default=DEFAULT_TOKEN_ADDRESS)
    parser.add_argument("--layout", choices=[layout.value for layout in DomainLayout], default=DomainLayout.FULL.value)
    parser.add_argument("--expiry", type=int, default=DEFAULT_EXPIRY)
    parser.add_argument("--output", default=str(DEFAULT_OUTPUT))
    args = parser.parse_args(argv)

    print("Starting Duck signature vector generation...")
    vectors = generate_vectors(
        chain_id=args.chain_id, token=args.token, layout=DomainLayout(args.layout), expiry=args.expiry
    )

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(vectors, f, indent=2)

    print(f"✅ Wrote {len(vectors['delegate'])} delegate and {len(vectors['permit'])} permit vectors to {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
