#!/usr/bin/env python3
"""
Deploy the Duck token (and optionally DuckMinter) and record the addresses

Usage:
    python3 scripts/deploy_duck.py --network kovan [--minter] [--constructor-arg 0x...]
"""

import argparse
import sys
from pathlib import Path

# Add the project root to the path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from deployment_registry import DEFAULT_REGISTRY_PATH, DeploymentRegistry
from duck_contracts import ARTIFACTS_DIR, deploy_duck, deploy_duck_minter, get_web3
from eip712_errors import ConfigurationError
from network_config import get_accounts, get_network_config, load_env


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Deploy the Duck token and record its address")
    parser.add_argument("--network", default="hardhat", help="Network name (hardhat, kovan, mainnet, ...)")
    parser.add_argument("--artifacts", default=str(ARTIFACTS_DIR), help="Hardhat artifacts/contracts directory")
    parser.add_argument("--registry", default=str(DEFAULT_REGISTRY_PATH), help="Deployment registry JSON file")
    parser.add_argument("--minter", action="store_true", help="Also deploy DuckMinter for the new token")
    parser.add_argument(
        "--constructor-arg", action="append", default=[], dest="constructor_args",
        help="Constructor argument for Duck (repeatable)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    load_env()

    try:
        config = get_network_config(args.network)
        deployer = get_accounts(config)[0]
    except ConfigurationError as e:
        print(f"❌ {e}")
        return 1

    w3 = get_web3(config)
    if not w3.is_connected():
        print(f"❌ Cannot connect to {config.name} at {config.url}")
        return 1
    print(f"✅ Connected to {config.name} (Chain ID: {w3.eth.chain_id})")

    registry = DeploymentRegistry(args.registry)
    duck = deploy_duck(
        w3, deployer, config, args.constructor_args, registry=registry, artifacts_dir=args.artifacts
    )
    print(f"Duck deployed at address {duck.address}")

    if args.minter:
        minter = deploy_duck_minter(w3, duck.address, deployer, config, registry=registry, artifacts_dir=args.artifacts)
        print(f"DuckMinter deployed at address {minter.address}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
