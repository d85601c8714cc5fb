#!/usr/bin/env python3
"""
JSON registry of deployed contracts

Entries are keyed "<contractId>.<network>" and stored nested, e.g.
{"Duck": {"kovan": {"address": "0x...", "deployer": "0x..."}}}
"""

import json
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Union

from eip712_errors import ConfigurationError
from typed_data_builder import validate_address

DEFAULT_REGISTRY_PATH = Path("deployed-contracts.json")


def registry_key(contract_id: Union[str, Enum], network: str) -> str:
    contract_name = contract_id.value if isinstance(contract_id, Enum) else contract_id
    return f"{contract_name}.{network}"


class DeploymentRegistry:
    def __init__(self, path: Union[str, Path] = DEFAULT_REGISTRY_PATH):
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, 'r') as f:
            content = f.read()
        return json.loads(content) if content.strip() else {}

    def _write(self, data: Dict[str, Any]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".deployed-", suffix=".json")
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def all(self) -> Dict[str, Any]:
        return self._read()

    def get(self, contract_id: Union[str, Enum], network: str) -> Dict[str, str]:
        contract_name, _ = registry_key(contract_id, network).split(".", 1)
        entry = self._read().get(contract_name, {}).get(network)
        if entry is None:
            raise ConfigurationError(f"No deployment recorded for {registry_key(contract_id, network)}")
        return entry

    def get_address(self, contract_id: Union[str, Enum], network: str) -> str:
        return self.get(contract_id, network)["address"]

    def set(self, contract_id: Union[str, Enum], network: str, address: str, deployer: str) -> Dict[str, str]:
        contract_name, _ = registry_key(contract_id, network).split(".", 1)
        entry = {
            "address": validate_address(address, "address"),
            "deployer": validate_address(deployer, "deployer"),
        }
        data = self._read()
        data.setdefault(contract_name, {})[network] = entry
        self._write(data)
        return entry
