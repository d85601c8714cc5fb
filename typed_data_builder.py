#!/usr/bin/env python3
"""
Typed data builders for Duck token signatures

Builds the EIP-712 documents (domain + message + type schema) for the two
signature flows the Duck contract accepts: ERC20 permit and vote delegation.
The resulting TypedMessage can be hashed by eip712_helpers or handed to a
wallet as plain typed-data JSON.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union

from eth_utils import is_hex_address, to_checksum_address

from eip712_config import (
    DELEGATE_TYPE_HASH,
    DELEGATE_TYPE_STRING,
    DELEGATION_TYPE_HASH,
    DELEGATION_TYPE_STRING,
    DOMAIN_NAME,
    DOMAIN_VERSION,
    LEGACY_DOMAIN_CHAIN_WORD,
    MAX_UINT256,
    PERMIT_TYPE_HASH,
    PERMIT_TYPE_STRING,
    TARGET_DELEGATE_TYPE,
)
from eip712_errors import ConfigurationError, InvalidAddressError, InvalidChainIdError


class DomainLayout(Enum):
    """Which EIP712Domain encoding the verifying contract was compiled with"""

    FULL = "full"  # (name, version, chainId, verifyingContract)
    LEGACY = "legacy"  # (name, 1, verifyingContract)


def validate_address(value: Union[str, bytes], field: str = "address") -> str:
    """Return the checksummed form of a 20-byte address"""
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise InvalidAddressError(f"{field} must be 20 bytes, got {len(value)}")
        return to_checksum_address(bytes(value))
    if not isinstance(value, str) or not is_hex_address(value):
        raise InvalidAddressError(f"{field} must be 40 hex characters, got {value!r}")
    return to_checksum_address(value)


def validate_uint256(value: Union[int, str], field: str = "value") -> int:
    """Accept ints and decimal / 0x-hex strings in the uint256 range"""
    if isinstance(value, bool):
        raise ValueError(f"{field} must be an integer, got bool")
    if isinstance(value, str):
        try:
            value = int(value, 16) if value.lower().startswith("0x") else int(value, 10)
        except ValueError:
            raise ValueError(f"{field} is not a valid integer string: {value!r}") from None
    if not isinstance(value, int):
        raise ValueError(f"{field} must be an integer, got {type(value).__name__}")
    if not 0 <= value <= MAX_UINT256:
        raise ValueError(f"{field} out of uint256 range: {value}")
    return value


def validate_chain_id(chain_id: int) -> int:
    if isinstance(chain_id, bool) or not isinstance(chain_id, int) or chain_id <= 0:
        raise InvalidChainIdError(f"chainId must be a positive integer, got {chain_id!r}")
    return chain_id


class TypedStruct:
    """Shared behaviour of the EIP-712 message structs.

    Subclasses declare TYPE_NAME, TYPE_STRING, TYPE_HASH and FIELDS; FIELDS
    order is the encoding order and must match TYPE_STRING.
    """

    TYPE_NAME: ClassVar[str]
    TYPE_STRING: ClassVar[str]
    TYPE_HASH: ClassVar[bytes]
    FIELDS: ClassVar[Tuple[Tuple[str, str], ...]]

    def __post_init__(self):
        for name, abi_type in self.FIELDS:
            raw = getattr(self, name)
            if abi_type == "address":
                normalized = validate_address(raw, name)
            else:
                normalized = validate_uint256(raw, name)
            object.__setattr__(self, name, normalized)

    @classmethod
    def encode_type(cls) -> str:
        """Rebuild the type string from FIELDS"""
        members = ",".join(f"{abi_type} {name}" for name, abi_type in cls.FIELDS)
        return f"{cls.TYPE_NAME}({members})"

    @classmethod
    def abi_types(cls) -> List[str]:
        return [abi_type for _, abi_type in cls.FIELDS]

    @classmethod
    def type_schema(cls) -> List[Dict[str, str]]:
        return [{"name": name, "type": abi_type} for name, abi_type in cls.FIELDS]

    def values(self) -> List[Any]:
        return [getattr(self, name) for name, _ in self.FIELDS]

    def as_message(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name, _ in self.FIELDS}


@dataclass(frozen=True)
class Permit(TypedStruct):
    TYPE_NAME: ClassVar[str] = "Permit"
    TYPE_STRING: ClassVar[str] = PERMIT_TYPE_STRING
    TYPE_HASH: ClassVar[bytes] = PERMIT_TYPE_HASH
    FIELDS: ClassVar[Tuple[Tuple[str, str], ...]] = (
        ("owner", "address"),
        ("spender", "address"),
        ("value", "uint256"),
        ("nonce", "uint256"),
        ("deadline", "uint256"),
    )

    owner: str
    spender: str
    value: int
    nonce: int
    deadline: int


@dataclass(frozen=True)
class Delegate(TypedStruct):
    TYPE_NAME: ClassVar[str] = "Delegate"
    TYPE_STRING: ClassVar[str] = DELEGATE_TYPE_STRING
    TYPE_HASH: ClassVar[bytes] = DELEGATE_TYPE_HASH
    FIELDS: ClassVar[Tuple[Tuple[str, str], ...]] = (
        ("delegatee", "address"),
        ("nonce", "uint256"),
        ("expiry", "uint256"),
    )

    delegatee: str
    nonce: int
    expiry: int


@dataclass(frozen=True)
class Delegation(Delegate):
    """Older revision of the delegation struct; same fields, different type hash"""

    TYPE_NAME: ClassVar[str] = "Delegation"
    TYPE_STRING: ClassVar[str] = DELEGATION_TYPE_STRING
    TYPE_HASH: ClassVar[bytes] = DELEGATION_TYPE_HASH


MESSAGE_TYPES = {
    "Permit": Permit,
    "Delegate": Delegate,
    "Delegation": Delegation,
}

Message = Union[Permit, Delegate, Delegation]


@dataclass(frozen=True)
class Domain:
    """EIP-712 domain. version and chain_id are optional for the legacy layout only."""

    name: str
    version: Optional[str]
    chain_id: Optional[int]
    verifying_contract: str

    def __post_init__(self):
        if not isinstance(self.name, str):
            raise ValueError(f"domain name must be a string, got {self.name!r}")
        if self.version is not None and not isinstance(self.version, str):
            raise ConfigurationError(f"domain version must be a string, got {self.version!r}")
        if self.chain_id is not None:
            validate_chain_id(self.chain_id)
        object.__setattr__(
            self, "verifying_contract", validate_address(self.verifying_contract, "verifyingContract")
        )

    def type_schema(self) -> List[Dict[str, str]]:
        schema = [{"name": "name", "type": "string"}]
        if self.version is not None:
            schema.append({"name": "version", "type": "string"})
        if self.chain_id is not None:
            schema.append({"name": "chainId", "type": "uint256"})
        schema.append({"name": "verifyingContract", "type": "address"})
        return schema

    def as_dict(self) -> Dict[str, Any]:
        domain = {"name": self.name}
        if self.version is not None:
            domain["version"] = self.version
        if self.chain_id is not None:
            domain["chainId"] = self.chain_id
        domain["verifyingContract"] = self.verifying_contract
        return domain

    def for_layout(self, layout: DomainLayout) -> "Domain":
        """The domain fields a wallet must sign to match `layout`"""
        if layout is DomainLayout.LEGACY:
            return Domain(self.name, None, LEGACY_DOMAIN_CHAIN_WORD, self.verifying_contract)
        if layout is DomainLayout.FULL:
            return self
        raise ConfigurationError(f"Unknown domain layout: {layout!r}")


@dataclass(frozen=True)
class TypedMessage:
    domain: Domain
    message: Message

    def __post_init__(self):
        if type(self.message) not in MESSAGE_TYPES.values():
            raise TypeError(f"Unsupported message type: {type(self.message).__name__}")

    @property
    def primary_type(self) -> str:
        return self.message.TYPE_NAME

    def to_typed_data(self, layout: DomainLayout = DomainLayout.FULL) -> Dict[str, Any]:
        """Typed-data JSON as consumed by eth_signTypedData_v4 wallets"""
        domain = self.domain.for_layout(layout)
        return {
            "types": {
                "EIP712Domain": domain.type_schema(),
                self.primary_type: self.message.type_schema(),
            },
            "primaryType": self.primary_type,
            "domain": domain.as_dict(),
            "message": self.message.as_message(),
        }


def build_domain(chain_id: int, token: str, name: str = DOMAIN_NAME, version: str = DOMAIN_VERSION) -> Domain:
    return Domain(name=name, version=version, chain_id=validate_chain_id(chain_id), verifying_contract=token)


def build_permit_params(
    chain_id: int,
    token: str,
    owner: str,
    spender: str,
    nonce: Union[int, str],
    deadline: Union[int, str],
    value: Union[int, str],
) -> TypedMessage:
    """Build the Permit typed data for the Duck token at `token`"""
    return TypedMessage(
        domain=build_domain(chain_id, token),
        message=Permit(owner=owner, spender=spender, value=value, nonce=nonce, deadline=deadline),
    )


def build_delegate_params(
    chain_id: int,
    token: str,
    delegatee: str,
    nonce: Union[int, str],
    expiry: Union[int, str],
    type_name: str = TARGET_DELEGATE_TYPE,
) -> TypedMessage:
    """Build the Delegate typed data; type_name="Delegation" selects the older struct name"""
    if type_name not in ("Delegate", "Delegation"):
        raise ValueError(f"Unsupported delegation type name: {type_name}")
    message_cls = MESSAGE_TYPES[type_name]
    return TypedMessage(
        domain=build_domain(chain_id, token),
        message=message_cls(delegatee=delegatee, nonce=nonce, expiry=expiry),
    )


def message_field_names(message_cls) -> List[str]:
    """Dataclass field order, used to check it agrees with FIELDS"""
    return [f.name for f in fields(message_cls)]
