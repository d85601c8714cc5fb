#!/usr/bin/env python3
"""
EIP712 Helper Functions for Duck token signatures
This module computes domain separators, struct hashes and digests, and
produces / recovers secp256k1 signatures over them
"""

from dataclasses import dataclass
from typing import Any, Dict, Union

from eth_abi import encode
from eth_account import Account
from eth_keys.exceptions import BadSignature, ValidationError as KeyValidationError
from eth_utils import keccak, to_bytes

from eip712_config import (
    DOMAIN_SEPARATOR_TYPE_HASH,
    EIP191_PREFIX,
    LEGACY_DOMAIN_CHAIN_WORD,
    LEGACY_DOMAIN_SEPARATOR_TYPE_HASH,
    SECP256K1_N,
    ZERO_ADDRESS,
)
from eip712_errors import ConfigurationError, InvalidKeyError, InvalidSignatureError
from typed_data_builder import Domain, DomainLayout, TypedMessage, TypedStruct

PrivateKeyLike = Union[str, bytes]


def keccak256(data: bytes) -> bytes:
    """Compute keccak256 hash of data"""
    return keccak(data)


def encode_packed(*args) -> bytes:
    """Encode packed data (equivalent to abi.encodePacked)"""
    result = b''
    for arg in args:
        if isinstance(arg, bytes):
            result += arg
        elif isinstance(arg, str):
            result += arg.encode('utf-8')
        elif isinstance(arg, int):
            result += arg.to_bytes(32, 'big')
        else:
            raise ValueError(f"Unsupported type: {type(arg)}")
    return result


def _require_digest(digest: bytes) -> bytes:
    if isinstance(digest, bytearray):
        digest = bytes(digest)
    if not isinstance(digest, bytes) or len(digest) != 32:
        raise ValueError("The digest must be exactly 32 bytes")
    return digest


def get_domain_separator(domain: Domain, layout: DomainLayout) -> bytes:
    """Compute the EIP712 domain separator for the given layout"""
    if not isinstance(layout, DomainLayout):
        raise ConfigurationError(f"Unknown domain layout: {layout!r}")

    if layout is DomainLayout.FULL:
        if domain.version is None:
            raise ConfigurationError("Full domain layout requires a version")
        if domain.chain_id is None:
            raise ConfigurationError("Full domain layout requires a chainId")
        encoded = encode(
            ['bytes32', 'bytes32', 'bytes32', 'uint256', 'address'],
            [
                DOMAIN_SEPARATOR_TYPE_HASH,
                keccak(text=domain.name),
                keccak(text=domain.version),
                domain.chain_id,
                domain.verifying_contract,
            ],
        )
    else:
        encoded = encode(
            ['bytes32', 'bytes32', 'uint256', 'address'],
            [
                LEGACY_DOMAIN_SEPARATOR_TYPE_HASH,
                keccak(text=domain.name),
                LEGACY_DOMAIN_CHAIN_WORD,
                domain.verifying_contract,
            ],
        )
    return keccak(encoded)


def get_struct_hash(message: TypedStruct) -> bytes:
    """keccak256(abi.encode(typeHash, field1, field2, ...))"""
    if not isinstance(message, TypedStruct):
        raise TypeError(f"Unsupported message type: {type(message).__name__}")
    encoded = encode(['bytes32'] + message.abi_types(), [message.TYPE_HASH] + message.values())
    return keccak(encoded)


def get_eip712_digest(domain_separator: bytes, struct_hash: bytes) -> bytes:
    """Compute the EIP712 digest"""
    if len(domain_separator) != 32 or len(struct_hash) != 32:
        raise ValueError("Domain separator and struct hash must be 32 bytes each")
    return keccak256(encode_packed(EIP191_PREFIX, domain_separator, struct_hash))


def get_typed_data_digest(typed_message: TypedMessage, layout: DomainLayout) -> bytes:
    domain_separator = get_domain_separator(typed_message.domain, layout)
    return get_eip712_digest(domain_separator, get_struct_hash(typed_message.message))


@dataclass(frozen=True)
class Signature:
    """Compact ECDSA signature. v is kept as given; recover_signer enforces 27/28."""

    v: int
    r: int
    s: int

    @property
    def r_bytes(self) -> bytes:
        return self.r.to_bytes(32, 'big')

    @property
    def s_bytes(self) -> bytes:
        return self.s.to_bytes(32, 'big')

    def to_bytes(self) -> bytes:
        return self.r_bytes + self.s_bytes + bytes([self.v])

    def to_hex(self) -> str:
        return "0x" + self.to_bytes().hex()

    def as_dict(self) -> Dict[str, Any]:
        return {
            'v': self.v,
            'r': f"0x{self.r:064x}",
            's': f"0x{self.s:064x}",
            'signature': self.to_hex(),
        }

    @classmethod
    def from_rpc_sig(cls, signature: Union[str, bytes]) -> "Signature":
        """Parse a 65-byte r||s||v signature, or a 64-byte EIP-2098 compact one"""
        try:
            raw = to_bytes(hexstr=signature) if isinstance(signature, str) else bytes(signature)
        except ValueError as exc:
            raise InvalidSignatureError(f"Signature is not valid hex: {signature!r}") from exc

        if len(raw) == 65:
            r = int.from_bytes(raw[:32], 'big')
            s = int.from_bytes(raw[32:64], 'big')
            v = raw[64]
            if v < 27:
                v += 27
        elif len(raw) == 64:
            r = int.from_bytes(raw[:32], 'big')
            y_parity_and_s = int.from_bytes(raw[32:], 'big')
            v = 27 + (y_parity_and_s >> 255)
            s = y_parity_and_s & ((1 << 255) - 1)
        else:
            raise InvalidSignatureError(f"Signature must be 64 or 65 bytes, got {len(raw)}")
        return cls(v=v, r=r, s=s)


def _parse_private_key(private_key: PrivateKeyLike) -> bytes:
    if isinstance(private_key, str):
        try:
            key = to_bytes(hexstr=private_key)
        except ValueError as exc:
            raise InvalidKeyError("Private key is not valid hex") from exc
    elif isinstance(private_key, (bytes, bytearray)):
        key = bytes(private_key)
    else:
        raise InvalidKeyError(f"Unsupported private key type: {type(private_key).__name__}")

    if len(key) != 32:
        raise InvalidKeyError(f"Private key must be 32 bytes, got {len(key)}")
    if not 0 < int.from_bytes(key, 'big') < SECP256K1_N:
        raise InvalidKeyError("Private key is outside the secp256k1 scalar range")
    return key


def address_of(private_key: PrivateKeyLike) -> str:
    return Account.from_key(_parse_private_key(private_key)).address


def sign_digest(digest: bytes, private_key: PrivateKeyLike) -> Signature:
    """Sign a 32-byte digest, returning v in {27, 28}"""
    digest = _require_digest(digest)
    key = _parse_private_key(private_key)
    signed_message = Account._sign_hash(digest, key)
    return Signature(v=signed_message.v, r=signed_message.r, s=signed_message.s)


def recover_signer(digest: bytes, signature: Signature) -> str:
    """Recover the checksummed signer address of a digest"""
    digest = _require_digest(digest)
    if signature.v not in (27, 28):
        raise InvalidSignatureError(f"v must be 27 or 28, got {signature.v}")
    if not 0 < signature.r < SECP256K1_N or not 0 < signature.s < SECP256K1_N:
        raise InvalidSignatureError("r and s must be in [1, n-1]")

    try:
        recovered = Account._recover_hash(digest, vrs=(signature.v, signature.r, signature.s))
    except (BadSignature, KeyValidationError, ValueError) as exc:
        raise InvalidSignatureError(f"Could not recover signer: {exc}") from exc

    if recovered == ZERO_ADDRESS:
        raise InvalidSignatureError("Recovered the zero address")
    return recovered


def sign_eip712_message(private_key: PrivateKeyLike, domain_separator: bytes, struct_hash: bytes) -> Signature:
    """Sign an EIP712 message"""
    return sign_digest(get_eip712_digest(domain_separator, struct_hash), private_key)


def get_signature_from_typed_data(
    private_key: PrivateKeyLike, typed_message: TypedMessage, layout: DomainLayout
) -> Signature:
    return sign_digest(get_typed_data_digest(typed_message, layout), private_key)
