# EIP712 configuration for the Duck governance token
# Type strings and hashes here must match the constants compiled into Duck.sol

from eth_utils import keccak

# Domain parameters
DOMAIN_NAME = "Duck Token"
DOMAIN_VERSION = "1"

# Fixed EIP-712 prefix (0x19 0x01)
EIP191_PREFIX = b"\x19\x01"

# EIP712 Domain type strings
# The legacy layout hashes a literal 1 where the chainId word sits and never hashes the version
DOMAIN_TYPE_STRING = "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
LEGACY_DOMAIN_TYPE_STRING = "EIP712Domain(string name,uint256 chainId,address verifyingContract)"
LEGACY_DOMAIN_CHAIN_WORD = 1

# Message type strings
PERMIT_TYPE_STRING = "Permit(address owner,address spender,uint256 value,uint256 nonce,uint256 deadline)"
DELEGATE_TYPE_STRING = "Delegate(address delegatee,uint256 nonce,uint256 expiry)"
DELEGATION_TYPE_STRING = "Delegation(address delegatee,uint256 nonce,uint256 expiry)"

# EIP712 Type Hashes (matching the contract)
DOMAIN_SEPARATOR_TYPE_HASH = keccak(text=DOMAIN_TYPE_STRING)
LEGACY_DOMAIN_SEPARATOR_TYPE_HASH = keccak(text=LEGACY_DOMAIN_TYPE_STRING)
PERMIT_TYPE_HASH = keccak(text=PERMIT_TYPE_STRING)
DELEGATE_TYPE_HASH = keccak(text=DELEGATE_TYPE_STRING)
DELEGATION_TYPE_HASH = keccak(text=DELEGATION_TYPE_STRING)

# Numeric limits
MAX_UINT256 = 2**256 - 1
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Revision targeted by the verifier model: "Delegate" struct, full domain,
# signature checked before nonce and expiry
TARGET_DELEGATE_TYPE = "Delegate"

# Revert reasons
DELEGATE_INVALID_SIGNATURE = "DUCK: delegateBySig: invalid signature"
DELEGATE_INVALID_NONCE = "DUCK: delegateBySig: invalid nonce"
DELEGATE_SIGNATURE_EXPIRED = "DUCK: delegateBySig: signature expired"
PERMIT_INVALID_OWNER = "DUCK: permit: invalid owner"
PERMIT_INVALID_SIGNATURE = "DUCK: permit: invalid signature"
PERMIT_INVALID_NONCE = "DUCK: permit: invalid nonce"
PERMIT_SIGNATURE_EXPIRED = "DUCK: permit: invalid expiration"
