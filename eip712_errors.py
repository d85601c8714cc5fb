"""
Error taxonomy for Duck typed-data signing and verification.

Codec errors (ConfigurationError, InvalidKeyError, InvalidSignatureError) are
raised while hashing or signing. InvalidNonceError and SignatureExpiredError are
only raised by the verifier model and carry the contract's revert reason.
"""


class DuckSignatureError(Exception):
    """Base class for every error raised by this toolkit"""


class ConfigurationError(DuckSignatureError):
    """Missing or invalid domain / network configuration"""


class InvalidKeyError(DuckSignatureError):
    """Private key is not a valid secp256k1 scalar"""


class InvalidSignatureError(DuckSignatureError):
    """Signature is malformed, unrecoverable or signed by the wrong account"""


class InvalidNonceError(DuckSignatureError):
    """Supplied nonce does not match the verifier's stored nonce"""


class SignatureExpiredError(DuckSignatureError):
    """Expiry or deadline has passed"""


class InvalidAddressError(ValueError):
    """Address is not 20 bytes / 40 hex characters"""


class InvalidChainIdError(ValueError, ConfigurationError):
    """Chain id is not a positive integer"""
