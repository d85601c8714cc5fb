#!/usr/bin/env python3
"""
Off-chain model of the Duck contract's signature endpoints

Mirrors what delegateBySig and permit enforce on chain: recover the signatory
from the EIP-712 digest, check it against the stored nonce and the expiry,
then bump the nonce and apply the effect. Delegation moves power for both the
voting and the proposition checkpoints and reports each move as an event.

The model is single-threaded like the contract it mirrors; only the nonce
store is shared state and it serializes itself.
"""

import threading
import time
from bisect import bisect_right
from collections import defaultdict, namedtuple
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Tuple, Type, Union

from eth_utils import to_int

from eip712_config import (
    DELEGATE_INVALID_NONCE,
    DELEGATE_INVALID_SIGNATURE,
    DELEGATE_SIGNATURE_EXPIRED,
    MAX_UINT256,
    PERMIT_INVALID_NONCE,
    PERMIT_INVALID_OWNER,
    PERMIT_INVALID_SIGNATURE,
    PERMIT_SIGNATURE_EXPIRED,
    ZERO_ADDRESS,
)
from eip712_errors import (
    ConfigurationError,
    InvalidNonceError,
    InvalidSignatureError,
    SignatureExpiredError,
)
from eip712_helpers import (
    DomainLayout,
    Signature,
    get_domain_separator,
    get_eip712_digest,
    get_struct_hash,
    recover_signer,
)
from typed_data_builder import Delegate, Delegation, Domain, Permit, validate_address

Word = Union[int, str, bytes]

RevertReasons = namedtuple("RevertReasons", ["invalid_signature", "invalid_nonce", "expired"])

DELEGATE_REASONS = RevertReasons(DELEGATE_INVALID_SIGNATURE, DELEGATE_INVALID_NONCE, DELEGATE_SIGNATURE_EXPIRED)
PERMIT_REASONS = RevertReasons(PERMIT_INVALID_SIGNATURE, PERMIT_INVALID_NONCE, PERMIT_SIGNATURE_EXPIRED)


class NonceStore(Protocol):
    def get(self, signer: str) -> int:
        ...

    def increment_if_matches(self, signer: str, expected: int) -> bool:
        ...


class InMemoryNonceStore:
    """Per-signer counters; increment_if_matches is the only mutation"""

    def __init__(self, initial: Optional[Dict[str, int]] = None):
        self._lock = threading.Lock()
        self._nonces: Dict[str, int] = {}
        for signer, nonce in (initial or {}).items():
            self._nonces[validate_address(signer, "signer")] = nonce

    def get(self, signer: str) -> int:
        key = validate_address(signer, "signer")
        with self._lock:
            return self._nonces.get(key, 0)

    def increment_if_matches(self, signer: str, expected: int) -> bool:
        key = validate_address(signer, "signer")
        with self._lock:
            if self._nonces.get(key, 0) != expected:
                return False
            self._nonces[key] = expected + 1
            return True


class PowerType(Enum):
    VOTING = 0
    PROPOSITION = 1


class CheckOrder(Enum):
    SIGNATURE_FIRST = "signature_first"  # signature, nonce, expiry
    EXPIRY_FIRST = "expiry_first"  # expiry, signature, nonce


@dataclass(frozen=True)
class DelegateChanged:
    delegator: str
    delegatee: str
    power_type: PowerType


@dataclass(frozen=True)
class DelegatedPowerChanged:
    user: str
    power: int
    power_type: PowerType


@dataclass(frozen=True)
class Approval:
    owner: str
    spender: str
    value: int


def _to_word(value: Word, reasons: RevertReasons) -> int:
    if isinstance(value, bytes):
        return int.from_bytes(value, 'big')
    if isinstance(value, str):
        try:
            return to_int(hexstr=value)
        except ValueError as exc:
            raise InvalidSignatureError(reasons.invalid_signature) from exc
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidSignatureError(reasons.invalid_signature)
    return value


class DuckVerifier:
    """Verifier model for a single Duck deployment"""

    def __init__(
        self,
        domain: Domain,
        layout: DomainLayout,
        nonce_store: Optional[NonceStore] = None,
        clock: Callable[[], float] = time.time,
        check_order: CheckOrder = CheckOrder.SIGNATURE_FIRST,
        delegate_type: Type[Delegate] = Delegate,
    ):
        if delegate_type not in (Delegate, Delegation):
            raise ConfigurationError(f"Unsupported delegation struct: {delegate_type!r}")
        if not isinstance(check_order, CheckOrder):
            raise ConfigurationError(f"Unknown check order: {check_order!r}")

        self.domain = domain
        self.layout = layout
        self.domain_separator = get_domain_separator(domain, layout)
        self.nonce_store = nonce_store if nonce_store is not None else InMemoryNonceStore()
        self.clock = clock
        self.check_order = check_order
        self.delegate_type = delegate_type

        self._balances: Dict[str, int] = defaultdict(int)
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._delegates: Dict[PowerType, Dict[str, str]] = {power_type: {} for power_type in PowerType}
        self._checkpoints: Dict[PowerType, Dict[str, List[Tuple[int, int]]]] = {
            power_type: defaultdict(list) for power_type in PowerType
        }

    # ---------- read side ----------

    def nonces(self, signer: str) -> int:
        return self.nonce_store.get(signer)

    def balance_of(self, account: str) -> int:
        return self._balances[validate_address(account, "account")]

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((validate_address(owner, "owner"), validate_address(spender, "spender")), 0)

    def delegates(self, delegator: str, power_type: PowerType = PowerType.VOTING) -> str:
        delegator = validate_address(delegator, "delegator")
        return self._delegates[power_type].get(delegator, delegator)

    def get_power_current(self, user: str, power_type: PowerType = PowerType.VOTING) -> int:
        checkpoints = self._checkpoints[power_type][validate_address(user, "user")]
        return checkpoints[-1][1] if checkpoints else 0

    def get_power_at(self, user: str, timestamp: int, power_type: PowerType = PowerType.VOTING) -> int:
        """Power recorded by the last checkpoint at or before timestamp"""
        checkpoints = self._checkpoints[power_type][validate_address(user, "user")]
        index = bisect_right([ts for ts, _ in checkpoints], timestamp)
        return checkpoints[index - 1][1] if index else 0

    # ---------- balances ----------

    def mint(self, account: str, amount: int) -> List[DelegatedPowerChanged]:
        account = validate_address(account, "account")
        if amount < 0:
            raise ValueError("mint amount must be non-negative")
        self._balances[account] += amount
        events = []
        for power_type in PowerType:
            events.extend(self._move_power(ZERO_ADDRESS, self.delegates(account, power_type), amount, power_type))
        return events

    def transfer(self, sender: str, recipient: str, amount: int) -> List[DelegatedPowerChanged]:
        sender = validate_address(sender, "sender")
        recipient = validate_address(recipient, "recipient")
        if amount < 0 or self._balances[sender] < amount:
            raise ValueError("transfer amount exceeds balance")
        self._balances[sender] -= amount
        self._balances[recipient] += amount
        events = []
        for power_type in PowerType:
            events.extend(
                self._move_power(
                    self.delegates(sender, power_type), self.delegates(recipient, power_type), amount, power_type
                )
            )
        return events

    # ---------- delegation ----------

    def delegate(self, delegator: str, delegatee: str) -> list:
        """Direct delegation of both power types"""
        return self._delegate(validate_address(delegator, "delegator"), validate_address(delegatee, "delegatee"))

    def delegate_by_sig(
        self,
        delegatee: str,
        nonce: int,
        expiry: int,
        v: int,
        r: Word,
        s: Word,
        expected_signer: Optional[str] = None,
    ) -> list:
        message = self.delegate_type(delegatee=delegatee, nonce=nonce, expiry=expiry)
        digest = get_eip712_digest(self.domain_separator, get_struct_hash(message))
        signatory = self._authorize(
            digest,
            Signature(v=v, r=_to_word(r, DELEGATE_REASONS), s=_to_word(s, DELEGATE_REASONS)),
            message.nonce,
            message.expiry,
            expected_signer,
            DELEGATE_REASONS,
        )
        return self._delegate(signatory, message.delegatee)

    def permit(self, owner: str, spender: str, value: int, deadline: int, v: int, r: Word, s: Word) -> List[Approval]:
        owner = validate_address(owner, "owner")
        if owner == ZERO_ADDRESS:
            raise InvalidSignatureError(PERMIT_INVALID_OWNER)

        # the contract signs over its own stored nonce, so a stale nonce shows up as a bad signature
        nonce = self.nonce_store.get(owner)
        message = Permit(owner=owner, spender=spender, value=value, nonce=nonce, deadline=deadline)
        digest = get_eip712_digest(self.domain_separator, get_struct_hash(message))
        self._authorize(
            digest,
            Signature(v=v, r=_to_word(r, PERMIT_REASONS), s=_to_word(s, PERMIT_REASONS)),
            nonce,
            message.deadline,
            owner,
            PERMIT_REASONS,
        )
        self._allowances[(owner, message.spender)] = message.value
        return [Approval(owner=owner, spender=message.spender, value=message.value)]

    # ---------- guards ----------

    def _authorize(
        self,
        digest: bytes,
        signature: Signature,
        nonce: int,
        expiry: int,
        expected_signer: Optional[str],
        reasons: RevertReasons,
    ) -> str:
        if self.check_order is CheckOrder.EXPIRY_FIRST:
            self._check_expiry(expiry, reasons)
        signatory = self._check_signature(digest, signature, expected_signer, reasons)
        if self.nonce_store.get(signatory) != nonce:
            raise InvalidNonceError(reasons.invalid_nonce)
        if self.check_order is CheckOrder.SIGNATURE_FIRST:
            self._check_expiry(expiry, reasons)
        if not self.nonce_store.increment_if_matches(signatory, nonce):
            raise InvalidNonceError(reasons.invalid_nonce)
        return signatory

    def _check_signature(
        self, digest: bytes, signature: Signature, expected_signer: Optional[str], reasons: RevertReasons
    ) -> str:
        try:
            signatory = recover_signer(digest, signature)
        except InvalidSignatureError as exc:
            raise InvalidSignatureError(reasons.invalid_signature) from exc
        if expected_signer is not None and signatory != validate_address(expected_signer, "expected_signer"):
            raise InvalidSignatureError(reasons.invalid_signature)
        return signatory

    def _check_expiry(self, expiry: int, reasons: RevertReasons):
        # MAX_UINT256 means no expiry; 0 is an ordinary timestamp and always in the past
        if expiry == MAX_UINT256:
            return
        if expiry == 0 or int(self.clock()) > expiry:
            raise SignatureExpiredError(reasons.expired)

    # ---------- effects ----------

    def _delegate(self, delegator: str, delegatee: str) -> list:
        amount = self._balances[delegator]
        events = []
        for power_type in PowerType:
            previous = self.delegates(delegator, power_type)
            self._delegates[power_type][delegator] = delegatee
            events.append(DelegateChanged(delegator=delegator, delegatee=delegatee, power_type=power_type))
            events.extend(self._move_power(previous, delegatee, amount, power_type))
        return events

    def _move_power(self, source: str, target: str, amount: int, power_type: PowerType) -> List[DelegatedPowerChanged]:
        if source == target:
            return []
        events = []
        if source != ZERO_ADDRESS:
            power = self.get_power_current(source, power_type) - amount
            self._write_checkpoint(source, power, power_type)
            events.append(DelegatedPowerChanged(user=source, power=power, power_type=power_type))
        if target != ZERO_ADDRESS:
            power = self.get_power_current(target, power_type) + amount
            self._write_checkpoint(target, power, power_type)
            events.append(DelegatedPowerChanged(user=target, power=power, power_type=power_type))
        return events

    def _write_checkpoint(self, user: str, power: int, power_type: PowerType):
        timestamp = int(self.clock())
        checkpoints = self._checkpoints[power_type][user]
        if checkpoints and checkpoints[-1][0] >= timestamp:
            checkpoints[-1] = (checkpoints[-1][0], power)
        else:
            checkpoints.append((timestamp, power))
