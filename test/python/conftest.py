import pytest

from eip712_helpers import DomainLayout
from delegation_verifier import DuckVerifier
from typed_data_builder import build_domain

# Hardhat default accounts (publicly known keys, test use only)
ALICE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ALICE = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
BOB_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
BOB = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
CHARLIE_KEY = "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a"
CHARLIE = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"

CHAIN_ID = 31337
TOKEN = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


class FakeClock:
    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock(1_700_000_000)


@pytest.fixture
def domain():
    return build_domain(CHAIN_ID, TOKEN)


@pytest.fixture
def verifier(domain, clock):
    return DuckVerifier(domain, DomainLayout.FULL, clock=clock)
