import pytest

from airdrop.chain import Chain
from airdrop.contracts import Token
from airdrop.merkle import Leaf, MerkleTree

GENESIS = 1_700_000_000
INITIAL_SUPPLY = 10**24


@pytest.fixture
def chain():
    return Chain(timestamp=GENESIS)


@pytest.fixture
def accounts(chain):
    return chain.accounts


@pytest.fixture
def owner(accounts):
    return accounts[0]


@pytest.fixture
def claimer_account(accounts):
    return accounts[1]


@pytest.fixture
def token(chain, owner):
    return chain.deploy(Token, "Swapr", "SWPR", INITIAL_SUPPLY, owner, {"from": owner})


@pytest.fixture
def leaves(claimer_account, accounts):
    return [
        Leaf.create(claimer_account.address, 100),
        Leaf.create(accounts[5].address, 200),
        Leaf.create(accounts[6].address, 300),
        Leaf.create(accounts[7].address, 500),
    ]


@pytest.fixture
def tree(leaves):
    return MerkleTree(leaves)
