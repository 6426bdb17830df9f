import logging

from eth_utils import encode_hex, to_bytes

from airdrop.chain import ZERO_ADDRESS, Contract, external, to_address
from airdrop.exceptions import (
    AlreadyClaimed,
    InvalidLeaf,
    InvalidMerkleRoot,
    InvalidProof,
    InvalidTimeLimit,
    InvalidTokenAddress,
    NotOwner,
    TimeLimitReached,
    TooEarly,
)
from airdrop.merkle import Leaf, hash_leaf, verify_proof

logger = logging.getLogger(__name__)


def normalize_root(merkle_root):
    try:
        root = to_bytes(hexstr=merkle_root) if isinstance(merkle_root, str) else bytes(merkle_root)
    except (TypeError, ValueError):
        raise InvalidMerkleRoot() from None
    if len(root) != 32 or not any(root):
        raise InvalidMerkleRoot()
    return encode_hex(root)


class MerkleGated(Contract):
    """Shared state of the claim contracts: a token, a committed root, an owner."""

    def _setup(self, deployer, token, merkle_root):
        try:
            token = to_address(token)
        except ValueError:
            raise InvalidTokenAddress() from None
        if token == ZERO_ADDRESS:
            raise InvalidTokenAddress()
        self._token = token
        self._merkle_root = normalize_root(merkle_root)
        self._owner = deployer

    def token(self):
        return self._token

    def merkleRoot(self):
        return self._merkle_root

    def owner(self):
        return self._owner

    def _token_contract(self):
        return self.chain.at(self._token)

    def _is_valid_claim(self, account, amount, proof):
        # the leaf is rebuilt from the sender, so a proof is useless to anyone else
        try:
            leaf_hash = hash_leaf(Leaf.create(account, amount))
            return verify_proof(self._merkle_root, leaf_hash, proof)
        except (InvalidLeaf, TypeError, ValueError):
            return False

    def _only_owner(self, sender):
        if sender != self._owner:
            raise NotOwner()

    def _sweep(self):
        token = self._token_contract()
        amount = token.balanceOf(self)
        token.transfer(self._owner, amount, {"from": self})
        self.emit("Recovered", amount=amount)
        logger.info("%s recovered %d tokens to %s", self, amount, self._owner)
        return amount


class MerkleClaimer(MerkleGated):
    """
    One-shot airdrop claims.

    Each account in the tree can claim its full allocation once before
    ``claimTimeLimit``. Afterwards the owner recovers whatever is left.
    """

    def constructor(self, deployer, token, merkle_root, claim_time_limit):
        self._setup(deployer, token, merkle_root)
        if claim_time_limit <= self.now():
            raise InvalidTimeLimit()
        self._claim_time_limit = claim_time_limit
        self._storage["claimed"] = {}

    def claimTimeLimit(self):
        return self._claim_time_limit

    def claimed(self, account):
        return self._storage["claimed"].get(to_address(account), False)

    @external
    def claim(self, sender, amount, proof):
        if self.now() > self._claim_time_limit:
            raise TimeLimitReached()
        if self.claimed(sender):
            raise AlreadyClaimed()
        if not self._is_valid_claim(sender, amount, proof):
            raise InvalidProof()
        self._storage["claimed"][sender] = True
        self._token_contract().transfer(sender, amount, {"from": self})
        self.emit("Claimed", account=sender, amount=amount)

    @external
    def recover(self, sender):
        self._only_owner(sender)
        if self.now() <= self._claim_time_limit:
            raise TooEarly()
        return self._sweep()
