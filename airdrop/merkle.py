"""
Merkle tree over (account, amount) allocations.

Leaves are ``keccak256(abi.encodePacked(address account, uint256 amount))``
and parents are the keccak of the two children concatenated in ascending
order, so proofs carry no left/right flags. Roots and proofs are compatible
with OpenZeppelin's ``MerkleProof.verify`` and with ``merkletreejs`` built
with ``sortPairs: true``.
"""
import logging
from itertools import zip_longest
from typing import NamedTuple

from eth_abi.packed import encode_packed
from eth_utils import encode_hex, to_bytes
from tqdm import tqdm
from web3 import Web3

from airdrop.exceptions import DuplicateLeaf, EmptyTree, InvalidLeaf

logger = logging.getLogger(__name__)

MAX_UINT256 = 2**256 - 1


def normalize_account(account):
    if not isinstance(account, str) or not Web3.is_address(account):
        raise InvalidLeaf(f"invalid account address: {account!r}")
    return Web3.to_checksum_address(account)


def normalize_amount(amount):
    if isinstance(amount, bool):
        raise InvalidLeaf(f"invalid amount: {amount!r}")
    if isinstance(amount, str):
        amount = amount.strip()
        if not (amount.isascii() and amount.isdigit()):
            raise InvalidLeaf(f"amount must be a decimal integer string, got {amount!r}")
        amount = int(amount)
    if not isinstance(amount, int) or not 0 <= amount <= MAX_UINT256:
        raise InvalidLeaf(f"amount out of uint256 range: {amount!r}")
    return amount


class Leaf(NamedTuple):
    account: str
    amount: int

    @classmethod
    def create(cls, account, amount):
        return cls(normalize_account(account), normalize_amount(amount))

    @classmethod
    def coerce(cls, value):
        """Accepts a ``Leaf``, an ``{account, amount}`` mapping or a pair."""
        if isinstance(value, Leaf):
            return value
        if isinstance(value, dict):
            try:
                return cls.create(value["account"], value["amount"])
            except KeyError as exc:
                raise InvalidLeaf(f"leaf is missing {exc.args[0]!r}") from None
        try:
            account, amount = value
        except (TypeError, ValueError):
            raise InvalidLeaf(f"cannot interpret {value!r} as a leaf") from None
        return cls.create(account, amount)

    def to_json(self):
        return {"account": self.account, "amount": str(self.amount)}


def hash_leaf(leaf):
    leaf = Leaf.coerce(leaf)
    return Web3.keccak(encode_packed(["address", "uint256"], [leaf.account, leaf.amount]))


def combined_hash(a, b):
    if a is None:
        return b
    if b is None:
        return a
    return Web3.keccak(b"".join(sorted([a, b])))


def _as_bytes(value):
    if isinstance(value, str):
        return to_bytes(hexstr=value)
    return bytes(value)


def verify_proof(root, leaf_hash, proof):
    """True when walking ``proof`` up from ``leaf_hash`` reproduces ``root``."""
    computed = _as_bytes(leaf_hash)
    for sibling in proof:
        computed = combined_hash(computed, _as_bytes(sibling))
    return computed == _as_bytes(root)


class MerkleTree:
    def __init__(self, leaves):
        leaves = [Leaf.coerce(leaf) for leaf in leaves]
        if not leaves:
            raise EmptyTree()
        seen = set()
        for leaf in leaves:
            if leaf.account in seen:
                raise DuplicateLeaf(leaf.account)
            seen.add(leaf.account)

        hashed = {hash_leaf(leaf): leaf for leaf in leaves}
        self.elements = sorted(hashed)
        self.leaves = [hashed[el] for el in self.elements]
        self._positions = {el: idx for idx, el in enumerate(self.elements)}
        self.layers = MerkleTree.get_layers(self.elements)
        logger.debug("built merkle tree with %d leaves, root %s", len(self), self.hex_root)

    def __len__(self):
        return len(self.elements)

    def __contains__(self, leaf):
        return hash_leaf(leaf) in self._positions

    @property
    def root(self):
        return self.layers[-1][0]

    @property
    def hex_root(self):
        return encode_hex(self.root)

    def get_proof(self, leaf):
        el = hash_leaf(leaf)
        idx = self._positions.get(el)
        if idx is None:
            logger.warning("leaf %s is not part of the tree, returning an empty proof", Leaf.coerce(leaf))
            return []
        proof = []
        for layer in self.layers:
            pair_idx = idx + 1 if idx % 2 == 0 else idx - 1
            if pair_idx < len(layer):
                proof.append(encode_hex(layer[pair_idx]))
            idx //= 2
        return proof

    def verify(self, leaf, proof):
        return verify_proof(self.root, hash_leaf(leaf), proof)

    @staticmethod
    def get_layers(elements):
        layers = [elements]
        while len(layers[-1]) > 1:
            layers.append(MerkleTree.get_next_layer(layers[-1]))
        return layers

    @staticmethod
    def get_next_layer(elements):
        return [combined_hash(a, b) for a, b in zip_longest(elements[::2], elements[1::2])]


def build_tree(leaves):
    return MerkleTree(leaves)


def calculate_merkle_tree(leaves, progress=False):
    """Distribution document: root, token total and a proof per account."""
    tree = MerkleTree(leaves)
    claims = {}
    for leaf in tqdm(tree.leaves, desc="proofs", disable=not progress):
        claims[leaf.account] = {"amount": str(leaf.amount), "proof": tree.get_proof(leaf)}
    distribution = {
        "merkleRoot": tree.hex_root,
        "tokenTotal": str(sum(leaf.amount for leaf in tree.leaves)),
        "claims": claims,
    }
    logger.info("merkle root: %s", tree.hex_root)
    return distribution
