from airdrop.merkle import Leaf, MerkleTree, build_tree, calculate_merkle_tree, combined_hash, hash_leaf, verify_proof

__version__ = "0.1.0"

__all__ = [
    "Leaf",
    "MerkleTree",
    "build_tree",
    "calculate_merkle_tree",
    "combined_hash",
    "hash_leaf",
    "verify_proof",
]
