import argparse
import json
import logging
import sys
from pathlib import Path

from tqdm import tqdm

from airdrop.chain import Chain
from airdrop.config import Config
from airdrop.contracts import MerkleClaimer, Token, VestedMerkleClaimer
from airdrop.exceptions import AirdropError
from airdrop.leaves import load_leaves
from airdrop.merkle import Leaf, MerkleTree, calculate_merkle_tree, hash_leaf, verify_proof

DAY = 24 * 60 * 60


def cmd_build(args, config):
    distribution = calculate_merkle_tree(load_leaves(args.leaves or config.leaves_file), progress=True)
    out = Path(args.out or config.output_dir / "merkle-distribution.json")
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(distribution, indent=2))
    print("merkle root:", distribution["merkleRoot"])
    print("token total:", distribution["tokenTotal"])
    print("claims:", len(distribution["claims"]))
    print("wrote", out)


def cmd_root(args, config):
    print(MerkleTree(load_leaves(args.leaves or config.leaves_file)).hex_root)


def cmd_proof(args, config):
    tree = MerkleTree(load_leaves(args.leaves or config.leaves_file))
    leaf = Leaf.create(args.account, args.amount)
    if leaf not in tree:
        print("leaf not found in the tree", file=sys.stderr)
        return 1
    print(json.dumps(tree.get_proof(leaf), indent=2))


def cmd_verify(args, config):
    distribution = json.loads(Path(args.distribution).read_text())
    leaf = Leaf.create(args.account, args.amount)
    claim = distribution["claims"].get(leaf.account)
    if claim is None:
        print("account not in claims")
        return 1
    if int(claim["amount"]) != leaf.amount:
        print("amount mismatch, expected:", claim["amount"])
        return 1
    valid = verify_proof(distribution["merkleRoot"], hash_leaf(leaf), claim["proof"])
    print("valid proof:", valid)
    return 0 if valid else 1


def cmd_simulate(args, config):
    tree = MerkleTree(load_leaves(args.leaves or config.leaves_file))
    token_total = sum(leaf.amount for leaf in tree.leaves)
    funding = args.funding or config.claimer_funding or token_total

    chain = Chain()
    deployer = chain.accounts[0]
    token = chain.deploy(Token, "Airdrop", "DROP", funding, deployer, {"from": deployer})
    now = chain.time()
    if args.vested:
        start = now
        end = start + args.duration
        claimer = chain.deploy(
            VestedMerkleClaimer, token, tree.hex_root, end + args.time_limit, start, args.duration,
            start + args.cliff, {"from": deployer},
        )
    else:
        claimer = chain.deploy(MerkleClaimer, token, tree.hex_root, now + args.time_limit, {"from": deployer})
    token.transfer(claimer, funding, {"from": deployer})
    print(f"token deployed at address {token.address}")
    print(f"claimer deployed at address {claimer.address}, funded with {funding}")

    def payout(claim):
        for leaf in tqdm(tree.leaves, desc=claim):
            account = chain.add_account(leaf.account)
            if args.vested and not claimer.releasableAmount(account, leaf.amount):
                continue
            getattr(claimer, claim)(leaf.amount, tree.get_proof(leaf), {"from": account})

    if args.vested:
        payout("release")
        chain.mine(timestamp=end)
        payout("release")
    else:
        payout("claim")

    remaining = token.balanceOf(claimer)
    print(f"distributed {funding - remaining} to {len(tree)} accounts, {remaining} left in the claimer")


def get_parser():
    parser = argparse.ArgumentParser(prog="airdrop", description="Merkle airdrop tooling (sorted pairs)")
    parser.add_argument("--config", help="path to airdrop.toml")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p = sub.add_parser("build", help="write the merkle distribution for a leaves file")
    p.add_argument("--leaves")
    p.add_argument("--out")
    p.set_defaults(func=cmd_build)

    p = sub.add_parser("root", help="print the merkle root of a leaves file")
    p.add_argument("--leaves")
    p.set_defaults(func=cmd_root)

    p = sub.add_parser("proof", help="print the proof for one leaf")
    p.add_argument("--leaves")
    p.add_argument("--account", required=True)
    p.add_argument("--amount", required=True)
    p.set_defaults(func=cmd_proof)

    p = sub.add_parser("verify", help="verify a claim against a distribution file")
    p.add_argument("--distribution", required=True)
    p.add_argument("--account", required=True)
    p.add_argument("--amount", required=True)
    p.set_defaults(func=cmd_verify)

    p = sub.add_parser("simulate", help="deploy, fund and drain a claimer on a local chain")
    p.add_argument("--leaves")
    p.add_argument("--vested", action="store_true")
    p.add_argument("--funding", type=int)
    p.add_argument("--time-limit", type=int, default=30 * DAY, help="seconds the claim window stays open")
    p.add_argument("--duration", type=int, default=365 * DAY, help="vesting duration in seconds")
    p.add_argument("--cliff", type=int, default=0, help="cliff offset from the vesting start, in seconds")
    p.set_defaults(func=cmd_simulate)
    return parser


def main(argv=None):
    args = get_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = Config.load(args.config)
        return args.func(args, config) or 0
    except AirdropError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
