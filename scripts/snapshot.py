import json
from pathlib import Path

import toml
from toolz import valfilter, valmap

from airdrop.cache import cached
from airdrop.exceptions import DuplicateLeaf
from airdrop.leaves import find_duplicates, leaves_from_balances, merge_allocations
from airdrop.merkle import calculate_merkle_tree

# Per-token allocation sources: {token: {source: {account: amount}}}
BALANCES_FILE = Path("snapshot/balances.toml")


# Sorting
def sortBalances(balances):
    return dict(sorted(balances.items(), key=lambda item: item[1], reverse=True))


@cached("snapshot/01-balances-combined.toml")
def step_01():
    print("step 01. combine allocation sources")
    sources = toml.loads(BALANCES_FILE.read_text())
    allBalances = {}
    for token, tokenSources in sources.items():
        print("Token", token, "sources:", ", ".join(tokenSources))
        allBalances[token] = merge_allocations(*tokenSources.values())
    return allBalances


@cached("snapshot/02-balances-filtered.toml")
def step_02(allBalances):
    print("step 02. drop empty balances")
    allBalances = valmap(lambda balances: sortBalances(valfilter(bool, balances)), allBalances)
    for token, balances in allBalances.items():
        print("Token", token, "accounts:", len(balances), "total:", sum(balances.values()))
    return valfilter(bool, allBalances)


def calculate_token_merkle(token, balances):
    leaves = leaves_from_balances(balances)
    duplicates = find_duplicates(leaves)
    if duplicates:
        raise DuplicateLeaf(duplicates[0])
    distribution = calculate_merkle_tree(leaves, progress=True)
    print(f"{token} merkle root: {distribution['merkleRoot']}")
    path = Path(f"snapshot/merkle-{token.lower()}-distribution.json")
    path.write_text(json.dumps(distribution, indent=2))
    return distribution


@cached("snapshot/merkles.json")
def build_merkles(allBalances):
    print("building merkles...")
    return {token: calculate_token_merkle(token, balances) for token, balances in allBalances.items()}


def main():
    combined_balances = step_01()
    filtered_balances = step_02(combined_balances)
    return build_merkles(filtered_balances)
