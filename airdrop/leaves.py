"""
Leaves file handling.

The leaves file is a JSON array of ``{"account": "0x...", "amount": "123"}``
objects, amounts as decimal strings. Several allocation sources can be folded
into one list with :func:`merge_allocations` before building the tree.
"""
import json
import logging
from collections import Counter
from pathlib import Path

from toolz import valfilter

from airdrop.exceptions import InvalidLeaf
from airdrop.merkle import Leaf, normalize_account, normalize_amount

logger = logging.getLogger(__name__)


def parse_leaves(entries):
    if not isinstance(entries, list):
        raise InvalidLeaf("leaves must be a JSON array")
    leaves = []
    for index, entry in enumerate(entries):
        try:
            leaves.append(Leaf.coerce(entry))
        except InvalidLeaf as exc:
            raise InvalidLeaf(f"leaf #{index}: {exc}") from None
    return leaves


def load_leaves(path):
    path = Path(path)
    leaves = parse_leaves(json.loads(path.read_text()))
    logger.info("loaded %d leaves from %s", len(leaves), path)
    return leaves


def dump_leaves(leaves, path):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps([Leaf.coerce(leaf).to_json() for leaf in leaves], indent=2))


def leaves_from_balances(balances):
    """``{address: amount}`` to leaves, zero balances dropped."""
    balances = valfilter(bool, {account: normalize_amount(amount) for account, amount in balances.items()})
    return [Leaf.create(account, amount) for account, amount in balances.items()]


def merge_allocations(*sources):
    """Sum per-account allocations coming from several sources."""
    total = Counter()
    for source in sources:
        for account, amount in source.items():
            total[normalize_account(account)] += normalize_amount(amount)
    return dict(total.most_common())


def find_duplicates(leaves):
    counts = Counter(Leaf.coerce(leaf).account for leaf in leaves)
    return sorted(account for account, count in counts.items() if count > 1)
