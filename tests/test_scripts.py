import json

import pytest
import toml
from web3 import Web3

from airdrop.chain import Chain
from airdrop.exceptions import DuplicateLeaf
from airdrop.merkle import Leaf, MerkleTree
from scripts import distribution, snapshot

ALICE = "0x00000000000000000000000000000000000abcde"
BOB = "0x2222222222222222222222222222222222222222"
CAROL = "0x3333333333333333333333333333333333333333"


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AIRDROP_CONFIG", str(tmp_path / "missing.toml"))
    (tmp_path / "snapshot").mkdir()
    (tmp_path / "snapshot" / "balances.toml").write_text(
        toml.dumps(
            {
                "SWPR": {"lps": {ALICE: 100, BOB: 50}, "voters": {ALICE: 25, CAROL: 0}},
                "DXD": {"holders": {BOB: 10**21}},
            }
        )
    )
    return tmp_path


def test_snapshot(workdir):
    merkles = snapshot.main()

    assert set(merkles) == {"SWPR", "DXD"}
    expected = MerkleTree([Leaf.create(ALICE, 125), Leaf.create(BOB, 50)])
    assert merkles["SWPR"]["merkleRoot"] == expected.hex_root
    assert merkles["SWPR"]["tokenTotal"] == "175"
    assert merkles["DXD"]["tokenTotal"] == str(10**21)
    assert (workdir / "snapshot" / "merkle-swpr-distribution.json").exists()
    assert json.loads((workdir / "snapshot" / "merkles.json").read_text()) == merkles


def test_snapshot_is_served_from_cache(workdir):
    first = snapshot.main()
    (workdir / "snapshot" / "balances.toml").write_text("")
    assert snapshot.main() == first


def test_distribution(workdir):
    merkles = snapshot.main()
    chain = Chain()
    claimers = distribution.main(chain)

    claimer = claimers["SWPR"]
    token = chain.at(claimer.token())
    assert claimer.merkleRoot() == merkles["SWPR"]["merkleRoot"]
    assert token.balanceOf(claimer) == 175

    alice = chain.add_account(ALICE)
    claim = merkles["SWPR"]["claims"][alice.address]
    claimer.claim(int(claim["amount"]), claim["proof"], {"from": alice})
    assert token.balanceOf(alice) == 125


def test_duplicate_accounts_abort_the_token_merkle(workdir):
    balances = {ALICE: 50, ALICE.upper().replace("0X", "0x"): 10, CAROL: 5}
    with pytest.raises(DuplicateLeaf) as exc_info:
        snapshot.calculate_token_merkle("SWPR", balances)
    assert exc_info.value.account == Web3.to_checksum_address(ALICE)
    assert not (workdir / "snapshot" / "merkle-swpr-distribution.json").exists()
