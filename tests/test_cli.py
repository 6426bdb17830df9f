import json

import pytest

from airdrop.cli import main
from airdrop.leaves import dump_leaves


@pytest.fixture
def leaves_file(tmp_path, leaves):
    path = tmp_path / "leaves.json"
    dump_leaves(leaves, path)
    return path


@pytest.fixture(autouse=True)
def no_config(monkeypatch, tmp_path):
    monkeypatch.setenv("AIRDROP_CONFIG", str(tmp_path / "missing.toml"))


def test_root(capsys, leaves_file, tree):
    assert main(["root", "--leaves", str(leaves_file)]) == 0
    assert capsys.readouterr().out.strip() == tree.hex_root


def test_build_and_verify(capsys, tmp_path, leaves_file, tree, leaves):
    out = tmp_path / "distribution.json"
    assert main(["build", "--leaves", str(leaves_file), "--out", str(out)]) == 0
    distribution = json.loads(out.read_text())
    assert distribution["merkleRoot"] == tree.hex_root
    assert tree.hex_root in capsys.readouterr().out

    args = ["verify", "--distribution", str(out), "--account", leaves[0].account]
    assert main(args + ["--amount", "100"]) == 0
    assert "valid proof: True" in capsys.readouterr().out
    assert main(args + ["--amount", "101"]) == 1


def test_verify_unknown_account(tmp_path, leaves_file, accounts):
    out = tmp_path / "distribution.json"
    main(["build", "--leaves", str(leaves_file), "--out", str(out)])
    assert main(["verify", "--distribution", str(out), "--account", accounts[9].address, "--amount", "1"]) == 1


def test_proof(capsys, leaves_file, tree, leaves):
    assert main(["proof", "--leaves", str(leaves_file), "--account", leaves[1].account, "--amount", "200"]) == 0
    assert json.loads(capsys.readouterr().out) == tree.get_proof(leaves[1])

    assert main(["proof", "--leaves", str(leaves_file), "--account", leaves[1].account, "--amount", "1"]) == 1


def test_invalid_input_is_reported(capsys, leaves_file):
    assert main(["proof", "--leaves", str(leaves_file), "--account", "0xnope", "--amount", "1"]) == 2
    assert "invalid account address" in capsys.readouterr().err


@pytest.mark.parametrize("extra", [[], ["--vested"], ["--vested", "--cliff", "100", "--duration", "1000"]])
def test_simulate(capsys, leaves_file, extra):
    assert main(["simulate", "--leaves", str(leaves_file)] + extra) == 0
    assert "distributed 1100 to 4 accounts, 0 left in the claimer" in capsys.readouterr().out


def test_simulate_with_extra_funding(capsys, leaves_file):
    assert main(["simulate", "--leaves", str(leaves_file), "--funding", "2000"]) == 0
    assert "900 left in the claimer" in capsys.readouterr().out
