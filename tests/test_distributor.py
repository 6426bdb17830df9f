import pytest
from web3 import Web3

from airdrop.chain import ZERO_ADDRESS
from airdrop.contracts import Distributor
from airdrop.exceptions import (
    InconsistentArrayLengths,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    InvalidTokenAddress,
    NotOwner,
)

ETHER = 10**18


@pytest.fixture
def distributor(chain, owner, token):
    return chain.deploy(Distributor, token, {"from": owner})


def test_deploy_with_zero_token_address(chain, owner):
    with pytest.raises(InvalidTokenAddress):
        chain.deploy(Distributor, ZERO_ADDRESS, {"from": owner})


def test_distribute_by_non_owner(distributor, claimer_account):
    with pytest.raises(NotOwner, match="Ownable: caller is not the owner"):
        distributor.distribute(10 * ETHER, [], [], {"from": claimer_account})


def test_distribute_without_allowance(distributor, owner):
    with pytest.raises(InsufficientAllowance, match="ERC20: transfer amount exceeds allowance"):
        distributor.distribute(10 * ETHER, [], [], {"from": owner})


def test_distribute_with_mismatched_lists(distributor, owner, claimer_account):
    with pytest.raises(InconsistentArrayLengths):
        distributor.distribute(10, [claimer_account], [5, 5], {"from": owner})


def test_distribute(distributor, token, owner, claimer_account):
    amount = 10 * ETHER
    token.approve(distributor, amount, {"from": owner})
    assert token.balanceOf(claimer_account) == 0

    tx = distributor.distribute(amount, [claimer_account], [amount], {"from": owner})

    assert token.balanceOf(claimer_account) == amount
    assert token.balanceOf(distributor) == 0
    assert token.allowance(owner, distributor) == 0
    assert tx.find("Distributed") == [{"amount": amount, "recipients": 1}]


def test_distribute_to_many_accounts(distributor, token, owner):
    recipients = [Web3.to_checksum_address(Web3.keccak(text=f"recipient:{i}")[12:]) for i in range(250)]
    amounts = [(i + 1) * 123456789 for i in range(250)]
    total = sum(amounts)
    token.approve(distributor, total, {"from": owner})

    distributor.distribute(total, recipients, amounts, {"from": owner})

    for recipient, amount in zip(recipients, amounts):
        assert token.balanceOf(recipient) == amount
    assert token.balanceOf(distributor) == 0


def test_overspending_rolls_back_everything(distributor, token, owner, accounts):
    owner_balance = token.balanceOf(owner)
    token.approve(distributor, 100, {"from": owner})

    with pytest.raises(InsufficientBalance):
        distributor.distribute(100, [accounts[2], accounts[3]], [60, 60], {"from": owner})

    assert token.balanceOf(accounts[2]) == 0
    assert token.balanceOf(distributor) == 0
    assert token.balanceOf(owner) == owner_balance
    assert token.allowance(owner, distributor) == 100


def test_negative_amount_entry_reverts(distributor, token, owner, accounts):
    victim = accounts[2]
    token.transfer(victim, 500, {"from": owner})
    token.approve(distributor, 100, {"from": owner})

    with pytest.raises(InvalidAmount):
        distributor.distribute(100, [victim, accounts[3]], [-500, 600], {"from": owner})

    assert token.balanceOf(victim) == 500
    assert token.balanceOf(accounts[3]) == 0
    assert token.allowance(owner, distributor) == 100


def test_reverted_distribution_leaves_no_new_balance_entries(distributor, token, owner, accounts):
    holders = len(token._storage["balances"])
    token.approve(distributor, 100, {"from": owner})
    with pytest.raises(InsufficientBalance):
        distributor.distribute(100, [accounts[2], accounts[3]], [60, 60], {"from": owner})
    assert len(token._storage["balances"]) == holders
    assert accounts[2].address not in token._storage["balances"]
