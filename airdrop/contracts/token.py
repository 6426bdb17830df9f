from airdrop.chain import ZERO_ADDRESS, Contract, external, to_address
from airdrop.exceptions import (
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    NotOwner,
    ZeroAddressTransfer,
)
from airdrop.merkle import MAX_UINT256


def check_amount(amount):
    if isinstance(amount, bool) or not isinstance(amount, int) or not 0 <= amount <= MAX_UINT256:
        raise InvalidAmount()
    return amount


class Token(Contract):
    """ERC20 token. The whole initial supply is minted to ``holder``."""

    def constructor(self, deployer, name, symbol, initial_supply, holder):
        self._name = name
        self._symbol = symbol
        self._owner = deployer
        self._storage.update(balances={}, allowances={}, total_supply=0)
        self._mint(to_address(holder), initial_supply)

    def name(self):
        return self._name

    def symbol(self):
        return self._symbol

    def decimals(self):
        return 18

    def owner(self):
        return self._owner

    def totalSupply(self):
        return self._storage["total_supply"]

    def balanceOf(self, account):
        return self._storage["balances"].get(to_address(account), 0)

    def allowance(self, owner, spender):
        return self._storage["allowances"].get((to_address(owner), to_address(spender)), 0)

    @external
    def transfer(self, sender, to, amount):
        self._transfer(sender, to_address(to), amount)
        return True

    @external
    def approve(self, sender, spender, amount):
        spender = to_address(spender)
        self._storage["allowances"][(sender, spender)] = check_amount(amount)
        self.emit("Approval", owner=sender, spender=spender, value=amount)
        return True

    @external
    def transferFrom(self, sender, owner, to, amount):
        owner = to_address(owner)
        check_amount(amount)
        allowed = self.allowance(owner, sender)
        if allowed < amount:
            raise InsufficientAllowance()
        self._storage["allowances"][(owner, sender)] = allowed - amount
        self._transfer(owner, to_address(to), amount)
        return True

    @external
    def mint(self, sender, to, amount):
        if sender != self._owner:
            raise NotOwner()
        self._mint(to_address(to), amount)

    def _transfer(self, sender, receiver, amount):
        check_amount(amount)
        if receiver == ZERO_ADDRESS:
            raise ZeroAddressTransfer()
        balances = self._storage["balances"]
        if balances.get(sender, 0) < amount:
            raise InsufficientBalance()
        balances[sender] = balances.get(sender, 0) - amount
        balances[receiver] = balances.get(receiver, 0) + amount
        self.emit("Transfer", sender=sender, receiver=receiver, value=amount)

    def _mint(self, receiver, amount):
        check_amount(amount)
        if receiver == ZERO_ADDRESS:
            raise ZeroAddressTransfer("ERC20: mint to the zero address")
        if self._storage["total_supply"] + amount > MAX_UINT256:
            raise InvalidAmount("ERC20: total supply overflow")
        self._storage["total_supply"] += amount
        balances = self._storage["balances"]
        balances[receiver] = balances.get(receiver, 0) + amount
        self.emit("Transfer", sender=ZERO_ADDRESS, receiver=receiver, value=amount)
