from airdrop.chain import ZERO_ADDRESS, Contract, external, to_address
from airdrop.exceptions import InconsistentArrayLengths, InvalidTokenAddress, NotOwner


class Distributor(Contract):
    """Push-based batch transfers, paid from the owner's allowance."""

    def constructor(self, deployer, token):
        try:
            token = to_address(token)
        except ValueError:
            raise InvalidTokenAddress() from None
        if token == ZERO_ADDRESS:
            raise InvalidTokenAddress()
        self._token = token
        self._owner = deployer

    def token(self):
        return self._token

    def owner(self):
        return self._owner

    @external
    def distribute(self, sender, total_amount, accounts, amounts):
        if sender != self._owner:
            raise NotOwner()
        if len(accounts) != len(amounts):
            raise InconsistentArrayLengths()
        token = self.chain.at(self._token)
        token.transferFrom(sender, self, total_amount, {"from": self})
        for account, amount in zip(accounts, amounts):
            token.transfer(account, amount, {"from": self})
        self.emit("Distributed", amount=total_amount, recipients=len(accounts))
