from airdrop.chain import ZERO_ADDRESS, Contract, external, to_address
from airdrop.exceptions import InvalidTokenAddress, NothingToConvert


class Converter(Contract):
    """
    1:1 swap from an old token to a new one.

    Anyone can trigger the conversion for an account that approved the
    converter: its whole old-token balance is pulled in and the same amount
    of new token is paid out of the converter's own reserve.
    """

    def constructor(self, deployer, old_token, new_token):
        tokens = []
        for token in (old_token, new_token):
            try:
                token = to_address(token)
            except ValueError:
                raise InvalidTokenAddress() from None
            if token == ZERO_ADDRESS:
                raise InvalidTokenAddress()
            tokens.append(token)
        self._old_token, self._new_token = tokens

    def oldToken(self):
        return self._old_token

    def newToken(self):
        return self._new_token

    @external
    def convert(self, sender, account):
        account = to_address(account)
        old_token = self.chain.at(self._old_token)
        amount = old_token.balanceOf(account)
        if amount == 0:
            raise NothingToConvert()
        old_token.transferFrom(account, self, amount, {"from": self})
        self.chain.at(self._new_token).transfer(account, amount, {"from": self})
        self.emit("Converted", account=account, amount=amount)
        return amount
