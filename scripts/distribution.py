import json

from airdrop.chain import Chain
from airdrop.config import Config
from airdrop.contracts import MerkleClaimer, Token

CLAIM_WINDOW = 30 * 24 * 60 * 60


def main(chain=None):
    with open("snapshot/merkles.json") as fp:
        rootTree = json.load(fp)

    config = Config.load()
    chain = chain or Chain()
    owner = chain.accounts[0]
    claimTimeLimit = config.claim_time_limit or chain.time() + CLAIM_WINDOW

    claimers = {}
    for tokenSymbol in rootTree:
        print('token', tokenSymbol)
        tree = rootTree[tokenSymbol]
        amount = int(tree['tokenTotal'])
        token = chain.deploy(Token, tokenSymbol, tokenSymbol, 0, owner, {'from': owner})
        ownerBalance = token.balanceOf(owner)
        if ownerBalance < amount:
            print("Minting", tokenSymbol, amount - ownerBalance)
            token.mint(owner, amount - ownerBalance, {'from': owner})
        print("Deploying merkle claimer", tokenSymbol, token.address, tree['merkleRoot'])
        claimer = chain.deploy(MerkleClaimer, token, tree['merkleRoot'], claimTimeLimit, {'from': owner})
        token.transfer(claimer, amount, {'from': owner})
        claimers[tokenSymbol] = claimer
    return claimers
