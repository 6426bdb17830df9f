from airdrop.contracts.claimer import MerkleClaimer
from airdrop.contracts.converter import Converter
from airdrop.contracts.distributor import Distributor
from airdrop.contracts.token import Token
from airdrop.contracts.vested_claimer import VestedMerkleClaimer

__all__ = ["Converter", "Distributor", "MerkleClaimer", "Token", "VestedMerkleClaimer"]
