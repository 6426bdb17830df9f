import logging

from airdrop.chain import external, to_address
from airdrop.contracts.claimer import MerkleGated
from airdrop.exceptions import (
    InvalidCliff,
    InvalidMerkleProof,
    InvalidReleaseTimeLimit,
    InvalidVestingDuration,
    NothingToRelease,
    PastVestingStart,
    ReleaseTimeLimitNotYetReached,
    ReleaseTimeLimitReached,
)

logger = logging.getLogger(__name__)


class VestedMerkleClaimer(MerkleGated):
    """
    Airdrop claims released over time.

    Half of each allocation is unlocked right away. The other half vests
    linearly from ``start`` to ``start + duration`` and none of it can be
    released before ``cliff``. ``released`` tracks what each account got so
    far, so ``release`` can be called repeatedly until ``releaseTimeLimit``.
    """

    def constructor(self, deployer, token, merkle_root, release_time_limit, start, duration, cliff):
        self._setup(deployer, token, merkle_root)
        if start < self.now():
            raise PastVestingStart()
        if duration <= 0:
            raise InvalidVestingDuration()
        if not start <= cliff <= start + duration:
            raise InvalidCliff()
        if release_time_limit < start + duration:
            raise InvalidReleaseTimeLimit()
        self._release_time_limit = release_time_limit
        self._start = start
        self._duration = duration
        self._cliff = cliff
        self._storage["released"] = {}

    def releaseTimeLimit(self):
        return self._release_time_limit

    def start(self):
        return self._start

    def duration(self):
        return self._duration

    def cliff(self):
        return self._cliff

    def released(self, account):
        return self._storage["released"].get(to_address(account), 0)

    def vestedAmount(self, amount, timestamp=None):
        """Portion of ``amount`` releasable in total at ``timestamp``."""
        if timestamp is None:
            timestamp = self.now()
        unlocked = amount // 2
        locked = amount - unlocked
        if timestamp < self._cliff:
            return unlocked
        vested = min(locked, locked * (timestamp - self._start) // self._duration)
        return unlocked + vested

    def releasableAmount(self, account, amount):
        return max(self.vestedAmount(amount) - self.released(account), 0)

    @external
    def release(self, sender, amount, proof):
        if self.now() > self._release_time_limit:
            raise ReleaseTimeLimitReached()
        if not self._is_valid_claim(sender, amount, proof):
            raise InvalidMerkleProof()
        due = self.releasableAmount(sender, amount)
        if due == 0:
            raise NothingToRelease()
        self._storage["released"][sender] = self.released(sender) + due
        self._token_contract().transfer(sender, due, {"from": self})
        self.emit("Released", account=sender, amount=due)
        logger.debug("%s released %d of %d to %s", self, due, amount, sender)
        return due

    @external
    def recover(self, sender):
        self._only_owner(sender)
        if self.now() <= self._release_time_limit:
            raise ReleaseTimeLimitNotYetReached()
        return self._sweep()
