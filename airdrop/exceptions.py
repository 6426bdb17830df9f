class AirdropError(Exception):
    pass


# Tree building

class LeafError(AirdropError, ValueError):
    pass


class InvalidLeaf(LeafError):
    pass


class DuplicateLeaf(LeafError):
    def __init__(self, account):
        super().__init__(f"duplicate leaf for account {account}")
        self.account = account


class EmptyTree(LeafError):
    def __init__(self):
        super().__init__("cannot build a merkle tree without leaves")


class ConfigError(AirdropError, ValueError):
    pass


# Contract reverts

class ContractRevert(AirdropError):
    """A reverted contract call. ``revert_msg`` is what the VM would report."""

    revert_msg = None

    def __init__(self, revert_msg=None):
        if revert_msg is not None:
            self.revert_msg = revert_msg
        if self.revert_msg is None:
            self.revert_msg = type(self).__name__
        super().__init__(self.revert_msg)


class DeploymentError(ContractRevert):
    pass


class ProofError(ContractRevert):
    pass


class StateError(ContractRevert):
    pass


class AccessError(ContractRevert):
    pass


class TransferError(ContractRevert):
    pass


class InvalidTokenAddress(DeploymentError):
    pass


class InvalidMerkleRoot(DeploymentError):
    pass


class InvalidTimeLimit(DeploymentError):
    pass


class PastVestingStart(DeploymentError):
    pass


class InvalidVestingDuration(DeploymentError):
    pass


class InvalidCliff(DeploymentError):
    pass


class InvalidReleaseTimeLimit(DeploymentError):
    pass


class InvalidProof(ProofError):
    pass


class InvalidMerkleProof(ProofError):
    pass


class TimeLimitReached(StateError):
    pass


class AlreadyClaimed(StateError):
    pass


class TooEarly(StateError):
    pass


class ReleaseTimeLimitReached(StateError):
    pass


class NothingToRelease(StateError):
    pass


class ReleaseTimeLimitNotYetReached(StateError):
    pass


class NothingToConvert(StateError):
    pass


class InconsistentArrayLengths(StateError):
    pass


class NotOwner(AccessError):
    revert_msg = "Ownable: caller is not the owner"


class InsufficientBalance(TransferError):
    revert_msg = "ERC20: transfer amount exceeds balance"


class InsufficientAllowance(TransferError):
    revert_msg = "ERC20: transfer amount exceeds allowance"


class ZeroAddressTransfer(TransferError):
    revert_msg = "ERC20: transfer to the zero address"


class InvalidAmount(TransferError):
    revert_msg = "ERC20: amount out of uint256 range"
