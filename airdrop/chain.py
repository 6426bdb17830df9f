"""
In-process ledger hosting the airdrop contracts.

The chain serializes every state transition: a contract call either applies
completely or, when it reverts, leaves every contract's storage and the event
log exactly as they were. Calls follow the brownie convention of a trailing
transaction dict naming the sender::

    claimer = chain.deploy(MerkleClaimer, token, root, time_limit, {"from": owner})
    claimer.claim(amount, proof, {"from": account})
"""
import logging
import time
from collections import Counter
from functools import wraps
from typing import NamedTuple

from eth_abi.packed import encode_packed
from web3 import Web3

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x" + "00" * 20
ZERO_HASH = "0x" + "00" * 32

_MISSING = object()


class Account:
    def __init__(self, address):
        self.address = Web3.to_checksum_address(address)

    def __repr__(self):
        return f"<Account {self.address}>"

    def __str__(self):
        return self.address

    def __eq__(self, other):
        try:
            return self.address == to_address(other)
        except ValueError:
            return NotImplemented

    def __hash__(self):
        return hash(self.address)


def to_address(value):
    """Checksummed address of an account, a contract or an address string."""
    value = getattr(value, "address", value)
    if not isinstance(value, str) or not Web3.is_address(value):
        raise ValueError(f"not an address: {value!r}")
    return Web3.to_checksum_address(value)


class Event(NamedTuple):
    name: str
    address: str
    args: dict


class TransactionReceipt(NamedTuple):
    sender: str
    fn_name: str
    block_number: int
    timestamp: int
    events: list
    return_value: object = None

    def find(self, name):
        return [event.args for event in self.events if event.name == name]


class Snapshot(NamedTuple):
    storage: dict
    contracts: frozenset
    events: int


class Storage(dict):
    """
    Contract storage. Every write made inside a transaction is journaled on
    the chain with the value it replaced, so a revert only undoes what the
    reverted call actually touched. Nested dicts are wrapped on assignment.
    """

    def __init__(self, chain, *args, **kwargs):
        super().__init__()
        self._chain = chain
        self.update(*args, **kwargs)

    def __setitem__(self, key, value):
        if isinstance(value, dict) and not isinstance(value, Storage):
            value = Storage(self._chain, value)
        self._chain.journal(self, key, self.get(key, _MISSING))
        super().__setitem__(key, value)

    def __delitem__(self, key):
        self._chain.journal(self, key, self[key])
        super().__delitem__(key)

    def update(self, *args, **kwargs):
        for key, value in dict(*args, **kwargs).items():
            self[key] = value

    def setdefault(self, key, default=None):
        if key not in self:
            self[key] = default
        return self[key]

    def pop(self, key, *default):
        if key in self:
            value = self[key]
            del self[key]
            return value
        return super().pop(key, *default)


def _plain(value):
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value


def split_tx(args, fn_name):
    if not args or not isinstance(args[-1], dict) or "from" not in args[-1]:
        raise TypeError(f"{fn_name}: the last argument must be a transaction dict with a 'from' key")
    return args[:-1], args[-1]


def external(fn):
    """Runs a contract method as a transaction sent by ``tx['from']``."""

    @wraps(fn)
    def wrapper(self, *args):
        args, tx = split_tx(args, fn.__name__)
        sender = to_address(tx["from"])
        return self.chain.transact(fn.__name__, sender, lambda: fn(self, sender, *args))

    return wrapper


class Contract:
    def __init__(self, chain, address, deployer):
        self.chain = chain
        self.address = address
        self.deployer = deployer
        self.tx = None
        self._storage = Storage(chain)

    def __repr__(self):
        return f"<{type(self).__name__} {self.address}>"

    def __str__(self):
        return self.address

    def constructor(self, deployer, *args):
        pass

    def now(self):
        return self.chain.time()

    def emit(self, name, **args):
        self.chain.log(Event(name, self.address, args))


class Chain:
    def __init__(self, timestamp=None, accounts=10):
        self._time = int(time.time()) if timestamp is None else int(timestamp)
        self.height = 0
        self.accounts = [Account(Web3.keccak(text=f"account:{idx}")[12:]) for idx in range(accounts)]
        self.history = []
        self._contracts = {}
        self._nonces = Counter()
        self._events = []
        self._depth = 0
        self._journal = []

    def __repr__(self):
        return f"<Chain height={self.height} time={self._time}>"

    # Clock

    def time(self):
        return self._time

    def sleep(self, seconds):
        if seconds < 0:
            raise ValueError("cannot sleep a negative amount of time")
        self._time += int(seconds)

    def mine(self, blocks=1, timestamp=None):
        if timestamp is not None:
            if timestamp < self._time:
                raise ValueError(f"cannot mine at {timestamp}, chain time is already {self._time}")
            self._time = int(timestamp)
        self.height += blocks
        return self.height

    # Accounts and contracts

    def add_account(self, address):
        account = Account(address)
        if account not in self.accounts:
            self.accounts.append(account)
        return account

    def at(self, address):
        address = to_address(address)
        try:
            return self._contracts[address]
        except KeyError:
            raise ValueError(f"no contract deployed at {address}") from None

    def is_contract(self, address):
        return to_address(address) in self._contracts

    def _next_address(self, sender):
        nonce = self._nonces[sender]
        self._nonces[sender] += 1
        return Web3.to_checksum_address(Web3.keccak(encode_packed(["address", "uint256"], [sender, nonce]))[12:])

    def deploy(self, contract_class, *args):
        args, tx = split_tx(args, f"{contract_class.__name__}.deploy")
        sender = to_address(tx["from"])
        contract = contract_class(self, self._next_address(sender), sender)

        def construct():
            self.journal(self._contracts, contract.address, _MISSING)
            self._contracts[contract.address] = contract
            contract.constructor(sender, *args)

        contract.tx = self.transact("constructor", sender, construct)
        logger.info("%s deployed at %s", contract_class.__name__, contract.address)
        return contract

    # Transactions

    def log(self, event):
        self._events.append(event)

    def journal(self, mapping, key, old):
        if self._depth:
            self._journal.append((mapping, key, old))

    def _undo(self, mark):
        while len(self._journal) > mark:
            mapping, key, old = self._journal.pop()
            if old is _MISSING:
                dict.pop(mapping, key, None)
            else:
                dict.__setitem__(mapping, key, old)

    def snapshot(self):
        """Copy of the whole ledger, for tests and what-if runs."""
        return Snapshot(
            storage={address: _plain(contract._storage) for address, contract in self._contracts.items()},
            contracts=frozenset(self._contracts),
            events=len(self._events),
        )

    def revert(self, snapshot):
        for address in set(self._contracts) - snapshot.contracts:
            del self._contracts[address]
        for address, storage in snapshot.storage.items():
            self._contracts[address]._storage = Storage(self, storage)
        del self._events[snapshot.events:]

    def transact(self, fn_name, sender, call):
        outermost = self._depth == 0
        journal_mark, events_mark = len(self._journal), len(self._events)
        self._depth += 1
        try:
            result = call()
        except Exception as exc:
            self._undo(journal_mark)
            del self._events[events_mark:]
            logger.debug("%s from %s reverted: %s", fn_name, sender, exc)
            raise
        finally:
            self._depth -= 1
        if not outermost:
            return result
        self._journal.clear()
        self.height += 1
        receipt = TransactionReceipt(
            sender=sender,
            fn_name=fn_name,
            block_number=self.height,
            timestamp=self._time,
            events=self._events[events_mark:],
            return_value=result,
        )
        self.history.append(receipt)
        return receipt
