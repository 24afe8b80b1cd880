from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Optional

from .errors import (
    DuplicateSeed,
    InsufficientFunds,
    InsufficientPayment,
    NotFound,
    NothingToWithdraw,
    SupplyExceeded,
    Unauthorized,
)
from .grid import GridGenerator, HashFn, RawState, check_seed, keccak_uint256
from .project_constants import MAX_SUPPLY, MINT_PRICE

log = logging.getLogger(__name__)


class Balances:
    """Account balances (wei) held by the execution environment."""

    def __init__(self) -> None:
        self._balances: Dict[str, int] = defaultdict(int)

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def credit(self, account: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Cannot credit a negative amount")
        self._balances[account] += amount

    def debit(self, account: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Cannot debit a negative amount")
        if self.balance_of(account) < amount:
            raise InsufficientFunds(
                f"{account} holds {self.balance_of(account)} wei, needs {amount}"
            )
        self._balances[account] -= amount


@dataclass
class TokenRecord:
    owner: str
    seed: Optional[int]


class TokenLedger:
    """Ownership and seed bookkeeping. Ids are sequential from 1."""

    def __init__(self) -> None:
        self.tokens: Dict[int, TokenRecord] = {}
        self._seed_to_token: Dict[int, int] = {}

    @property
    def total_supply(self) -> int:
        return len(self.tokens)

    def next_token_id(self) -> int:
        return self.total_supply + 1

    def seed_in_use(self, seed: int) -> bool:
        return seed in self._seed_to_token

    def mint(self, recipient: str, seed: Optional[int] = None) -> int:
        if seed is not None and self.seed_in_use(seed):
            raise DuplicateSeed(f"Seed {seed} already used by token {self._seed_to_token[seed]}")
        token_id = self.next_token_id()
        self.tokens[token_id] = TokenRecord(owner=recipient, seed=seed)
        if seed is not None:
            self._seed_to_token[seed] = token_id
        return token_id

    def _record(self, token_id: int) -> TokenRecord:
        record = self.tokens.get(token_id)
        if record is None:
            raise NotFound(f"Token {token_id} does not exist")
        return record

    def exists(self, token_id: int) -> bool:
        return token_id in self.tokens

    def owner_of(self, token_id: int) -> str:
        return self._record(token_id).owner

    def balance_of(self, account: str) -> int:
        return sum(1 for r in self.tokens.values() if r.owner == account)

    def seed_of(self, token_id: int) -> int:
        seed = self._record(token_id).seed
        if seed is None:
            raise NotFound(f"Token {token_id} was minted without a seed")
        return seed

    def transfer(self, sender: str, recipient: str, token_id: int) -> None:
        record = self._record(token_id)
        if record.owner != sender:
            raise Unauthorized(f"{sender} does not own token {token_id}")
        record.owner = recipient


class PullPayments:
    """Escrowed balances that payees claim with an explicit withdrawal."""

    def __init__(self) -> None:
        self._deposits: Dict[str, int] = defaultdict(int)

    def payments(self, payee: str) -> int:
        return self._deposits.get(payee, 0)

    def async_transfer(self, payee: str, amount: int) -> None:
        self._deposits[payee] += amount

    def withdraw(self, payee: str, balances: Balances) -> int:
        amount = self.payments(payee)
        if amount <= 0:
            raise NothingToWithdraw(f"No pending payment for {payee}")
        self._deposits[payee] = 0
        balances.credit(payee, amount)
        return amount


class Ownable:
    def __init__(self, owner: str) -> None:
        self.owner = owner

    def is_owner(self, account: str) -> bool:
        return account == self.owner

    def require_owner(self, caller: str) -> None:
        if not self.is_owner(caller):
            raise Unauthorized(f"{caller} is not the contract owner")

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self.require_owner(caller)
        if not new_owner:
            raise ValueError("New owner must be a non-empty account")
        self.owner = new_owner


class NFTContract:
    """
    Reference in-memory NFT collection.

    Every state-changing call validates all of its preconditions before
    touching any state, so a failed call leaves the contract unchanged.
    """

    def __init__(
        self,
        deployer: str,
        balances: Optional[Balances] = None,
        mint_price: int = MINT_PRICE,
        max_supply: int = MAX_SUPPLY,
        hash_fn: HashFn = keccak_uint256,
    ) -> None:
        self.balances = balances if balances is not None else Balances()
        self.ledger = TokenLedger()
        self.escrow = PullPayments()
        self.access = Ownable(deployer)
        self.mint_price = mint_price
        self.max_supply = max_supply
        self.base_token_uri = ""
        self.generator = GridGenerator(self.ledger, hash_fn=hash_fn)

    # --- access control ---

    def owner(self) -> str:
        return self.access.owner

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self.access.transfer_ownership(caller, new_owner)
        log.info("Ownership transferred to %s", new_owner)

    # --- minting ---

    def mint_to(
        self,
        caller: str,
        recipient: str,
        value: int,
        seed: Optional[int] = None,
    ) -> int:
        if value < self.mint_price:
            raise InsufficientPayment(
                f"Mint requires {self.mint_price} wei, got {value}"
            )
        if self.ledger.total_supply >= self.max_supply:
            raise SupplyExceeded(f"Max supply of {self.max_supply} reached")
        if seed is not None:
            check_seed(seed)
            if self.ledger.seed_in_use(seed):
                raise DuplicateSeed(f"Seed {seed} already used")
        if self.balances.balance_of(caller) < value:
            raise InsufficientFunds(f"{caller} cannot pay {value} wei")

        self.balances.debit(caller, value)
        token_id = self.ledger.mint(recipient, seed)
        self.escrow.async_transfer(self.access.owner, value)
        log.debug("Minted token %d to %s (seed=%s)", token_id, recipient, seed)
        return token_id

    # --- ledger queries ---

    def owner_of(self, token_id: int) -> str:
        return self.ledger.owner_of(token_id)

    def balance_of(self, account: str) -> int:
        return self.ledger.balance_of(account)

    def total_supply(self) -> int:
        return self.ledger.total_supply

    def seed_of(self, token_id: int) -> int:
        return self.ledger.seed_of(token_id)

    def transfer_from(self, caller: str, sender: str, recipient: str, token_id: int) -> None:
        if self.ledger.owner_of(token_id) != caller:
            raise Unauthorized(f"{caller} may not transfer token {token_id}")
        self.ledger.transfer(sender, recipient, token_id)

    # --- configuration ---

    def set_base_token_uri(self, caller: str, base_token_uri: str) -> None:
        self.access.require_owner(caller)
        self.base_token_uri = base_token_uri

    def token_uri(self, token_id: int) -> str:
        if not self.ledger.exists(token_id):
            raise NotFound(f"Token {token_id} does not exist")
        if not self.base_token_uri:
            return ""
        return f"{self.base_token_uri}{token_id}"

    # --- payments ---

    def payments(self, payee: str) -> int:
        return self.escrow.payments(payee)

    def withdraw_payments(self, caller: str, payee: str) -> int:
        self.access.require_owner(caller)
        amount = self.escrow.withdraw(payee, self.balances)
        log.info("Withdrew %d wei to %s", amount, payee)
        return amount

    # --- generative grid ---

    def draw(self, token_id: int) -> str:
        return self.generator.draw(token_id)

    def get_initial_state(self, token_id: int) -> RawState:
        return self.generator.get_initial_state(token_id)
