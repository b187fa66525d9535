"""
Token Vault - balances of every account in every currency.

Stands in for the token contracts. Transfers can notify the recipient
through receive hooks, which is how tests drive reentrancy.
"""

import logging
from collections import defaultdict
from typing import Callable

from .errors import InsufficientBalance

logger = logging.getLogger(__name__)

ReceiveHook = Callable[[str, str, int], None]  # (currency, sender, amount)


class TokenVault:
    """
    In-memory ledger of token balances.

    Usage:
        vault = TokenVault()
        vault.mint("USDC", "alice", 1_000)
        vault.transfer("USDC", "alice", "bob", 250)
        vault.balance_of("bob", "USDC")  # 250
    """

    def __init__(self):
        self._balances: dict[tuple[str, str], int] = defaultdict(int)  # (account, currency) -> amount
        self._receive_hooks: dict[str, list[ReceiveHook]] = defaultdict(list)

    def balance_of(self, account: str, currency: str) -> int:
        return self._balances.get((account, currency), 0)

    def balances(self, account: str) -> dict[str, int]:
        """All non-zero balances held by an account."""
        return {
            currency: amount
            for (acct, currency), amount in self._balances.items()
            if acct == account and amount != 0
        }

    def mint(self, currency: str, account: str, amount: int):
        if amount < 0:
            raise ValueError("mint amount must be non-negative")
        self._balances[(account, currency)] += amount

    def burn(self, currency: str, account: str, amount: int):
        self._debit(currency, account, amount)

    def transfer(self, currency: str, sender: str, recipient: str, amount: int):
        """
        Move tokens between accounts, then run the recipient's receive hooks.

        Raises:
            InsufficientBalance: If the sender cannot cover the amount
        """
        if amount < 0:
            raise ValueError("transfer amount must be non-negative")
        if amount == 0:
            return

        self._debit(currency, sender, amount)
        self._balances[(recipient, currency)] += amount

        for hook in list(self._receive_hooks.get(recipient, [])):
            hook(currency, sender, amount)

    def on_receive(self, account: str, hook: ReceiveHook):
        """Register a callback run whenever the account receives tokens."""
        self._receive_hooks[account].append(hook)

    def clear_receive_hooks(self, account: str):
        self._receive_hooks.pop(account, None)

    def _debit(self, currency: str, account: str, amount: int):
        balance = self.balance_of(account, currency)
        if balance < amount:
            raise InsufficientBalance(account, currency, balance, amount)
        self._balances[(account, currency)] = balance - amount
