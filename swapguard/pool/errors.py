"""Errors raised by the pool engine and token vault."""


class PoolError(Exception):
    """Base class for pool engine errors."""


class PoolNotInitialized(PoolError):
    def __init__(self, pool_id: str):
        self.pool_id = pool_id
        super().__init__(f"Pool not initialized: {pool_id}")


class PoolAlreadyInitialized(PoolError):
    def __init__(self, pool_id: str):
        self.pool_id = pool_id
        super().__init__(f"Pool already initialized: {pool_id}")


class PriceLimitOutOfBounds(PoolError):
    def __init__(self, sqrt_price_limit_x96: int, sqrt_price_x96: int, zero_for_one: bool):
        self.sqrt_price_limit_x96 = sqrt_price_limit_x96
        self.sqrt_price_x96 = sqrt_price_x96
        self.zero_for_one = zero_for_one
        super().__init__(
            f"Price limit {sqrt_price_limit_x96} out of bounds for "
            f"{'zero_for_one' if zero_for_one else 'one_for_zero'} swap at {sqrt_price_x96}"
        )


class ManagerLocked(PoolError):
    def __init__(self):
        super().__init__("Pool engine is locked; call inside unlock()")


class AlreadyUnlocked(PoolError):
    def __init__(self):
        super().__init__("Pool engine is already unlocked")


class CurrencyNotSettled(PoolError):
    def __init__(self, outstanding: dict[tuple[str, str], int]):
        self.outstanding = outstanding
        detail = ", ".join(f"{acct}/{cur}={amt}" for (acct, cur), amt in outstanding.items())
        super().__init__(f"Unsettled balances at end of unlock: {detail}")


class InsufficientBalance(PoolError):
    def __init__(self, account: str, currency: str, balance: int, required: int):
        self.account = account
        self.currency = currency
        self.balance = balance
        self.required = required
        super().__init__(
            f"Insufficient {currency} balance for {account}: have {balance}, need {required}"
        )
