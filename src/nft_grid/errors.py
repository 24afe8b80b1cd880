from __future__ import annotations


class NFTError(RuntimeError):
    """Base class for contract-level failures."""


class NotFound(NFTError):
    pass


class DuplicateSeed(NFTError):
    pass


class SupplyExceeded(NFTError):
    pass


class InsufficientPayment(NFTError):
    pass


class InsufficientFunds(NFTError):
    pass


class Unauthorized(NFTError):
    pass


class NothingToWithdraw(NFTError):
    pass
