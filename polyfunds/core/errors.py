"""Rejection taxonomy for ledger commands.

Every failure is synchronous and leaves the ledger untouched. The ``code`` of each
error is stable and is what the HTTP layer reports to clients.
"""

from __future__ import annotations

from typing import Optional


class LedgerError(Exception):
    code = "LedgerError"
    default_message = "ledger operation rejected"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


# ---------- validation ----------


class ValidationFailure(LedgerError):
    code = "ValidationFailure"


class InvalidAmount(ValidationFailure):
    code = "InvalidAmount"
    default_message = "Amount must be greater than 0"


class InsufficientBalance(ValidationFailure):
    code = "InsufficientBalance"
    default_message = "Insufficient balance"


class NoYieldAvailable(ValidationFailure):
    code = "NoYieldAvailable"
    default_message = "No yield to claim"


class BusinessNameRequired(ValidationFailure):
    code = "BusinessNameRequired"
    default_message = "Business name required"


class DescriptionRequired(ValidationFailure):
    code = "DescriptionRequired"
    default_message = "Description required"


class InvalidTokenSupply(ValidationFailure):
    code = "InvalidTokenSupply"
    default_message = "Invalid token supply"


class TokenPriceTooLow(ValidationFailure):
    code = "TokenPriceTooLow"
    default_message = "Token price too low"


class InvalidProfitMargin(ValidationFailure):
    code = "InvalidProfitMargin"
    default_message = "Invalid profit margin"


class BusinessNotVerified(ValidationFailure):
    code = "BusinessNotVerified"
    default_message = "Business not verified"


class BusinessNotActive(ValidationFailure):
    code = "BusinessNotActive"
    default_message = "Business not active"


class IncorrectPaymentAmount(ValidationFailure):
    code = "IncorrectPaymentAmount"
    default_message = "Incorrect ETH amount"


class InsufficientTokensAvailable(ValidationFailure):
    code = "InsufficientTokensAvailable"
    default_message = "Not enough tokens available"


class ExceedsMaximumInvestmentLimit(ValidationFailure):
    code = "ExceedsMaximumInvestmentLimit"
    default_message = "Exceeds maximum investment limit"


class MustSendEthForDividends(ValidationFailure):
    code = "MustSendEthForDividends"
    default_message = "Must send ETH for dividends"


class NoDividendsToClaim(ValidationFailure):
    code = "NoDividendsToClaim"
    default_message = "No dividends to claim"


class InvalidAddress(ValidationFailure):
    code = "InvalidAddress"
    default_message = "Invalid address"


# ---------- lookups ----------


class NotFound(LedgerError):
    code = "NotFound"


class BusinessNotFound(NotFound):
    code = "BusinessNotFound"
    default_message = "Business does not exist"


# ---------- authorization ----------


class AuthorizationFailure(LedgerError):
    code = "AuthorizationFailure"


class Unauthorized(AuthorizationFailure):
    code = "Unauthorized"
    default_message = "Caller is not the platform admin"


class NotBusinessOwner(AuthorizationFailure):
    code = "NotBusinessOwner"
    default_message = "Not business owner"


# ---------- funding / payment rail ----------


class InsufficientPoolFunds(LedgerError):
    """The shared pool cannot cover a payout. May succeed once the pool is funded."""

    code = "InsufficientPoolFunds"
    default_message = "Insufficient pool funds"


class PaymentFailed(LedgerError):
    code = "PaymentFailed"
    default_message = "Payment transfer failed"
