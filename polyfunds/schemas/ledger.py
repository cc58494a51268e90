"""Data contracts for the ledger HTTP API. Amounts are integers in the smallest unit."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CallerRequest(BaseModel):
    """Body of commands that only need to know who is calling."""

    model_config = ConfigDict(extra="forbid")

    caller: str = Field(..., min_length=1, description="Address issuing the command.")


class AmountRequest(CallerRequest):
    amount: int = Field(..., description="Amount in the smallest currency unit.")


class WithdrawRequest(CallerRequest):
    amount: int = Field(0, ge=0, description="0 withdraws principal plus accrued yield.")


class CreateBusinessRequest(CallerRequest):
    # emptiness and ranges are ledger rules, reported with their own error codes
    name: str
    description: str
    category: str = ""
    tokenSupply: int
    tokenPrice: int
    monthlyRevenue: int = 0
    profitMargin: int = 0


class VerifyBusinessRequest(CallerRequest):
    verified: bool = True


class UpdateMetricsRequest(CallerRequest):
    monthlyRevenue: int
    profitMargin: int


class InvestRequest(CallerRequest):
    tokenAmount: int
    paidAmount: int


class FeeRecipientRequest(CallerRequest):
    recipient: str


class SavingsBalanceResponse(BaseModel):
    account: str
    principal: int
    accruedYield: int
    totalBalance: int
    active: bool
    depositTimestamp: Optional[int] = None


class BusinessResponse(BaseModel):
    id: int
    name: str
    description: str
    category: str
    owner: str
    tokenSupply: int
    tokenPrice: int
    availableTokens: int
    monthlyRevenue: int
    profitMargin: int
    totalRaised: int
    totalDividendsPaid: int
    verified: bool
    active: bool
    createdAt: int


class InvestmentResponse(BaseModel):
    businessId: int
    investor: str
    tokenAmount: int
    investedAmount: int
    dividendsClaimed: int


class DistributionResponse(BaseModel):
    businessId: int
    amount: int
    timestamp: int
    tokenSupply: int
    credited: int


class BusinessIdsResponse(BaseModel):
    owner: str
    businessIds: List[int]


class PingResponse(BaseModel):
    message: str
    timestamp: int
