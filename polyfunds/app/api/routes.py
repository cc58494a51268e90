"""HTTP routes for the Flask API."""

from http import HTTPStatus
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from polyfunds.core.errors import (
    AuthorizationFailure,
    InsufficientPoolFunds,
    LedgerError,
    NotFound,
    PaymentFailed,
)
from polyfunds.core.platform import Platform
from polyfunds.core.registry import BUSINESS_CATEGORIES
from polyfunds.core.state import Business, DividendDistribution, Investment
from polyfunds.schemas.ledger import (
    AmountRequest,
    BusinessIdsResponse,
    BusinessResponse,
    CallerRequest,
    CreateBusinessRequest,
    DistributionResponse,
    FeeRecipientRequest,
    InvestRequest,
    InvestmentResponse,
    PingResponse,
    SavingsBalanceResponse,
    UpdateMetricsRequest,
    VerifyBusinessRequest,
    WithdrawRequest,
)

api_bp = Blueprint("api", __name__)


def _platform() -> Platform:
    return current_app.extensions["polyfunds.platform"]


def _body() -> Dict[str, Any]:
    return request.get_json(force=True, silent=False)


def _status_for(exc: LedgerError) -> HTTPStatus:
    if isinstance(exc, NotFound):
        return HTTPStatus.NOT_FOUND
    if isinstance(exc, AuthorizationFailure):
        return HTTPStatus.FORBIDDEN
    if isinstance(exc, InsufficientPoolFunds):
        return HTTPStatus.CONFLICT
    if isinstance(exc, PaymentFailed):
        return HTTPStatus.BAD_GATEWAY
    return HTTPStatus.BAD_REQUEST


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    return jsonify({"detail": exc.errors(include_url=False)}), HTTPStatus.UNPROCESSABLE_ENTITY


@api_bp.errorhandler(LedgerError)
def _handle_ledger_error(exc: LedgerError):
    return jsonify({"error": exc.code, "message": exc.message}), _status_for(exc)


def _business_payload(business: Business) -> Dict[str, Any]:
    return BusinessResponse(
        id=business.id,
        name=business.name,
        description=business.description,
        category=business.category,
        owner=business.owner,
        tokenSupply=business.token_supply,
        tokenPrice=business.token_price,
        availableTokens=business.available_tokens,
        monthlyRevenue=business.monthly_revenue,
        profitMargin=business.profit_margin,
        totalRaised=business.total_raised,
        totalDividendsPaid=business.total_dividends_paid,
        verified=business.verified,
        active=business.active,
        createdAt=business.created_at,
    ).model_dump()


def _investment_payload(investment: Investment) -> Dict[str, Any]:
    return InvestmentResponse(
        businessId=investment.business_id,
        investor=investment.investor,
        tokenAmount=investment.token_amount,
        investedAmount=investment.invested_amount,
        dividendsClaimed=investment.dividends_claimed,
    ).model_dump()


def _distribution_payload(entry: DividendDistribution) -> Dict[str, Any]:
    return DistributionResponse(
        businessId=entry.business_id,
        amount=entry.amount,
        timestamp=entry.timestamp,
        tokenSupply=entry.token_supply,
        credited=entry.credited,
    ).model_dump()


def _savings_payload(account: str) -> Dict[str, Any]:
    platform = _platform()
    with platform.ctx.reading():
        balance = platform.savings.get_balance(account)
        record = platform.savings.get_account(account)
    return SavingsBalanceResponse(
        account=account,
        principal=balance.principal,
        accruedYield=balance.accrued_yield,
        totalBalance=balance.total,
        active=bool(record and record.active),
        depositTimestamp=record.deposit_timestamp if record else None,
    ).model_dump()


@api_bp.get("/ping")
def ping() -> Any:
    """Health-check endpoint."""
    response = PingResponse(message="pong", timestamp=_platform().ctx.now())
    return jsonify(response.model_dump())


# ---------- savings ----------


@api_bp.get("/savings/<account>")
def savings_balance(account: str) -> Any:
    return jsonify(_savings_payload(account))


@api_bp.post("/savings/deposit")
def savings_deposit() -> Any:
    payload = AmountRequest.model_validate(_body())
    _platform().savings.deposit(payload.caller, payload.amount)
    return jsonify(_savings_payload(payload.caller)), HTTPStatus.CREATED


@api_bp.post("/savings/withdraw")
def savings_withdraw() -> Any:
    payload = WithdrawRequest.model_validate(_body())
    paid = _platform().savings.withdraw(payload.caller, payload.amount)
    return jsonify({"paid": paid, "balance": _savings_payload(payload.caller)})


@api_bp.post("/savings/claim-yield")
def savings_claim_yield() -> Any:
    payload = CallerRequest.model_validate(_body())
    paid = _platform().savings.claim_yield(payload.caller)
    return jsonify({"paid": paid, "balance": _savings_payload(payload.caller)})


@api_bp.post("/savings/fund")
def savings_fund_pool() -> Any:
    payload = AmountRequest.model_validate(_body())
    pool = _platform().savings.fund_pool(payload.caller, payload.amount)
    return jsonify({"poolBalance": pool})


# ---------- businesses ----------


@api_bp.get("/categories")
def categories() -> Any:
    return jsonify(BUSINESS_CATEGORIES)


@api_bp.post("/businesses")
def create_business() -> Any:
    payload = CreateBusinessRequest.model_validate(_body())
    registry = _platform().registry
    business_id = registry.create_business(
        owner=payload.caller,
        name=payload.name,
        description=payload.description,
        category=payload.category,
        token_supply=payload.tokenSupply,
        token_price=payload.tokenPrice,
        monthly_revenue=payload.monthlyRevenue,
        profit_margin=payload.profitMargin,
    )
    return jsonify(_business_payload(registry.get_business_info(business_id))), HTTPStatus.CREATED


@api_bp.get("/businesses")
def list_businesses() -> Any:
    verified_only = request.args.get("verified", "").lower() in {"1", "true", "yes"}
    category = request.args.get("category") or None
    businesses = _platform().registry.list_businesses(verified_only=verified_only, category=category)
    return jsonify([_business_payload(business) for business in businesses])


@api_bp.get("/businesses/<int:business_id>")
def business_info(business_id: int) -> Any:
    return jsonify(_business_payload(_platform().registry.get_business_info(business_id)))


@api_bp.get("/owners/<owner>/businesses")
def owner_businesses(owner: str) -> Any:
    ids = _platform().registry.get_owner_businesses(owner)
    return jsonify(BusinessIdsResponse(owner=owner, businessIds=ids).model_dump())


@api_bp.post("/businesses/<int:business_id>/verify")
def verify_business(business_id: int) -> Any:
    payload = VerifyBusinessRequest.model_validate(_body())
    registry = _platform().registry
    registry.verify_business(payload.caller, business_id, payload.verified)
    return jsonify(_business_payload(registry.get_business_info(business_id)))


@api_bp.post("/businesses/<int:business_id>/deactivate")
def deactivate_business(business_id: int) -> Any:
    payload = CallerRequest.model_validate(_body())
    registry = _platform().registry
    registry.deactivate_business(payload.caller, business_id)
    return jsonify(_business_payload(registry.get_business_info(business_id)))


@api_bp.post("/businesses/<int:business_id>/metrics")
def update_metrics(business_id: int) -> Any:
    payload = UpdateMetricsRequest.model_validate(_body())
    registry = _platform().registry
    registry.update_business_metrics(
        payload.caller, business_id, payload.monthlyRevenue, payload.profitMargin
    )
    return jsonify(_business_payload(registry.get_business_info(business_id)))


# ---------- investment & dividends ----------


@api_bp.post("/businesses/<int:business_id>/invest")
def invest(business_id: int) -> Any:
    payload = InvestRequest.model_validate(_body())
    investment = _platform().investments.invest_in_business(
        payload.caller, business_id, payload.tokenAmount, payload.paidAmount
    )
    return jsonify(_investment_payload(investment)), HTTPStatus.CREATED


@api_bp.get("/businesses/<int:business_id>/holders")
def holders(business_id: int) -> Any:
    return jsonify([_investment_payload(item) for item in _platform().investments.get_holders(business_id)])


@api_bp.post("/businesses/<int:business_id>/dividends")
def distribute_dividends(business_id: int) -> Any:
    payload = AmountRequest.model_validate(_body())
    credited = _platform().dividends.distribute_dividends(payload.caller, business_id, payload.amount)
    return jsonify({"businessId": business_id, "amount": payload.amount, "credited": credited})


@api_bp.get("/businesses/<int:business_id>/distributions")
def distributions(business_id: int) -> Any:
    entries = _platform().dividends.get_distributions(business_id)
    return jsonify([_distribution_payload(entry) for entry in entries])


@api_bp.post("/businesses/<int:business_id>/claim")
def claim_dividends(business_id: int) -> Any:
    payload = CallerRequest.model_validate(_body())
    paid = _platform().dividends.claim_dividends(payload.caller, business_id)
    return jsonify({"businessId": business_id, "paid": paid})


@api_bp.get("/businesses/<int:business_id>/potential-dividend")
def potential_dividend(business_id: int) -> Any:
    tokens = request.args.get("tokens", default=0, type=int)
    amount = _platform().dividends.calculate_potential_dividend(business_id, tokens)
    return jsonify({"businessId": business_id, "tokenAmount": tokens, "potentialDividend": amount})


@api_bp.get("/investors/<investor>/investments")
def investor_investments(investor: str) -> Any:
    items = _platform().investments.get_user_investments(investor)
    return jsonify([_investment_payload(item) for item in items])


@api_bp.get("/investors/<investor>/portfolio")
def investor_portfolio(investor: str) -> Any:
    entries = _platform().stats.get_portfolio(investor)
    return jsonify([entry.model_dump() for entry in entries])


@api_bp.get("/investors/<investor>/dividends/<int:business_id>")
def claimable_dividends(investor: str, business_id: int) -> Any:
    amount = _platform().dividends.get_claimable_dividends(investor, business_id)
    return jsonify({"businessId": business_id, "holder": investor, "claimable": amount})


# ---------- admin ----------


@api_bp.post("/admin/fee-recipient")
def set_fee_recipient() -> Any:
    payload = FeeRecipientRequest.model_validate(_body())
    investments = _platform().investments
    investments.set_fee_recipient(payload.caller, payload.recipient)
    return jsonify({"feeRecipient": investments.fee_recipient()})


@api_bp.post("/admin/emergency-withdraw")
def emergency_withdraw() -> Any:
    payload = CallerRequest.model_validate(_body())
    paid = _platform().emergency_withdraw(payload.caller)
    return jsonify({"paid": paid})


# ---------- reporting ----------


@api_bp.get("/stats")
def platform_stats() -> Any:
    return jsonify(_platform().stats.get_platform_stats().model_dump())


@api_bp.get("/stats/totals")
def total_stats() -> Any:
    return jsonify(_platform().stats.get_total_stats().model_dump())


@api_bp.get("/events")
def events() -> Any:
    """Poll the event log. Pass ``after`` (last sequence seen) to page forward."""
    business_id = request.args.get("businessId", type=int)
    account = request.args.get("account") or None
    name = request.args.get("name") or None
    after = request.args.get("after", default=0, type=int)
    found = _platform().events.query(business_id=business_id, account=account, name=name, after=after)
    return jsonify([event.model_dump() for event in found])
