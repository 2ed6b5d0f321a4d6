"""Credit router for travel credit balances, pack purchases and the ledger."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, AgentAuth, CurrentUser, DatabaseSession, IdempotencyKey
from ..core.exceptions import InternalServerError, ProblemDetailsException, ValidationError
from ..schemas.common import PageRequest
from ..schemas.credit import (
    CreditBalance,
    CreditBalanceList,
    CreditPriceList,
    CreditTransaction,
    CreditTransactionList,
    GrantCreditsRequest,
    ListCreditTransactionsRequest,
    RequestCreditPurchaseRequest,
    ReviewCreditPurchaseRequest,
    TravelIdRequest,
)
from ..services.credit_service import CreditService
from ..services.idempotency_service import IdempotencyService
from ..services.travel_service import TravelService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/credit", tags=["credit"])


def _transaction_response(transaction) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=CreditTransaction.model_validate(transaction).model_dump(mode="json")
    )


@router.post("/balance", response_model=CreditBalance)
async def get_balance(
    request: TravelIdRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    await TravelService(db).get_managed_travel(user, request.travel_id)
    balance = await CreditService(db).get_balance(request.travel_id)
    return JSONResponse(
        status_code=200,
        content=CreditBalance.model_validate(balance).model_dump(mode="json")
    )


@router.post("/prices", response_model=CreditPriceList)
async def credit_prices(db: AsyncSession = DatabaseSession) -> JSONResponse:
    """Credit packs on sale, smallest first."""
    items = await CreditService(db).credit_price_list()
    response_data = CreditPriceList.model_validate({"items": items})
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/purchase", response_model=CreditTransaction)
async def request_purchase(
    request: RequestCreditPurchaseRequest,
    idempotency_key: str = IdempotencyKey,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Request a credit pack paid by manual transfer.

    This operation is idempotent based on the Idempotency-Key header. The
    purchase stays pending until an admin reviews the payment proof.
    """
    async def purchase_operation():
        await TravelService(db).get_managed_travel(user, request.travel_id)
        transaction = await CreditService(db).request_purchase(
            request.travel_id,
            request.credits,
            payment_proof_url=request.payment_proof_url,
            notes=request.notes,
        )
        return CreditTransaction.model_validate(transaction).model_dump(mode="json")

    try:
        return await IdempotencyService(db).execute(
            "credit/purchase",
            idempotency_key,
            request.model_dump(mode="json"),
            purchase_operation,
            user_id=user.user_id,
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in credit purchase",
            extra={"travel_id": str(request.travel_id), "credits": request.credits, "error": str(e)},
            exc_info=True
        )
        raise InternalServerError() from e


@router.post("/review", response_model=CreditTransaction)
async def review_purchase(
    request: ReviewCreditPurchaseRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    try:
        transaction = await CreditService(db).review_purchase(
            request.transaction_id, request.approve, reviewer_id=user.user_id, notes=request.notes
        )
        return _transaction_response(transaction)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error reviewing credit purchase",
            extra={"transaction_id": str(request.transaction_id), "error": str(e)},
            exc_info=True
        )
        raise InternalServerError() from e


@router.post("/grant", response_model=CreditTransaction)
async def grant_credits(
    request: GrantCreditsRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Add bonus credits to a travel."""
    await TravelService(db).get_travel_by_id_or_raise(request.travel_id)
    transaction = await CreditService(db).grant_bonus(
        request.travel_id, request.amount, notes=request.notes, granted_by=user.user_id
    )
    return _transaction_response(transaction)


@router.post("/refund", response_model=CreditTransaction)
async def refund_credits(
    request: GrantCreditsRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    await TravelService(db).get_travel_by_id_or_raise(request.travel_id)
    transaction = await CreditService(db).refund(
        request.travel_id,
        request.amount,
        package_id=request.package_id,
        notes=request.notes,
        granted_by=user.user_id,
    )
    return _transaction_response(transaction)


@router.post("/transactions", response_model=CreditTransactionList)
async def list_transactions(
    request: ListCreditTransactionsRequest,
    user: CurrentUser = AgentAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Credit ledger, newest first.

    Agents must name one of their travels; admins may omit it to see every travel.
    """
    if request.travel_id is None:
        if not user.is_admin:
            raise ValidationError(
                detail="travel_id is required",
                errors={"travel_id": "Only admins may list transactions across travels"},
            )
    else:
        await TravelService(db).get_managed_travel(user, request.travel_id)

    transactions, total = await CreditService(db).list_transactions(
        travel_id=request.travel_id,
        status=request.status.value if request.status else None,
        transaction_type=request.transaction_type.value if request.transaction_type else None,
        limit=request.limit,
        offset=request.offset,
    )
    response_data = CreditTransactionList(
        items=[CreditTransaction.model_validate(t) for t in transactions],
        total=total,
        limit=request.limit,
        offset=request.offset,
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/balances", response_model=CreditBalanceList)
async def list_balances(
    request: PageRequest,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    credits_rows, total = await CreditService(db).list_balances(limit=request.limit, offset=request.offset)
    response_data = CreditBalanceList(
        items=[
            CreditBalance(
                travel_id=row.travel_id,
                credits_remaining=row.credits_remaining,
                credits_used=row.credits_used,
                last_purchase_date=row.last_purchase_date,
            )
            for row in credits_rows
        ],
        total=total,
        limit=request.limit,
        offset=request.offset,
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))
