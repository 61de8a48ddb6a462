from typing import Optional

from fastapi import APIRouter, HTTPException, Request, status

from launchpad.models.sale import SaleEvent, SaleEventKind
from launchpad.schemas.sale import (
    AllocatedAccountResponse,
    AllocatedAccountsResponse,
    AllocatedAmountResponse,
    CommittedAmountResponse,
    PurchaseHistoryResponse,
    PurchaseRecordResponse,
    RaisedAmountResponse,
    UserAllocatedAmountResponse,
    UserCommittedAmountsResponse,
)

from .common import get_recorder, get_sale, validate_wallet_address

router = APIRouter()


def _require_user(user_address: str) -> str:
    if not validate_wallet_address(user_address):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unsupported wallet address format. Expected EVM address.",
        )
    return user_address.lower()


@router.get(
    "/projects/{project_id}/allocated",
    response_model=AllocatedAmountResponse,
    summary="Get total allocated amount",
)
async def get_allocated_amount(project_id: int, request: Request) -> AllocatedAmountResponse:
    sale = get_sale(request)
    allocated = sale.allocated_amount(project_id)
    project = sale.get_projects()[project_id]
    return AllocatedAmountResponse(
        project_id=project_id,
        allocated_amount=allocated,
        max_allocate_amount=project.max_allocate_amount,
    )


@router.get(
    "/projects/{project_id}/raised",
    response_model=RaisedAmountResponse,
    summary="Get funds raised per currency",
)
async def get_raised_amount(project_id: int, request: Request) -> RaisedAmountResponse:
    raised = get_sale(request).raised_amount(project_id)
    return RaisedAmountResponse(
        project_id=project_id,
        usdc_amount=raised.usdc_amount,
        usdt_amount=raised.usdt_amount,
        native_amount=raised.native_amount,
    )


@router.get(
    "/projects/{project_id}/accounts",
    response_model=AllocatedAccountsResponse,
    summary="Get allocated accounts",
)
async def get_allocated_accounts(project_id: int, request: Request) -> AllocatedAccountsResponse:
    """Every participant in first-purchase order with cumulative amounts."""
    accounts = get_sale(request).get_allocated_accounts(project_id)
    return AllocatedAccountsResponse(
        project_id=project_id,
        items=[
            AllocatedAccountResponse(
                user_address=account.user_address,
                amounts=account.amounts,
                usdc_amounts=account.usdc_amounts,
                usdt_amounts=account.usdt_amounts,
                native_amounts=account.native_amounts,
            )
            for account in accounts
        ],
    )


@router.get(
    "/projects/{project_id}/users/{user_address}/allocated",
    response_model=UserAllocatedAmountResponse,
    summary="Get a user's allocated amount",
)
async def get_user_allocated_amount(
    project_id: int, user_address: str, request: Request
) -> UserAllocatedAmountResponse:
    user = _require_user(user_address)
    amount = get_sale(request).get_user_allocated_amount(project_id, user)
    return UserAllocatedAmountResponse(project_id=project_id, user_address=user, amount=amount)


@router.get(
    "/projects/{project_id}/users/{user_address}/committed",
    response_model=UserCommittedAmountsResponse,
    summary="Get a user's committed amounts per currency",
)
async def get_user_committed_amounts(
    project_id: int, user_address: str, request: Request
) -> UserCommittedAmountsResponse:
    user = _require_user(user_address)
    committed = get_sale(request).get_users_committed_token_amounts(project_id, user)
    return UserCommittedAmountsResponse(
        project_id=project_id,
        user_address=user,
        items=[
            CommittedAmountResponse(
                paid_token_address=entry.paid_token_address,
                amount_paid=entry.amount_paid,
            )
            for entry in committed
        ],
    )


@router.get(
    "/projects/{project_id}/purchases",
    response_model=PurchaseHistoryResponse,
    summary="Get purchase history",
)
async def get_purchase_history(
    project_id: int,
    request: Request,
    buyer: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> PurchaseHistoryResponse:
    """Recorded purchases of a project, oldest first, optionally for one buyer."""
    # Validates the project id
    get_sale(request).allocated_amount(project_id)

    query = SaleEvent.filter(
        run_id=get_recorder(request).run_id,
        project_id=project_id,
        kind=SaleEventKind.TOKEN_BOUGHT,
    )
    if buyer:
        query = query.filter(buyer_wallet=_require_user(buyer))
    total_count = await query.count()
    events = await query.order_by("id").offset(offset).limit(limit)

    items = [
        PurchaseRecordResponse(
            buyer=event.buyer_wallet,
            currency_address=event.currency_address,
            token_amount=int(event.token_amount),
            payment_amount=int(event.payment_amount),
            created_at=event.created_at,
        )
        for event in events
    ]
    return PurchaseHistoryResponse(project_id=project_id, total_count=total_count, items=items)
