from fastapi import APIRouter, HTTPException, Request, status

from launchpad.models.sale import AuthPurpose
from launchpad.schemas.sale import (
    BuyerSignature,
    BuyWithNativeRequest,
    BuyWithStableRequest,
    NativePriceResponse,
    PurchaseResponse,
)

from .auth import verify_signature
from .common import get_recorder, get_sale, validate_wallet_address

router = APIRouter()


async def _authenticate_buyer(body: BuyerSignature) -> str:
    """The paying wallet, proven by a signature of its /buyer-message."""
    if not validate_wallet_address(body.buyer):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unsupported buyer format. Expected EVM address.",
        )
    return await verify_signature(body.buyer, body.signature, AuthPurpose.PURCHASE)


@router.post(
    "/projects/{project_id}/buy-stable",
    response_model=PurchaseResponse,
    summary="Buy project tokens with USDC or USDT",
    description="Pulls the exact cost from the buyer's allowance to the project's payout address. "
    "Requests above the remaining supply are partially filled. "
    "The buyer signs the message issued by /buyer-message.",
)
async def buy_with_stable(
    project_id: int, body: BuyWithStableRequest, request: Request
) -> PurchaseResponse:
    buyer = await _authenticate_buyer(body)
    sale = get_sale(request)
    granted = sale.buy_with_stable(
        buyer, project_id, body.currency_address, body.token_amount
    )
    await get_recorder(request).flush()
    return PurchaseResponse(
        project_id=project_id,
        buyer=buyer,
        requested_amount=body.token_amount,
        granted_amount=granted,
        allocated_amount=sale.allocated_amount(project_id),
    )


@router.post(
    "/projects/{project_id}/buy-native",
    response_model=PurchaseResponse,
    summary="Buy project tokens with the native currency",
    description="Charges the discounted oracle price, forwards it to the payout address "
    "and refunds any excess of the attached value.",
)
async def buy_with_native(
    project_id: int, body: BuyWithNativeRequest, request: Request
) -> PurchaseResponse:
    buyer = await _authenticate_buyer(body)
    sale = get_sale(request)
    granted = sale.buy_with_native(buyer, project_id, body.token_amount, body.value)
    await get_recorder(request).flush()
    return PurchaseResponse(
        project_id=project_id,
        buyer=buyer,
        requested_amount=body.token_amount,
        granted_amount=granted,
        allocated_amount=sale.allocated_amount(project_id),
    )


@router.get(
    "/native-price",
    response_model=NativePriceResponse,
    summary="Get the native currency price (USD × 10^8)",
)
async def get_native_price(request: Request) -> NativePriceResponse:
    return NativePriceResponse(price_e8=get_sale(request).get_native_price_e8())
