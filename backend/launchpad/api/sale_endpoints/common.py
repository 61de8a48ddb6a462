import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from launchpad.core.errors import (
    Ended,
    InsufficientPayment,
    InvalidPriceFeed,
    InvalidProjectParameters,
    NotStarted,
    ProjectNotFound,
    SaleError,
    SoldOut,
    TransferFailed,
    Unauthorized,
    UnsupportedCurrency,
    ZeroAmount,
)
from launchpad.sale import TokenSale
from launchpad.sale.types import Project, is_valid_address
from launchpad.schemas.sale import ErrorResponse, ProjectResponse
from launchpad.services.recorder import EventRecorder

logger = logging.getLogger(__name__)

SALE_ERROR_STATUS: dict[type[SaleError], int] = {
    ProjectNotFound: status.HTTP_404_NOT_FOUND,
    Unauthorized: status.HTTP_403_FORBIDDEN,
    InvalidProjectParameters: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ZeroAmount: status.HTTP_422_UNPROCESSABLE_ENTITY,
    UnsupportedCurrency: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotStarted: status.HTTP_409_CONFLICT,
    Ended: status.HTTP_409_CONFLICT,
    SoldOut: status.HTTP_409_CONFLICT,
    InsufficientPayment: status.HTTP_402_PAYMENT_REQUIRED,
    TransferFailed: status.HTTP_402_PAYMENT_REQUIRED,
    InvalidPriceFeed: status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def sale_error_handler(request: Request, exc: SaleError) -> JSONResponse:
    """Surface sale errors verbatim with a status per error kind."""
    status_code = SALE_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.info(f"{request.method} {request.url.path} rejected: {type(exc).__name__}: {exc}")
    body = ErrorResponse(error=type(exc).__name__, detail=exc.detail)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def get_sale(request: Request) -> TokenSale:
    return request.app.state.sale


def get_recorder(request: Request) -> EventRecorder:
    return request.app.state.recorder


def validate_wallet_address(wallet_address: str) -> bool:
    """Validate an EVM wallet address."""
    return is_valid_address(wallet_address)


def project_response(sale: TokenSale, project_id: int, project: Project) -> ProjectResponse:
    return ProjectResponse(
        project_id=project_id,
        phase=sale.phase(project_id),
        name=project.name,
        start_time=project.start_time,
        end_time=project.end_time,
        token_decimals=project.token_decimals,
        max_allocate_amount=project.max_allocate_amount,
        usd_price_per_token_e6=project.usd_price_per_token_e6,
        native_discount_multiplier_e4=project.native_discount_multiplier_e4,
        payout_address=project.payout_address,
    )
