from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from launchpad.sale.types import SalePhase


class ProjectParams(BaseModel):
    """Parameters of a new sale project."""
    name: str = Field(..., min_length=1, max_length=255)
    start_time: int = Field(..., description="Unix timestamp the sale opens at (inclusive)")
    end_time: int = Field(..., description="Unix timestamp the sale closes at (inclusive)")
    token_decimals: int = Field(..., ge=0, le=36)
    max_allocate_amount: int = Field(..., description="Total token units for sale")
    usd_price_per_token_e6: int = Field(..., description="USD per whole token × 10^6")
    native_discount_multiplier_e4: int = Field(
        ..., description="Share of the USD price paid by native buyers × 10^4"
    )
    payout_address: str = Field(..., description="Destination of all collected funds")


class AddProjectRequest(ProjectParams):
    """Owner-signed request to add a project."""
    admin_address: str = Field(..., description="Owner wallet address")
    signature: str = Field(..., description="Signature of the message from /admin-message")


class AddProjectResponse(BaseModel):
    project_id: int


class AuthMessageResponse(BaseModel):
    message: str
    expires_at: datetime


class ProjectResponse(ProjectParams):
    project_id: int
    phase: SalePhase


class ProjectListResponse(BaseModel):
    total_count: int
    items: list[ProjectResponse]


class BuyerSignature(BaseModel):
    buyer: str = Field(..., description="Buyer wallet address, the account that pays")
    signature: Optional[str] = Field(
        None, description="Buyer signature of the message from /buyer-message"
    )


class BuyWithStableRequest(BuyerSignature):
    currency_address: str = Field(..., description="USDC or USDT token address")
    token_amount: int = Field(..., description="Requested project token units")


class BuyWithNativeRequest(BuyerSignature):
    token_amount: int = Field(..., description="Requested project token units")
    value: int = Field(..., ge=0, description="Attached native currency units")


class PurchaseResponse(BaseModel):
    project_id: int
    buyer: str
    requested_amount: int
    granted_amount: int
    allocated_amount: int = Field(..., description="Project total allocated after this purchase")


class NativePriceResponse(BaseModel):
    price_e8: int


class AllocatedAmountResponse(BaseModel):
    project_id: int
    allocated_amount: int
    max_allocate_amount: int


class RaisedAmountResponse(BaseModel):
    project_id: int
    usdc_amount: int
    usdt_amount: int
    native_amount: int


class AllocatedAccountResponse(BaseModel):
    user_address: str
    amounts: int
    usdc_amounts: int
    usdt_amounts: int
    native_amounts: int


class AllocatedAccountsResponse(BaseModel):
    project_id: int
    items: list[AllocatedAccountResponse]


class UserAllocatedAmountResponse(BaseModel):
    project_id: int
    user_address: str
    amount: int


class CommittedAmountResponse(BaseModel):
    paid_token_address: str
    amount_paid: int


class UserCommittedAmountsResponse(BaseModel):
    project_id: int
    user_address: str
    items: list[CommittedAmountResponse]


class PurchaseRecordResponse(BaseModel):
    buyer: str
    currency_address: str
    token_amount: int
    payment_amount: int
    created_at: datetime


class PurchaseHistoryResponse(BaseModel):
    project_id: int
    total_count: int = Field(..., description="Matching purchases before paging")
    items: list[PurchaseRecordResponse]


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
