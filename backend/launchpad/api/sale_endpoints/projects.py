from fastapi import APIRouter, HTTPException, Request, status

from launchpad.models.sale import AuthPurpose
from launchpad.sale.types import AdminCredential, Project
from launchpad.schemas.sale import (
    AddProjectRequest,
    AddProjectResponse,
    ProjectListResponse,
)

from .auth import verify_signature
from .common import get_recorder, get_sale, project_response, validate_wallet_address

router = APIRouter()


@router.get(
    "/projects",
    response_model=ProjectListResponse,
    summary="List sale projects",
)
async def list_projects(request: Request) -> ProjectListResponse:
    """Get every registered project in registration order."""
    sale = get_sale(request)
    items = [
        project_response(sale, project_id, project)
        for project_id, project in enumerate(sale.get_projects())
    ]
    return ProjectListResponse(total_count=len(items), items=items)


@router.post(
    "/projects",
    response_model=AddProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a sale project",
    description="Owner only. The request carries a signature of the message issued by /admin-message.",
)
async def add_project(body: AddProjectRequest, request: Request) -> AddProjectResponse:
    if not validate_wallet_address(body.admin_address):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unsupported admin_address format.",
        )
    admin_address = await verify_signature(body.admin_address, body.signature, AuthPurpose.ADMIN)

    project = Project(
        name=body.name,
        start_time=body.start_time,
        end_time=body.end_time,
        token_decimals=body.token_decimals,
        max_allocate_amount=body.max_allocate_amount,
        usd_price_per_token_e6=body.usd_price_per_token_e6,
        native_discount_multiplier_e4=body.native_discount_multiplier_e4,
        payout_address=body.payout_address,
    )
    project_id = get_sale(request).add_project(AdminCredential(address=admin_address), project)
    await get_recorder(request).flush()
    return AddProjectResponse(project_id=project_id)
