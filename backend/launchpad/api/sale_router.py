from fastapi import APIRouter

from launchpad.api.sale_endpoints.allocations import router as allocations_router
from launchpad.api.sale_endpoints.auth import router as auth_router
from launchpad.api.sale_endpoints.projects import router as projects_router
from launchpad.api.sale_endpoints.purchases import router as purchases_router

router = APIRouter(prefix="/sale", tags=["sale"])

router.include_router(auth_router)
router.include_router(projects_router)
router.include_router(purchases_router)
router.include_router(allocations_router)
