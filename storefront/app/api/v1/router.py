from fastapi import APIRouter

from storefront.app.api.v1.endpoints.health import router as health_router
from storefront.app.api.v1.endpoints.products import router as products_router
from storefront.app.api.v1.endpoints.purchases import router as purchases_router
from storefront.app.api.v1.endpoints.admin import router as admin_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(products_router, tags=["products"])
router.include_router(purchases_router, tags=["purchases"])
router.include_router(admin_router, tags=["admin"])
