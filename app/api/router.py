from fastapi import APIRouter
from app.api.assets.router import router as assets_router
from app.api.dashboard import router as dashboard_router
from app.api.studio.router import asset_types_router, forms_router, rules_router

router = APIRouter()
router.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])
router.include_router(asset_types_router, prefix="/asset-types", tags=["AssetTypes"])
router.include_router(forms_router, prefix="/forms", tags=["Forms"])
router.include_router(rules_router, prefix="/rules", tags=["Rules"])
router.include_router(assets_router, prefix="/assets", tags=["Assets"])
