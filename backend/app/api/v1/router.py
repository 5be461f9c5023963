"""API v1 router aggregator.

All v1 endpoint routers are included here. The maintenance gate runs as a
router-level dependency, so every v1 endpoint is admission-controlled and
the allow-list lives in one reviewable setting
(settings.maintenance_exempt_paths).
"""

from fastapi import APIRouter, Depends

from app.api.deps import enforce_maintenance
from app.api.v1 import (
    auth,
    billing,
    generation,
    health,
    rewards,
    settings,
    users,
)

router = APIRouter(dependencies=[Depends(enforce_maintenance)])

# =============================================================================
# Authentication
# =============================================================================

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])

# =============================================================================
# Configuration document
# =============================================================================

router.include_router(settings.router, prefix="/settings", tags=["settings"])

# =============================================================================
# Metered generation and points
# =============================================================================

router.include_router(generation.router, prefix="/ai", tags=["ai"])
router.include_router(rewards.router, prefix="/rewards", tags=["rewards"])
router.include_router(billing.router, prefix="/billing", tags=["billing"])

# =============================================================================
# Operations
# =============================================================================

router.include_router(health.router, prefix="/health", tags=["health"])
