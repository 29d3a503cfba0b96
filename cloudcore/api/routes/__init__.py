"""API routes mounted under API_PREFIX."""

from fastapi import APIRouter

from cloudcore.api.routes import audit_logs, auth, fallback, monitoring

router = APIRouter()
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(audit_logs.router, prefix="/audit-logs", tags=["audit"])
router.include_router(monitoring.router, tags=["monitoring"])
# Must stay last: matches every remaining path.
router.include_router(fallback.router)
