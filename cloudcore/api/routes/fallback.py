"""Catch-all for /api paths this service does not implement (VMs, costs, providers)."""

from fastapi import APIRouter, HTTPException, status

router = APIRouter()


@router.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
def not_implemented(path: str) -> None:
    raise HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail="Not implemented")
