"""Audit log listing: admins see every record, other users only their own."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from cloudcore.api.routes.auth import get_current_user
from cloudcore.core.database import get_db
from cloudcore.schemas.audit import AuditLogItem
from cloudcore.schemas.auth import UserOut
from cloudcore.services.credential_store import CredentialStore

router = APIRouter()


@router.get("", response_model=list[AuditLogItem])
def list_audit_logs(
    current_user: Annotated[UserOut, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> list[AuditLogItem]:
    user_filter = None if current_user.role == "admin" else current_user.id
    entries = CredentialStore(db).list_audit_logs(user_id=user_filter, limit=limit)
    return [AuditLogItem.model_validate(e) for e in entries]
