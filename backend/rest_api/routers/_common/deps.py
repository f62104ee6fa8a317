"""
Router dependencies: staff identity and service construction.

Authentication is an external collaborator: by the time a request
reaches this service the gateway has resolved the staff member and
forwards the id in the X-Staff-Id header.
"""

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from shared.config.settings import Settings, get_settings
from shared.infrastructure.db import get_db
from rest_api.repositories import SqlCommandRepository
from rest_api.services.domain import CommandLifecycle, TableService
from rest_api.services.permissions import RoleAuthorizer


def current_staff_id(
    x_staff_id: str | None = Header(default=None, alias="X-Staff-Id"),
) -> str:
    """Staff id forwarded by the authentication gateway."""
    staff_id = (x_staff_id or "").strip()
    if not staff_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Staff-Id header",
        )
    return staff_id


def get_repository(db: Session = Depends(get_db)) -> SqlCommandRepository:
    return SqlCommandRepository(db)


def get_lifecycle(
    repo: SqlCommandRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
) -> CommandLifecycle:
    return CommandLifecycle(
        repo,
        RoleAuthorizer(repo),
        service_charge_rate=settings.service_charge_rate,
    )


def get_table_service(repo: SqlCommandRepository = Depends(get_repository)) -> TableService:
    return TableService(repo, RoleAuthorizer(repo))
