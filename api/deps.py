from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models import Role
from services.workflow import Principal, WorkflowGateway


async def get_principal(
    x_principal_id: Optional[str] = Header(None),
    x_principal_role: Optional[str] = Header(None),
) -> Principal:
    """Principal as asserted by the upstream authentication service."""
    if not x_principal_id or not x_principal_role:
        raise HTTPException(status_code=401, detail="Authentication required")
    try:
        role = Role(x_principal_role.strip().upper())
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Unknown role '{x_principal_role}'")
    return Principal(id=x_principal_id.strip(), role=role)


async def get_gateway(db: AsyncSession = Depends(get_db)) -> WorkflowGateway:
    return WorkflowGateway(db)
