from fastapi import APIRouter, Depends

from api.deps import get_gateway, get_principal
from api.serializers import rate_entry_to_response, rate_quote_to_response
from schemas.rate import RateUpsert
from services.workflow import Principal, WorkflowGateway

router = APIRouter(prefix="/api/rates", tags=["rates"])


@router.get("")
async def list_rates(gateway: WorkflowGateway = Depends(get_gateway)):
    return [rate_quote_to_response(q) for q in await gateway.list_rates()]


@router.get("/{purpose}")
async def resolve_rate(purpose: str, gateway: WorkflowGateway = Depends(get_gateway)):
    return rate_quote_to_response(await gateway.resolve_rate(purpose))


@router.put("/{purpose}")
async def upsert_rate(
    purpose: str,
    body: RateUpsert,
    principal: Principal = Depends(get_principal),
    gateway: WorkflowGateway = Depends(get_gateway),
):
    entry = await gateway.upsert_rate(principal, purpose, body.annual_rate_percent)
    return rate_entry_to_response(entry)
