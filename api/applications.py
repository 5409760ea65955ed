from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from api.deps import get_gateway, get_principal
from api.serializers import application_to_response, money
from schemas.application import ApplicationAdvance, ApplicationCreate, CreditScoreUpdate
from services.workflow import Principal, WorkflowGateway
from utils.case import dict_keys_to_camel

router = APIRouter(prefix="/api/applications", tags=["applications"])

_MONEY_STATS = ("total_loan_amount", "approved_amount", "average_loan_amount")


@router.get("")
async def list_applications(
    status: Optional[str] = None,
    principal: Principal = Depends(get_principal),
    gateway: WorkflowGateway = Depends(get_gateway),
):
    apps = await gateway.list_applications(principal, status=status)
    return [application_to_response(a) for a in apps]


@router.get("/stats")
async def application_stats(
    principal: Principal = Depends(get_principal),
    gateway: WorkflowGateway = Depends(get_gateway),
):
    stats = await gateway.application_stats(principal)
    for key in _MONEY_STATS:
        stats[key] = money(stats[key])
    stats["approval_rate"] = float(stats["approval_rate"])
    return dict_keys_to_camel(stats)


@router.get("/{application_id}")
async def get_application(
    application_id: str,
    principal: Principal = Depends(get_principal),
    gateway: WorkflowGateway = Depends(get_gateway),
):
    return application_to_response(await gateway.get_application(principal, application_id))


@router.post("", status_code=201)
async def submit_application(
    body: ApplicationCreate,
    principal: Principal = Depends(get_principal),
    gateway: WorkflowGateway = Depends(get_gateway),
):
    app = await gateway.submit_loan_application(principal, body.amount, body.term_months, body.purpose)
    return application_to_response(app)


@router.post("/{application_id}/advance")
async def advance_application(
    application_id: str,
    body: ApplicationAdvance,
    principal: Principal = Depends(get_principal),
    gateway: WorkflowGateway = Depends(get_gateway),
):
    app = await gateway.advance_application(
        principal,
        application_id,
        body.decision,
        reason=body.reason,
        approved_amount=body.approved_amount,
    )
    return application_to_response(app)


@router.put("/{application_id}/credit-score")
async def attach_credit_score(
    application_id: str,
    body: CreditScoreUpdate,
    principal: Principal = Depends(get_principal),
    gateway: WorkflowGateway = Depends(get_gateway),
):
    app = await gateway.attach_credit_score(principal, application_id, body.credit_score)
    return application_to_response(app)
