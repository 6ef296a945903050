"""Payroll API endpoints."""

from fastapi import APIRouter, status

from hrms_engine.api.dependencies import CompanyId, DbSession
from hrms_engine.api.schemas import (
    ErrorResponse,
    PayrollConfigPayload,
    PayrollPreviewRequest,
    PayrollResultResponse,
    PayrollRunRequest,
    PayrollRunResponse,
    to_pay_profile,
)
from hrms_engine.calculators import PayrollConfig, compute_payroll
from hrms_engine.services import PayrollService

router = APIRouter(prefix="/payroll", tags=["payroll"])


@router.post(
    "/preview",
    response_model=PayrollResultResponse,
    responses={422: {"model": ErrorResponse}},
)
async def preview_payroll(payload: PayrollPreviewRequest) -> PayrollResultResponse:
    """Compute pay for one employee against a config. Nothing is stored."""
    config = PayrollConfig.from_payload(payload.config.to_dict())
    result = compute_payroll(to_pay_profile(payload.employee), config)
    return PayrollResultResponse.from_result(result)


@router.get(
    "/config",
    response_model=PayrollConfigPayload,
    responses={404: {"model": ErrorResponse}},
)
async def get_payroll_config(db: DbSession, company_id: CompanyId) -> PayrollConfigPayload:
    config = await PayrollService(db).get_config(company_id)
    return PayrollConfigPayload.model_validate(config.to_payload())


@router.put(
    "/config",
    response_model=PayrollConfigPayload,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def put_payroll_config(
    db: DbSession,
    company_id: CompanyId,
    payload: PayrollConfigPayload,
) -> PayrollConfigPayload:
    """Replace the company's payroll configuration."""
    config = PayrollConfig.from_payload(payload.to_dict())
    await PayrollService(db).save_config(company_id, config)
    await db.commit()
    return PayrollConfigPayload.model_validate(config.to_payload())


@router.post(
    "/runs",
    response_model=PayrollRunResponse,
    status_code=status.HTTP_200_OK,
    responses={404: {"model": ErrorResponse}},
)
async def run_payroll(
    db: DbSession,
    company_id: CompanyId,
    payload: PayrollRunRequest,
) -> PayrollRunResponse:
    """Run payroll for all active employees and return the payment file."""
    outcome = await PayrollService(db).run_payroll(company_id, payload.actor)
    await db.commit()
    return PayrollRunResponse(
        success=outcome.success,
        message=outcome.message,
        payroll_run_id=outcome.payroll_run_id,
        employee_count=outcome.employee_count,
        error_count=outcome.error_count,
        flagged_count=outcome.flagged_count,
        total_gross=outcome.total_gross,
        total_net=outcome.total_net,
        ach_file_name=outcome.ach_file_name,
        ach_file_content=outcome.ach_file_content,
        errors=outcome.errors,
        flagged=outcome.flagged,
    )
