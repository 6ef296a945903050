"""Job posting and subscription quota endpoints."""

from fastapi import APIRouter, HTTPException, status

from hrms_engine.api.dependencies import CompanyId, SessionFactory
from hrms_engine.api.schemas import (
    ErrorResponse,
    JobCreate,
    JobCreateResponse,
    QuotaResponse,
    SubscriptionActivateRequest,
)
from hrms_engine.services import JobDraft, JobPostingQuotaService

router = APIRouter(tags=["jobs"])


@router.post(
    "/jobs",
    response_model=JobCreateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def create_job(
    session_factory: SessionFactory,
    company_id: CompanyId,
    payload: JobCreate,
) -> JobCreateResponse:
    """Post a job if the subscription has postings left."""
    service = JobPostingQuotaService(session_factory)
    outcome = await service.create_job_posting(
        company_id,
        JobDraft(
            title=payload.title,
            department_name=payload.department_name,
            description=payload.description,
            location=payload.location,
            job_type=payload.job_type,
            closing_date=payload.closing_date,
        ),
    )
    if not outcome.success or outcome.job_id is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Job posting limit reached. Upgrade your plan to post more jobs.",
        )
    return JobCreateResponse(job_id=outcome.job_id, job_postings_remaining=outcome.remaining)


@router.get("/subscription/job-postings", response_model=QuotaResponse)
async def get_job_postings(
    session_factory: SessionFactory,
    company_id: CompanyId,
) -> QuotaResponse:
    remaining = await JobPostingQuotaService(session_factory).get_remaining(company_id)
    return QuotaResponse(job_postings_remaining=remaining)


@router.post(
    "/subscription/job-postings",
    response_model=QuotaResponse,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def activate_subscription(
    session_factory: SessionFactory,
    company_id: CompanyId,
    payload: SubscriptionActivateRequest,
) -> QuotaResponse:
    """Reset the posting allotment after a confirmed subscription payment."""
    service = JobPostingQuotaService(session_factory)
    await service.activate_subscription(company_id, payload.job_postings, payload.plan)
    return QuotaResponse(job_postings_remaining=payload.job_postings)
