"""Job-posting quota: atomic decrement-and-create against the company counter."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hrms_engine.config import get_settings
from hrms_engine.models import Company, JobVacancy

logger = logging.getLogger(__name__)


class QuotaStoreUnavailableError(Exception):
    """Raised when the counter could not be read or written.

    Distinct from an exhausted quota, which is a normal outcome.
    """

    def __init__(self, company_id: UUID, attempts: int, reason: str | None = None):
        self.company_id = company_id
        self.attempts = attempts
        self.reason = reason
        msg = f"Job-posting quota store unavailable for company {company_id} after {attempts} attempt(s)"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class CompanyNotFoundError(Exception):
    """Raised when a company row does not exist."""

    def __init__(self, company_id: UUID):
        self.company_id = company_id
        super().__init__(f"Company {company_id} not found")


class _CompareAndSwapConflict(Exception):
    """The counter changed between read and conditional write."""


@dataclass(frozen=True)
class JobDraft:
    """Fields for a job vacancy to create once the quota allows it."""

    title: str
    department_name: str | None = None
    description: str | None = None
    location: str | None = None
    job_type: str | None = None
    closing_date: datetime | None = None


@dataclass(frozen=True)
class QuotaOutcome:
    """Result of a consume attempt.

    ``success`` False means the quota was exhausted and nothing was written.
    """

    success: bool
    remaining: int
    job_id: UUID | None = None


class JobPostingQuotaService:
    """Consumes job postings from a company's subscription counter.

    Each attempt is one transaction:
    1. Read the counter ``v`` (missing company or NULL counter = 0)
    2. If ``v <= 0``: exhausted, nothing is written
    3. ``UPDATE ... SET remaining = v - 1 WHERE remaining = v``
    4. Zero rows updated means another caller got there first: roll back and
       retry from 1
    5. Only after the conditional update succeeds is the job row inserted,
       in the same transaction, so a rollback undoes both

    Attempts are bounded by ``QUOTA_MAX_RETRIES``; running out, or a database
    error, raises :class:`QuotaStoreUnavailableError`.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_retries: int | None = None,
    ):
        self.session_factory = session_factory
        if max_retries is None:
            max_retries = get_settings().quota_max_retries
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.max_retries = max_retries

    async def try_consume_job_posting(self, company_id: UUID) -> bool:
        """Decrement the counter by one if it is positive."""
        outcome = await self._consume(company_id, draft=None)
        return outcome.success

    async def create_job_posting(self, company_id: UUID, draft: JobDraft) -> QuotaOutcome:
        """Consume one posting and create the job in the same transaction."""
        return await self._consume(company_id, draft=draft)

    async def get_remaining(self, company_id: UUID) -> int:
        async with self.session_factory() as session:
            value = await session.scalar(
                select(Company.job_postings_remaining).where(Company.company_id == company_id)
            )
        return value or 0

    async def activate_subscription(
        self, company_id: UUID, job_postings: int, plan: str | None = None
    ) -> None:
        """Reset the counter to a plan's allotment and mark the subscription active.

        Called by the payment webhook receiver after a successful charge.
        """
        if job_postings < 0:
            raise ValueError("job_postings must not be negative")

        values: dict[str, object] = {
            "job_postings_remaining": job_postings,
            "subscription_status": "active",
        }
        if plan is not None:
            values["subscription_plan"] = plan

        try:
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        update(Company)
                        .where(Company.company_id == company_id)
                        .values(**values)
                        .execution_options(synchronize_session=False)
                    )
                    if result.rowcount == 0:
                        raise CompanyNotFoundError(company_id)
        except DBAPIError as e:
            raise QuotaStoreUnavailableError(company_id, 1, str(e.orig)) from e

        logger.info(
            "Subscription activated for company %s with %d job postings", company_id, job_postings
        )

    async def _consume(self, company_id: UUID, draft: JobDraft | None) -> QuotaOutcome:
        last_reason: str | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                return await self._attempt(company_id, draft)
            except _CompareAndSwapConflict:
                last_reason = "counter changed concurrently"
                logger.debug(
                    "Quota conflict for company %s (attempt %d/%d)",
                    company_id,
                    attempt,
                    self.max_retries,
                )
            except OperationalError as e:
                # Lock timeouts and serialization failures are retryable
                last_reason = str(e.orig)
                logger.warning(
                    "Quota store contention for company %s (attempt %d/%d): %s",
                    company_id,
                    attempt,
                    self.max_retries,
                    last_reason,
                )
            except DBAPIError as e:
                raise QuotaStoreUnavailableError(company_id, attempt, str(e.orig)) from e

        raise QuotaStoreUnavailableError(company_id, self.max_retries, last_reason)

    async def _attempt(self, company_id: UUID, draft: JobDraft | None) -> QuotaOutcome:
        async with self.session_factory() as session:
            async with session.begin():
                current = await session.scalar(
                    select(Company.job_postings_remaining).where(
                        Company.company_id == company_id
                    )
                )
                current = current or 0

                if current <= 0:
                    logger.info("Job-posting quota exhausted for company %s", company_id)
                    return QuotaOutcome(success=False, remaining=0)

                result = await session.execute(
                    update(Company)
                    .where(
                        Company.company_id == company_id,
                        Company.job_postings_remaining == current,
                    )
                    .values(job_postings_remaining=current - 1)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise _CompareAndSwapConflict()

                job_id = None
                if draft is not None:
                    job = JobVacancy(
                        company_id=company_id,
                        title=draft.title,
                        department_name=draft.department_name,
                        description=draft.description,
                        location=draft.location,
                        job_type=draft.job_type,
                        closing_date=draft.closing_date,
                        status="Open",
                    )
                    session.add(job)
                    await session.flush()
                    job_id = job.job_id

        logger.info(
            "Job posting consumed for company %s, %d remaining", company_id, current - 1
        )
        return QuotaOutcome(success=True, remaining=current - 1, job_id=job_id)
