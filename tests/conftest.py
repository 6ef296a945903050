"""Pytest fixtures for HRMS engine tests."""

from __future__ import annotations

from decimal import Decimal
from typing import AsyncGenerator
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from hrms_engine.calculators import PayrollConfig
from hrms_engine.database import create_schema, make_session_factory
from hrms_engine.models import Company, Employee

# File-backed SQLite so separate connections see the same data
# (the quota tests race two sessions against one counter)


@pytest.fixture
async def engine(tmp_path):
    """Create test database engine."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'hrms_test.db'}",
        echo=False,
        poolclass=NullPool,
    )

    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return make_session_factory(engine)


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def statutory_config() -> PayrollConfig:
    """Pension before income tax, with an employer pension match."""
    return PayrollConfig.from_payload(
        {
            "rules": [
                {
                    "code": "PENSION",
                    "name": "Pension",
                    "rate": "0.05",
                    "reduces_taxable": True,
                    "exempt_worker_types": ["Contractor"],
                },
                {
                    "code": "HEALTH",
                    "name": "Health insurance",
                    "rate": "0.01",
                    "exempt_worker_types": ["Contractor"],
                },
                {
                    "code": "PAYE",
                    "name": "Income tax",
                    "base": "taxable",
                    "brackets": [
                        {"min": 0, "max": 5000, "rate": 0},
                        {"min": 5000, "max": None, "rate": "0.25"},
                    ],
                    "exempt_worker_types": ["Contractor"],
                },
                {
                    "code": "PENSION_ER",
                    "name": "Pension (employer)",
                    "rate": "0.05",
                    "employer": True,
                    "exempt_worker_types": ["Contractor"],
                },
            ],
            "daily_target_hours": 8,
        }
    )


@pytest.fixture
async def test_company(session_factory, statutory_config: PayrollConfig) -> Company:
    """Create a committed test company with one job posting left."""
    async with session_factory() as s:
        company = Company(
            company_id=uuid4(),
            name="Test Company",
            status="active",
            subscription_plan="basic",
            subscription_status="active",
            job_postings_remaining=1,
            payroll_config=statutory_config.to_payload(),
        )
        s.add(company)
        await s.commit()
    return company


async def _add_employee(
    session_factory: async_sessionmaker[AsyncSession],
    company: Company,
    name: str,
    **fields,
) -> Employee:
    """Insert and commit an employee; defaults to salaried with bank details."""
    values = {
        "worker_type": "Salaried",
        "salary": Decimal("6000.00"),
        "bank_name": "First Bank",
        "account_number": "0011223344",
        "branch_code": "010",
    }
    values.update(fields)
    async with session_factory() as s:
        employee = Employee(employee_id=uuid4(), company_id=company.company_id, name=name, **values)
        s.add(employee)
        await s.commit()
    return employee


@pytest.fixture
def employee_factory(session_factory, test_company):
    """Insert employees into the test company."""

    async def create(name: str, **fields) -> Employee:
        return await _add_employee(session_factory, test_company, name, **fields)

    return create
