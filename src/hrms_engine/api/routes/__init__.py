"""API routes."""

from hrms_engine.api.routes.health import router as health_router
from hrms_engine.api.routes.jobs import router as jobs_router
from hrms_engine.api.routes.payroll import router as payroll_router
from hrms_engine.api.routes.verification import router as verification_router

__all__ = ["health_router", "jobs_router", "payroll_router", "verification_router"]
