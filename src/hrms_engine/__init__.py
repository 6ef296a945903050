"""HRMS engine: payroll computation, company verification and job-posting quotas."""

__version__ = "1.0.0"
