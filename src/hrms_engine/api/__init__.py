"""HTTP API for the HRMS engine."""
