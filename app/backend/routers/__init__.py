"""
Routers package for FastAPI endpoints.

Organized by domain:
- process: Job processing endpoint
- jobs: Job status lookups
"""

from . import jobs, process

__all__ = ["jobs", "process"]
