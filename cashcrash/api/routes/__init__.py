"""API routes package."""

from . import (
    admin,
    auth,
    companies,
    currencies,
    health,
    startups,
    teams,
)


__all__ = [
    "admin",
    "auth",
    "companies",
    "currencies",
    "health",
    "startups",
    "teams",
]
