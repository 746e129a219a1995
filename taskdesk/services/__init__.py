from __future__ import annotations

from .mock_api import (
    MOCK_PASSWORD,
    MockAuthService,
    MockServices,
    MockTaskService,
    MockTeamService,
    create_mock_services,
)

__all__ = [
    "MOCK_PASSWORD",
    "MockAuthService",
    "MockServices",
    "MockTaskService",
    "MockTeamService",
    "create_mock_services",
]
