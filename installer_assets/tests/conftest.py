from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest


def pytest_configure() -> None:
    project_root = Path(__file__).resolve().parents[2]
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))


@pytest.fixture
def service_principal(tmp_path: Path) -> Path:
    """Write a complete Azure service principal file."""
    path = tmp_path / "osServicePrincipal.json"
    path.write_text(
        json.dumps(
            {
                "subscriptionId": "sub-123",
                "clientId": "client-abc",
                "clientSecret": "s3cr3t: with colon",
                "tenantId": "tenant-xyz",
            }
        ),
        encoding="utf-8",
    )
    return path
