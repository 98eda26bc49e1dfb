"""Azure service principal loading and session checks."""

from __future__ import annotations

import json
import logging
import os
from collections import abc as cabc
from dataclasses import dataclass
from pathlib import Path

from installer_assets._errors import CredentialError
from installer_assets._install_config_models import AzureCredentials

logger = logging.getLogger(__name__)

AUTH_LOCATION_ENV = "AZURE_AUTH_LOCATION"
DEFAULT_AUTH_FILE = Path(".azure") / "osServicePrincipal.json"

_FIELDS = {
    "subscription_id": "subscriptionId",
    "client_id": "clientId",
    "client_secret": "clientSecret",
    "tenant_id": "tenantId",
}


@dataclass(frozen=True, slots=True)
class AzureSession:
    """An authenticated view of the Azure credentials."""

    credentials: AzureCredentials


def auth_file_path(
    auth_location: Path | None = None,
    env: cabc.Mapping[str, str] | None = None,
) -> Path:
    """Return the service principal file to read.

    An explicit ``auth_location`` wins over ``AZURE_AUTH_LOCATION``, which wins
    over ``~/.azure/osServicePrincipal.json``.
    """
    if auth_location is not None:
        return auth_location
    env_value = (env if env is not None else os.environ).get(AUTH_LOCATION_ENV)
    if env_value:
        return Path(env_value)
    return Path.home() / DEFAULT_AUTH_FILE


def load_credentials(path: Path) -> AzureCredentials:
    """Read Azure credentials from a service principal file.

    Raises
    ------
    CredentialError
        If the file is missing or is not a JSON object.
    """
    logger.debug("Loading Azure service principal from %s", path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        msg = f"Azure service principal file not found: {path}"
        raise CredentialError(msg) from exc
    except json.JSONDecodeError as exc:
        msg = f"Azure service principal file is not valid JSON: {path}"
        raise CredentialError(msg) from exc

    if not isinstance(payload, dict):
        msg = f"Azure service principal file must contain an object: {path}"
        raise CredentialError(msg)

    return AzureCredentials(
        **{attr: str(payload.get(key) or "") for attr, key in _FIELDS.items()}
    )


def azure_session(credentials: AzureCredentials | None) -> AzureSession:
    """Return a session for ``credentials``.

    Raises
    ------
    CredentialError
        If no credentials were resolved or any field is empty.

    Examples
    --------
    >>> azure_session(AzureCredentials("s", "c", "x", "t")).credentials.tenant_id
    't'
    """
    if credentials is None:
        msg = "no Azure credentials were resolved"
        raise CredentialError(msg)

    missing = [
        key for attr, key in _FIELDS.items() if not getattr(credentials, attr)
    ]
    if missing:
        msg = f"Azure credentials are missing {', '.join(missing)}"
        raise CredentialError(msg)

    return AzureSession(credentials=credentials)
