"""Bootstrap manifests for the Azure cloud provider in managed (ARO) mode.

The secret reproduces the format the Azure cloud controller merges into its
configuration: ``cloud-config`` holds a YAML document with the client
credentials, which Kubernetes then stores base64-encoded.
"""

from __future__ import annotations

import base64

from installer_assets._install_config_models import AzureCredentials
from installer_assets._manifest_io import object_meta, to_yaml

RBAC_API_VERSION = "rbac.authorization.k8s.io/v1"
RBAC_API_GROUP = "rbac.authorization.k8s.io"
SYSTEM_NAMESPACE = "kube-system"
ROLE_NAME = "aro-cloud-provider-secret-reader"
ROLE_BINDING_NAME = "aro-cloud-provider-secret-read"
SERVICE_ACCOUNT_NAME = "azure-cloud-provider"
SECRET_NAME = "azure-cloud-provider"
SECRET_DATA_KEY = "cloud-config"


def aro_role(_credentials: AzureCredentials) -> bytes:
    """Role allowing the cloud provider to read its secret."""
    return to_yaml(
        {
            "apiVersion": RBAC_API_VERSION,
            "kind": "Role",
            "metadata": object_meta(ROLE_NAME, SYSTEM_NAMESPACE),
            "rules": [
                {
                    "apiGroups": [""],
                    "resourceNames": [SECRET_NAME],
                    "resources": ["secrets"],
                    "verbs": ["get"],
                }
            ],
        }
    )


def aro_role_binding(_credentials: AzureCredentials) -> bytes:
    """Bind the cloud provider service account to :func:`aro_role`."""
    return to_yaml(
        {
            "apiVersion": RBAC_API_VERSION,
            "kind": "RoleBinding",
            "metadata": object_meta(ROLE_BINDING_NAME, SYSTEM_NAMESPACE),
            "roleRef": {
                "apiGroup": RBAC_API_GROUP,
                "kind": "Role",
                "name": ROLE_NAME,
            },
            "subjects": [
                {
                    "kind": "ServiceAccount",
                    "name": SERVICE_ACCOUNT_NAME,
                    "namespace": SYSTEM_NAMESPACE,
                }
            ],
        }
    )


def aro_secret(credentials: AzureCredentials) -> bytes:
    """Secret carrying the service principal for the cloud provider.

    Examples
    --------
    >>> b"cloud-config" in aro_secret(AzureCredentials("s", "id", "pw", "t"))
    True
    """
    # Must stay a nested document; the controller merges it over cloud.conf.
    cloud_config = to_yaml(
        {
            "aadClientId": credentials.client_id,
            "aadClientSecret": credentials.client_secret,
        }
    )
    return to_yaml(
        {
            "apiVersion": "v1",
            "data": {
                SECRET_DATA_KEY: base64.b64encode(cloud_config).decode("ascii"),
            },
            "kind": "Secret",
            "metadata": object_meta(SECRET_NAME, SYSTEM_NAMESPACE),
            "type": "Opaque",
        }
    )
