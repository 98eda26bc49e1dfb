"""Build the Azure cloud provider configuration document.

The document is the ``cloud.conf`` read by the in-cluster Azure cloud
provider. It is JSON, tab-indented, with fields in a fixed order.

Examples
--------
>>> config = AzureCloudProviderConfig(
...     cloud_name="AzurePublicCloud",
...     resource_group_name="abc123-rg",
...     group_location="centralus",
...     resource_prefix="abc123",
...     subscription_id="sub",
...     tenant_id="tenant",
...     network_resource_group_name="abc123-rg",
...     network_security_group_name="abc123-nsg",
...     virtual_network_name="abc123-vnet",
...     subnet_name="abc123-worker-subnet",
... )
>>> '"vnetName": "abc123-vnet"' in config.to_json()
True
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from installer_assets._errors import SerializationError

BACKOFF_DURATION_SECONDS = 6
LOAD_BALANCER_SKU = "standard"


@dataclass(frozen=True, slots=True)
class AzureCloudProviderConfig:
    """Inputs to the Azure cloud provider configuration.

    Attributes
    ----------
    cloud_name
        Azure cloud environment name.
    resource_group_name
        Resource group holding the cluster resources.
    group_location
        Azure region.
    resource_prefix
        Prefix for derived resource names (the infra ID).
    subscription_id, tenant_id
        Identifiers taken from the Azure session.
    network_resource_group_name, network_security_group_name,
    virtual_network_name, subnet_name
        Network resources used by the cluster.
    aro
        Managed (ARO) mode; disables the managed identity extension.
    """

    cloud_name: str
    resource_group_name: str
    group_location: str
    resource_prefix: str
    subscription_id: str
    tenant_id: str
    network_resource_group_name: str
    network_security_group_name: str
    virtual_network_name: str
    subnet_name: str
    aro: bool = False

    def to_document(self) -> dict[str, Any]:
        """Return the configuration as an ordered mapping."""
        return {
            "cloud": self.cloud_name,
            "tenantId": self.tenant_id,
            # Client credentials are supplied by the ARO secret or the VM identity.
            "aadClientId": "",
            "aadClientSecret": "",
            "aadClientCertPath": "",
            "aadClientCertPassword": "",
            "useManagedIdentityExtension": not self.aro,
            "userAssignedIdentityID": "",
            "subscriptionId": self.subscription_id,
            "resourceGroup": self.resource_group_name,
            "location": self.group_location,
            "vnetName": self.virtual_network_name,
            "vnetResourceGroup": self.network_resource_group_name,
            "subnetName": self.subnet_name,
            "securityGroupName": self.network_security_group_name,
            "routeTableName": f"{self.resource_prefix}-node-routetable",
            "cloudProviderBackoff": True,
            "cloudProviderBackoffDuration": BACKOFF_DURATION_SECONDS,
            "useInstanceMetadata": True,
            "loadBalancerSku": LOAD_BALANCER_SKU,
            "excludeMasterFromStandardLB": False,
        }

    def to_json(self) -> str:
        """Serialize the configuration.

        Raises
        ------
        SerializationError
            If a field holds a value JSON cannot encode.
        """
        try:
            return json.dumps(self.to_document(), indent="\t") + "\n"
        except (TypeError, ValueError) as exc:
            msg = f"cannot encode Azure cloud provider config: {exc}"
            raise SerializationError(msg) from exc
