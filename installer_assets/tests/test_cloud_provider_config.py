"""Unit tests for the cloud provider config asset."""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from installer_assets._asset import AssetFile, Parents
from installer_assets._errors import (
    CredentialError,
    InvalidPlatformError,
    SerializationError,
    UndeclaredDependencyError,
)
from installer_assets._install_config import (
    ClusterID,
    InstallConfig,
    PlatformCreds,
    PlatformCredsCheck,
)
from installer_assets._install_config_models import (
    AzureCredentials,
    AzurePlatform,
    InstallConfigData,
)
from installer_assets._manifest_io import DirectoryFetcher
from installer_assets._settings import ManifestPaths
from installer_assets.cloud_provider_config import CloudProviderConfig

CREDENTIALS = AzureCredentials(
    subscription_id="sub-123",
    client_id="client-abc",
    client_secret="s3cr3t",
    tenant_id="tenant-xyz",
)


def _parents(
    asset: CloudProviderConfig,
    *,
    platform_name: str = "azure",
    azure: AzurePlatform | None = None,
    credentials: AzureCredentials | None = CREDENTIALS,
) -> Parents:
    if platform_name == "azure" and azure is None:
        azure = AzurePlatform(region="centralus")
    install_config = InstallConfig(
        InstallConfigData(
            cluster_name="demo", platform_name=platform_name, azure=azure
        )
    )
    return Parents(
        asset.dependencies(),
        {
            PlatformCreds: PlatformCreds(azure=credentials),
            InstallConfig: install_config,
            ClusterID: ClusterID(infra_id="abc123", cluster_uuid="uuid"),
        },
    )


def _manifest(asset_file: AssetFile) -> dict[str, Any]:
    return yaml.safe_load(asset_file.data)


def _cloud_config(asset: CloudProviderConfig) -> dict[str, Any]:
    return json.loads(_manifest(asset.files()[0])["data"]["config"])


def test_generates_single_config_map_without_managed_mode() -> None:
    asset = CloudProviderConfig()
    asset.generate(_parents(asset))

    files = asset.files()
    assert len(files) == 1, "Only the config map should be generated"
    assert files[0].filename == "manifests/cloud-provider-config.yaml"
    manifest = _manifest(files[0])
    assert manifest["kind"] == "ConfigMap"
    assert manifest["apiVersion"] == "v1"
    assert manifest["metadata"]["namespace"] == "openshift-config"
    assert manifest["metadata"]["name"] == "cloud-provider-config"
    assert list(manifest["data"]) == ["config"], "Expected a single data key"
    assert asset.config_map == manifest, "Stored config map should match file"


def test_generates_managed_manifests_in_fixed_order() -> None:
    asset = CloudProviderConfig()
    asset.generate(
        _parents(asset, azure=AzurePlatform(region="centralus", aro=True))
    )

    files = asset.files()
    assert [f.filename for f in files] == [
        "manifests/cloud-provider-config.yaml",
        "manifests/aro-cloud-provider-secret-reader-role.yaml",
        "manifests/aro-cloud-provider-secret-reader-rolebinding.yaml",
        "manifests/aro-cloud-provider-secret.yaml",
    ]
    assert [_manifest(f)["kind"] for f in files] == [
        "ConfigMap",
        "Role",
        "RoleBinding",
        "Secret",
    ]
    assert _cloud_config(asset)["useManagedIdentityExtension"] is False


def test_custom_manifest_dir_is_used() -> None:
    asset = CloudProviderConfig(paths=ManifestPaths(manifest_dir="out/manifests"))
    asset.generate(_parents(asset))

    assert asset.files()[0].filename == "out/manifests/cloud-provider-config.yaml"


def test_unsupported_platform_fails_without_output() -> None:
    asset = CloudProviderConfig()

    with pytest.raises(InvalidPlatformError, match="invalid Platform: libvirt"):
        asset.generate(_parents(asset, platform_name="libvirt"))

    assert asset.files() == [], "No files should be exposed after failure"
    assert asset.config_map is None


def test_missing_credentials_fail_with_session_error() -> None:
    asset = CloudProviderConfig()

    with pytest.raises(CredentialError, match="could not get azure session"):
        asset.generate(_parents(asset, credentials=None))

    assert asset.files() == []


def test_failed_regeneration_discards_previous_output() -> None:
    asset = CloudProviderConfig()
    asset.generate(_parents(asset))
    assert asset.files(), "First generation should succeed"

    with pytest.raises(InvalidPlatformError):
        asset.generate(_parents(asset, platform_name="none"))

    assert asset.files() == [], "Stale output must not survive a failure"


def test_derives_network_names_from_infra_id() -> None:
    asset = CloudProviderConfig()
    asset.generate(_parents(asset))

    config = _cloud_config(asset)
    assert config["vnetName"] == "abc123-vnet"
    assert config["subnetName"] == "abc123-worker-subnet"
    assert config["securityGroupName"] == "abc123-nsg"
    assert config["resourceGroup"] == "abc123-rg"
    assert config["vnetResourceGroup"] == "abc123-rg"
    assert config["routeTableName"] == "abc123-node-routetable"
    assert config["subscriptionId"] == "sub-123"
    assert config["tenantId"] == "tenant-xyz"
    assert config["location"] == "centralus"
    assert config["useManagedIdentityExtension"] is True


def test_user_overrides_take_precedence() -> None:
    asset = CloudProviderConfig()
    asset.generate(
        _parents(
            asset,
            azure=AzurePlatform(
                region="eastus",
                network_resource_group_name="shared-network",
                virtual_network="shared-vnet",
                compute_subnet="shared-workers",
            ),
        )
    )

    config = _cloud_config(asset)
    assert config["vnetResourceGroup"] == "shared-network"
    assert config["vnetName"] == "shared-vnet"
    assert config["subnetName"] == "shared-workers"
    assert config["resourceGroup"] == "abc123-rg", "Cluster group is not overridden"
    assert config["securityGroupName"] == "abc123-nsg"


def test_overrides_apply_per_field() -> None:
    asset = CloudProviderConfig()
    asset.generate(
        _parents(asset, azure=AzurePlatform(virtual_network="shared-vnet"))
    )

    config = _cloud_config(asset)
    assert config["vnetName"] == "shared-vnet"
    assert config["subnetName"] == "abc123-worker-subnet"


def test_existing_resource_group_is_used_for_cluster_resources() -> None:
    asset = CloudProviderConfig()
    asset.generate(
        _parents(asset, azure=AzurePlatform(resource_group_name="existing-rg"))
    )

    config = _cloud_config(asset)
    assert config["resourceGroup"] == "existing-rg"
    assert config["vnetResourceGroup"] == "existing-rg"


def test_secret_payload_round_trips_credentials() -> None:
    asset = CloudProviderConfig()
    asset.generate(_parents(asset, azure=AzurePlatform(aro=True)))

    secret = _manifest(asset.files()[3])
    assert secret["metadata"] == {
        "creationTimestamp": None,
        "name": "azure-cloud-provider",
        "namespace": "kube-system",
    }
    assert secret["type"] == "Opaque"
    nested = yaml.safe_load(base64.b64decode(secret["data"]["cloud-config"]))
    assert nested == {"aadClientId": "client-abc", "aadClientSecret": "s3cr3t"}


def test_role_and_binding_shape() -> None:
    asset = CloudProviderConfig()
    asset.generate(_parents(asset, azure=AzurePlatform(aro=True)))

    role = _manifest(asset.files()[1])
    assert role["apiVersion"] == "rbac.authorization.k8s.io/v1"
    assert role["metadata"]["name"] == "aro-cloud-provider-secret-reader"
    assert role["metadata"]["namespace"] == "kube-system"
    assert role["rules"] == [
        {
            "apiGroups": [""],
            "resourceNames": ["azure-cloud-provider"],
            "resources": ["secrets"],
            "verbs": ["get"],
        }
    ]

    binding = _manifest(asset.files()[2])
    assert binding["metadata"]["name"] == "aro-cloud-provider-secret-read"
    assert binding["roleRef"] == {
        "apiGroup": "rbac.authorization.k8s.io",
        "kind": "Role",
        "name": "aro-cloud-provider-secret-reader",
    }
    assert binding["subjects"] == [
        {
            "kind": "ServiceAccount",
            "name": "azure-cloud-provider",
            "namespace": "kube-system",
        }
    ]


def test_managed_manifest_failure_aborts_generation(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def broken_secret(_credentials: AzureCredentials) -> bytes:
        raise SerializationError("cannot encode manifest")

    monkeypatch.setattr(
        "installer_assets.cloud_provider_config.aro_secret", broken_secret
    )
    asset = CloudProviderConfig()

    with pytest.raises(
        SerializationError, match="failed to create Cloud Provider Config manifest"
    ):
        asset.generate(_parents(asset, azure=AzurePlatform(aro=True)))

    assert asset.files() == [], "Partial managed output must be discarded"


def test_output_is_deterministic() -> None:
    first = CloudProviderConfig()
    first.generate(_parents(first, azure=AzurePlatform(aro=True)))
    second = CloudProviderConfig()
    second.generate(_parents(second, azure=AzurePlatform(aro=True)))

    assert first.files() == second.files()


def test_credentials_check_is_ordering_only() -> None:
    asset = CloudProviderConfig()
    deps = {dep.asset_type: dep for dep in asset.dependencies()}

    assert set(deps) == {PlatformCreds, InstallConfig, ClusterID, PlatformCredsCheck}
    assert deps[PlatformCredsCheck].ordering_only is True
    with pytest.raises(UndeclaredDependencyError):
        _parents(asset).get(PlatformCredsCheck)


@pytest.mark.parametrize("generated", [False, True])
def test_load_never_reports_found(tmp_path: Path, generated: bool) -> None:
    manifest = tmp_path / "manifests" / "cloud-provider-config.yaml"
    manifest.parent.mkdir()
    manifest.write_text("kind: ConfigMap\n", encoding="utf-8")
    asset = CloudProviderConfig()
    if generated:
        asset.generate(_parents(asset))

    assert asset.load(DirectoryFetcher(tmp_path)) is False
