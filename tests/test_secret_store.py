"""Tests for connect_dns.secret_store."""

import base64
import json
from unittest.mock import MagicMock, patch

import pytest
from azure.core.exceptions import ResourceNotFoundError
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException

from connect_dns.config import AppConfig
from connect_dns.errors import NotFoundError
from connect_dns.secret_store import (
    KeyVaultSecretStore,
    KubernetesSecretStore,
    get_secret_store,
)


def _k8s_secret(data):
    secret = MagicMock()
    secret.data = data
    return secret


def _b64(value: str) -> str:
    return base64.b64encode(value.encode()).decode()


class TestKubernetesSecretStore:
    def test_returns_decoded_value(self):
        api = MagicMock()
        api.read_namespaced_secret.return_value = _k8s_secret({"token": _b64("pdd-token-123")})
        store = KubernetesSecretStore(_core_api=api)

        assert store.get_secret_value("cert-manager", "yandex-pdd", "token") == "pdd-token-123"
        api.read_namespaced_secret.assert_called_once_with(name="yandex-pdd", namespace="cert-manager")

    def test_missing_key_raises_not_found(self):
        api = MagicMock()
        api.read_namespaced_secret.return_value = _k8s_secret({"other": _b64("x")})
        store = KubernetesSecretStore(_core_api=api)

        with pytest.raises(NotFoundError, match='key "token" not found in secret "cert-manager/yandex-pdd"'):
            store.get_secret_value("cert-manager", "yandex-pdd", "token")

    def test_secret_without_data_raises_not_found(self):
        api = MagicMock()
        api.read_namespaced_secret.return_value = _k8s_secret(None)
        store = KubernetesSecretStore(_core_api=api)

        with pytest.raises(NotFoundError):
            store.get_secret_value("cert-manager", "yandex-pdd", "token")

    def test_missing_secret_raises_not_found(self):
        api = MagicMock()
        api.read_namespaced_secret.side_effect = ApiException(status=404, reason="Not Found")
        store = KubernetesSecretStore(_core_api=api)

        with pytest.raises(NotFoundError, match="not found"):
            store.get_secret_value("cert-manager", "yandex-pdd", "token")

    def test_other_api_errors_propagate(self):
        api = MagicMock()
        api.read_namespaced_secret.side_effect = ApiException(status=403, reason="Forbidden")
        store = KubernetesSecretStore(_core_api=api)

        with pytest.raises(ApiException):
            store.get_secret_value("cert-manager", "yandex-pdd", "token")

    @patch("connect_dns.secret_store.k8s_client")
    @patch("connect_dns.secret_store.k8s_config")
    def test_prefers_in_cluster_config(self, mock_config, mock_client):
        mock_client.CoreV1Api.return_value.read_namespaced_secret.return_value = _k8s_secret({"t": _b64("v")})
        store = KubernetesSecretStore()

        store.get_secret_value("ns", "s", "t")
        store.get_secret_value("ns", "s", "t")

        mock_config.load_incluster_config.assert_called_once()
        mock_config.load_kube_config.assert_not_called()
        mock_client.CoreV1Api.assert_called_once()

    @patch("connect_dns.secret_store.k8s_client")
    @patch("connect_dns.secret_store.k8s_config")
    def test_falls_back_to_kubeconfig(self, mock_config, mock_client):
        mock_config.load_incluster_config.side_effect = ConfigException("not in a pod")
        mock_client.CoreV1Api.return_value.read_namespaced_secret.return_value = _k8s_secret({"t": _b64("v")})
        store = KubernetesSecretStore(kubeconfig_path="/config/kubeconfig")

        assert store.get_secret_value("ns", "s", "t") == "v"
        mock_config.load_kube_config.assert_called_once_with(config_file="/config/kubeconfig")


class TestKeyVaultSecretStore:
    def test_reads_key_from_json_secret(self):
        client = MagicMock()
        client.get_secret.return_value = MagicMock(value=json.dumps({"token": "pdd-token-123"}))
        store = KeyVaultSecretStore("https://v.vault.azure.net", _secret_client=client)

        assert store.get_secret_value("cert-manager", "yandex-pdd", "token") == "pdd-token-123"
        client.get_secret.assert_called_once_with("cert-manager-yandex-pdd")

    def test_sanitizes_vault_secret_name(self):
        client = MagicMock()
        client.get_secret.return_value = MagicMock(value=json.dumps({"token": "t"}))
        store = KeyVaultSecretStore("https://v.vault.azure.net", _secret_client=client)

        store.get_secret_value("team.dns", "pdd_token", "token")

        client.get_secret.assert_called_once_with("team-dns-pdd-token")

    def test_missing_secret_raises_not_found(self):
        client = MagicMock()
        client.get_secret.side_effect = ResourceNotFoundError("SecretNotFound")
        store = KeyVaultSecretStore("https://v.vault.azure.net", _secret_client=client)

        with pytest.raises(NotFoundError, match="cert-manager-yandex-pdd"):
            store.get_secret_value("cert-manager", "yandex-pdd", "token")

    def test_missing_key_raises_not_found(self):
        client = MagicMock()
        client.get_secret.return_value = MagicMock(value=json.dumps({"other": "x"}))
        store = KeyVaultSecretStore("https://v.vault.azure.net", _secret_client=client)

        with pytest.raises(NotFoundError, match="key 'token'"):
            store.get_secret_value("cert-manager", "yandex-pdd", "token")

    def test_non_json_secret_raises_value_error(self):
        client = MagicMock()
        client.get_secret.return_value = MagicMock(value="plain-token")
        store = KeyVaultSecretStore("https://v.vault.azure.net", _secret_client=client)

        with pytest.raises(ValueError, match="JSON object"):
            store.get_secret_value("cert-manager", "yandex-pdd", "token")

    @patch("connect_dns.secret_store.SecretClient")
    @patch("connect_dns.secret_store.DefaultAzureCredential")
    def test_credential_shared_across_stores(self, mock_cred, mock_client_cls):
        KeyVaultSecretStore("https://a.vault.azure.net")
        KeyVaultSecretStore("https://b.vault.azure.net")

        assert mock_cred.call_count == 1
        mock_client_cls.assert_called_with("https://b.vault.azure.net", mock_cred.return_value)


class TestGetSecretStore:
    @patch("connect_dns.secret_store.KubernetesSecretStore")
    def test_kubernetes_backend(self, mock_store_cls):
        config = AppConfig(group_name="g", kubeconfig_path="/kc")

        store = get_secret_store(config)

        mock_store_cls.assert_called_once_with(kubeconfig_path="/kc")
        assert store is mock_store_cls.return_value

    @patch("connect_dns.secret_store.KeyVaultSecretStore")
    def test_keyvault_backend(self, mock_store_cls):
        config = AppConfig(group_name="g", secret_backend="keyvault", keyvault_url="https://v.vault.azure.net")

        store = get_secret_store(config)

        mock_store_cls.assert_called_once_with("https://v.vault.azure.net")
        assert store is mock_store_cls.return_value

    def test_keyvault_backend_requires_url(self):
        config = AppConfig(group_name="g", secret_backend="keyvault")

        with pytest.raises(ValueError, match="AZURE_KEYVAULT_URL"):
            get_secret_store(config)

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown secret backend: 'vault'"):
            get_secret_store(AppConfig(group_name="g", secret_backend="vault"))
