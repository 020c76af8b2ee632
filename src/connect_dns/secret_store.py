"""Secret stores that hand the solver its PDD token."""

from __future__ import annotations

import base64
import json
import logging
import re
from abc import ABC, abstractmethod

from azure.core.exceptions import ResourceNotFoundError
from azure.identity import DefaultAzureCredential
from azure.keyvault.secrets import SecretClient
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException

from connect_dns.config import AppConfig
from connect_dns.errors import NotFoundError

logger = logging.getLogger(__name__)

_credential: DefaultAzureCredential | None = None


def _get_credential() -> DefaultAzureCredential:
    """Return a cached DefaultAzureCredential instance."""
    global _credential
    if _credential is None:
        _credential = DefaultAzureCredential()
    return _credential


class SecretStore(ABC):
    """Read one key of a named secret in a namespace."""

    @abstractmethod
    def get_secret_value(self, namespace: str, secret_name: str, key: str) -> str:
        """Return the secret value as text.

        Raises:
            NotFoundError: the secret or the key does not exist.
        """


class KubernetesSecretStore(SecretStore):
    """Reads ``v1 Secret`` objects from the cluster the webhook runs in.

    Credentials are resolved on first use: the mounted service account first,
    then the kubeconfig file when one is configured.
    """

    def __init__(self, kubeconfig_path: str | None = None, _core_api: k8s_client.CoreV1Api | None = None) -> None:
        self._kubeconfig_path = kubeconfig_path
        self._core_api = _core_api

    def _api(self) -> k8s_client.CoreV1Api:
        if self._core_api is None:
            try:
                k8s_config.load_incluster_config()
                logger.debug("Kubernetes: using in-cluster service account")
            except ConfigException:
                k8s_config.load_kube_config(config_file=self._kubeconfig_path)
                logger.debug("Kubernetes: using kubeconfig %s", self._kubeconfig_path or "(default)")
            self._core_api = k8s_client.CoreV1Api()
        return self._core_api

    def get_secret_value(self, namespace: str, secret_name: str, key: str) -> str:
        logger.debug("Loading secret %s/%s key %s", namespace, secret_name, key)
        try:
            secret = self._api().read_namespaced_secret(name=secret_name, namespace=namespace)
        except ApiException as exc:
            if exc.status == 404:
                raise NotFoundError(f'secret "{namespace}/{secret_name}" not found') from exc
            raise
        data = secret.data or {}
        if key not in data:
            raise NotFoundError(f'key "{key}" not found in secret "{namespace}/{secret_name}"')
        return base64.b64decode(data[key]).decode()


def _vault_secret_name(namespace: str, secret_name: str) -> str:
    # Key Vault names allow only alphanumerics and dashes.
    name = f"{namespace}-{secret_name}" if namespace else secret_name
    return re.sub(r"[^0-9A-Za-z-]", "-", name)


class KeyVaultSecretStore(SecretStore):
    """Reads secrets from Azure Key Vault.

    The vault secret ``<namespace>-<secret_name>`` holds a JSON object mapping
    keys to values, the same shape as a Kubernetes Secret's data.
    """

    def __init__(self, vault_url: str, _secret_client: SecretClient | None = None) -> None:
        self._client = _secret_client or SecretClient(vault_url, _get_credential())

    def get_secret_value(self, namespace: str, secret_name: str, key: str) -> str:
        vault_name = _vault_secret_name(namespace, secret_name)
        try:
            secret = self._client.get_secret(vault_name)
        except ResourceNotFoundError as exc:
            raise NotFoundError(f"Key Vault secret '{vault_name}' not found") from exc

        try:
            data = json.loads(secret.value or "")
        except ValueError:
            data = None
        if not isinstance(data, dict):
            raise ValueError(f"Key Vault secret '{vault_name}' must hold a JSON object")
        if key not in data:
            raise NotFoundError(f"key '{key}' not found in Key Vault secret '{vault_name}'")
        return str(data[key])


def get_secret_store(config: AppConfig) -> SecretStore:
    """Instantiate the secret store selected by SECRET_BACKEND."""
    if config.secret_backend == "keyvault":
        if not config.keyvault_url:
            raise ValueError("AZURE_KEYVAULT_URL is required when SECRET_BACKEND=keyvault")
        return KeyVaultSecretStore(config.keyvault_url)
    if config.secret_backend == "kubernetes":
        return KubernetesSecretStore(kubeconfig_path=config.kubeconfig_path)
    raise ValueError(f"Unknown secret backend: '{config.secret_backend}'")
