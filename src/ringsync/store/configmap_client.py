"""Access to the ConfigMap that holds the shared ring state."""

import logging
from typing import Dict, Optional

import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from ringsync.config.settings import StoreConfig
from ringsync.errors import StoreError, StoreUnreachableError, VersionConflictError
from ringsync.models import StoreRecord

logger = logging.getLogger(__name__)


class RingStoreClient:
    """Reads and writes a single named ConfigMap.

    Credentials are resolved once when the client is created: the pod's
    service account token and CA bundle when running in a cluster, the local
    kubeconfig otherwise.
    """

    def __init__(self, store_config: StoreConfig, api: Optional[client.CoreV1Api] = None):
        self.config = store_config
        self.namespace = store_config.namespace
        if api is None:
            try:
                config.load_incluster_config()
            except config.ConfigException:
                config.load_kube_config()
            api = client.CoreV1Api()
        self._api = api

    def _save_diagnostic(self, body: Optional[str]) -> None:
        if not body or not self.config.diagnostic_path:
            return
        try:
            with open(self.config.diagnostic_path, 'w') as f:
                f.write(body)
            logger.info(f"Saved store response to {self.config.diagnostic_path}")
        except OSError as e:
            logger.warning(f"Could not save store response: {e}")

    def fetch(self, name: str) -> StoreRecord:
        """Read the record.

        Returns a record with found=False when the ConfigMap does not exist.
        Any other failure raises, since it could hide an existing record that
        must not be overwritten.
        """
        try:
            cm = self._api.read_namespaced_config_map(
                name=name,
                namespace=self.namespace,
                _request_timeout=self.config.timeout
            )
        except ApiException as e:
            if e.status == 404:
                logger.info(f"ConfigMap {self.namespace}/{name} not found")
                return StoreRecord(found=False)
            self._save_diagnostic(e.body)
            raise StoreError(
                f"Unexpected response reading ConfigMap {self.namespace}/{name}: {e.status} {e.reason}",
                status=e.status,
                body=e.body
            )
        except urllib3.exceptions.HTTPError as e:
            raise StoreUnreachableError(f"Cannot reach Kubernetes API: {e}")

        version = cm.metadata.resource_version if cm.metadata else None
        payload = dict(cm.binary_data or {})
        logger.info(f"Fetched ConfigMap {self.namespace}/{name} at resourceVersion {version}")
        return StoreRecord(found=True, version=version, payload=payload)

    def _build_body(self, name: str, version: Optional[str],
                    payload: Dict[str, str]) -> client.V1ConfigMap:
        owner_references = None
        if self.config.owner_name and self.config.owner_uid:
            owner_references = [
                client.V1OwnerReference(
                    api_version=self.config.owner_api_version,
                    kind=self.config.owner_kind,
                    name=self.config.owner_name,
                    uid=self.config.owner_uid
                )
            ]
        else:
            logger.warning("No owner configured, ConfigMap will not be garbage collected")

        metadata = client.V1ObjectMeta(
            name=name,
            namespace=self.namespace,
            finalizers=[self.config.finalizer] if self.config.finalizer else None,
            owner_references=owner_references,
            resource_version=version
        )
        return client.V1ConfigMap(
            api_version="v1",
            kind="ConfigMap",
            metadata=metadata,
            binary_data=payload
        )

    def publish(self, name: str, version: Optional[str], payload: Dict[str, str]) -> str:
        """Create or update the record.

        Without a version the ConfigMap is created. With a version it is
        replaced, and the API server rejects the write if the version is no
        longer current.

        Returns:
            str: the new resourceVersion
        """
        body = self._build_body(name, version, payload)
        try:
            if version is None:
                logger.info(f"Creating ConfigMap {self.namespace}/{name}")
                result = self._api.create_namespaced_config_map(
                    namespace=self.namespace,
                    body=body,
                    _request_timeout=self.config.timeout
                )
            else:
                logger.info(f"Updating ConfigMap {self.namespace}/{name} from resourceVersion {version}")
                result = self._api.replace_namespaced_config_map(
                    name=name,
                    namespace=self.namespace,
                    body=body,
                    _request_timeout=self.config.timeout
                )
        except ApiException as e:
            self._save_diagnostic(e.body)
            if e.status == 409:
                raise VersionConflictError(
                    f"ConfigMap {self.namespace}/{name} was modified by another writer, "
                    f"run get again and reapply changes",
                    status=e.status,
                    body=e.body
                )
            raise StoreError(
                f"Failed to write ConfigMap {self.namespace}/{name}: {e.status} {e.reason}",
                status=e.status,
                body=e.body
            )
        except urllib3.exceptions.HTTPError as e:
            raise StoreUnreachableError(f"Cannot reach Kubernetes API: {e}")

        new_version = result.metadata.resource_version if result is not None and result.metadata else None
        logger.info(f"Published ConfigMap {self.namespace}/{name} at resourceVersion {new_version}")
        return new_version
