"""Unit tests for the ConfigMap store client."""
import os
import tempfile
import unittest
from unittest.mock import MagicMock, patch

import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from ringsync.config.settings import StoreConfig
from ringsync.errors import StoreError, StoreUnreachableError, VersionConflictError
from ringsync.store.configmap_client import RingStoreClient


def api_exception(status, body=None):
    e = ApiException(status=status, reason="Error")
    e.body = body
    return e


class TestRingStoreClient(unittest.TestCase):
    """Test cases for the ring store client"""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.store_config = StoreConfig(
            namespace="openstack",
            configmap_name="swift-ring-files",
            owner_api_version="swift.openstack.org/v1beta1",
            owner_kind="SwiftRing",
            owner_name="swift-ring",
            owner_uid="1234-5678",
            finalizer="swift.openstack.org/swiftring",
            diagnostic_path=os.path.join(self.tmpdir.name, "configmap"),
            timeout=10
        )
        self.api = MagicMock()
        self.store = RingStoreClient(self.store_config, api=self.api)

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_init_loads_incluster_credentials(self):
        with patch.object(config, "load_incluster_config") as load_incluster, \
                patch.object(config, "load_kube_config") as load_kube, \
                patch.object(client, "CoreV1Api") as core_api:
            store = RingStoreClient(self.store_config)
        load_incluster.assert_called_once()
        load_kube.assert_not_called()
        self.assertIs(store._api, core_api.return_value)

    def test_init_falls_back_to_kubeconfig(self):
        with patch.object(config, "load_incluster_config",
                          side_effect=config.ConfigException("not in cluster")), \
                patch.object(config, "load_kube_config") as load_kube, \
                patch.object(client, "CoreV1Api"):
            RingStoreClient(self.store_config)
        load_kube.assert_called_once()

    def test_fetch_found(self):
        self.api.read_namespaced_config_map.return_value = client.V1ConfigMap(
            metadata=client.V1ObjectMeta(name="swift-ring-files", resource_version="42"),
            binary_data={"swiftrings.tar.gz": "AAAA"}
        )
        record = self.store.fetch("swift-ring-files")
        self.assertTrue(record.found)
        self.assertEqual(record.version, "42")
        self.assertEqual(record.payload, {"swiftrings.tar.gz": "AAAA"})
        self.api.read_namespaced_config_map.assert_called_once_with(
            name="swift-ring-files", namespace="openstack", _request_timeout=10
        )

    def test_fetch_without_binary_data(self):
        self.api.read_namespaced_config_map.return_value = client.V1ConfigMap(
            metadata=client.V1ObjectMeta(name="swift-ring-files", resource_version="7")
        )
        record = self.store.fetch("swift-ring-files")
        self.assertTrue(record.found)
        self.assertEqual(record.payload, {})

    def test_fetch_absent(self):
        self.api.read_namespaced_config_map.side_effect = api_exception(404)
        record = self.store.fetch("swift-ring-files")
        self.assertFalse(record.found)
        self.assertIsNone(record.version)

    def test_fetch_ambiguous_status_is_fatal(self):
        self.api.read_namespaced_config_map.side_effect = api_exception(403, body='{"reason":"Forbidden"}')
        with self.assertRaises(StoreError) as ctx:
            self.store.fetch("swift-ring-files")
        self.assertEqual(ctx.exception.status, 403)
        with open(self.store_config.diagnostic_path) as f:
            self.assertIn("Forbidden", f.read())

    def test_fetch_unreachable(self):
        self.api.read_namespaced_config_map.side_effect = urllib3.exceptions.MaxRetryError(
            None, "/api/v1/namespaces/openstack/configmaps/swift-ring-files"
        )
        with self.assertRaises(StoreUnreachableError):
            self.store.fetch("swift-ring-files")

    def test_publish_creates_without_version(self):
        self.api.create_namespaced_config_map.return_value = client.V1ConfigMap(
            metadata=client.V1ObjectMeta(resource_version="1")
        )
        version = self.store.publish("swift-ring-files", None, {"swiftrings.tar.gz": "AAAA"})
        self.assertEqual(version, "1")
        self.api.replace_namespaced_config_map.assert_not_called()

        body = self.api.create_namespaced_config_map.call_args[1]["body"]
        self.assertEqual(body.kind, "ConfigMap")
        self.assertEqual(body.metadata.name, "swift-ring-files")
        self.assertEqual(body.metadata.namespace, "openstack")
        self.assertEqual(body.metadata.finalizers, ["swift.openstack.org/swiftring"])
        self.assertIsNone(body.metadata.resource_version)
        owner = body.metadata.owner_references[0]
        self.assertEqual((owner.kind, owner.name, owner.uid), ("SwiftRing", "swift-ring", "1234-5678"))
        self.assertEqual(body.binary_data, {"swiftrings.tar.gz": "AAAA"})

    def test_publish_updates_with_version(self):
        self.api.replace_namespaced_config_map.return_value = client.V1ConfigMap(
            metadata=client.V1ObjectMeta(resource_version="43")
        )
        version = self.store.publish("swift-ring-files", "42", {"swiftrings.tar.gz": "AAAA"})
        self.assertEqual(version, "43")
        self.api.create_namespaced_config_map.assert_not_called()
        kwargs = self.api.replace_namespaced_config_map.call_args[1]
        self.assertEqual(kwargs["name"], "swift-ring-files")
        self.assertEqual(kwargs["body"].metadata.resource_version, "42")

    def test_publish_stale_version_conflicts(self):
        self.api.replace_namespaced_config_map.side_effect = api_exception(409, body="Conflict")
        with self.assertRaises(VersionConflictError):
            self.store.publish("swift-ring-files", "41", {})

    def test_publish_create_race_conflicts(self):
        self.api.create_namespaced_config_map.side_effect = api_exception(409, body="AlreadyExists")
        with self.assertRaises(VersionConflictError):
            self.store.publish("swift-ring-files", None, {})

    def test_publish_other_error(self):
        self.api.replace_namespaced_config_map.side_effect = api_exception(500)
        with self.assertRaises(StoreError) as ctx:
            self.store.publish("swift-ring-files", "42", {})
        self.assertNotIsInstance(ctx.exception, VersionConflictError)
        self.assertEqual(ctx.exception.status, 500)


if __name__ == '__main__':
    unittest.main()
