import os

from machineprovider.config import MachineProviderConfig
from machineprovider.errors import FileNotFound, ProviderConfigError
from machineprovider.lib.testing import TestCase


SAMPLE_CONFIG = """
region: eu-de-1
network-id: net-pods
subnet-id: subnet-nodes
security-groups: [nodes, ssh]
image-name: ubuntu-22.04
flavor-name: m1.large
availability-zone: eu-de-1a
key-name: shoot--dev-ssh
root-disk-size: 50
server-group-id: group-1
use-config-drive: true
pod-network-cidr: 100.96.0.0/11
tags:
  kubernetes.io-cluster-shoot--dev: "1"
  kubernetes.io-role-node: "1"
"""

NETWORKS_CONFIG = """
region: eu-de-1
networks:
  - name: pods
    pod-network: true
  - id: net-storage
image-id: image-1
flavor-name: m1.large
pod-network-cidr: 100.96.0.0/11
"""


class MachineProviderConfigTest(TestCase):

    def get_data(self, **overrides):
        data = {"region": "eu-de-1",
                "network-id": "net-pods",
                "image-name": "ubuntu-22.04",
                "flavor-name": "m1.large",
                "pod-network-cidr": "100.96.0.0/11"}
        data.update(overrides)
        return data

    def assertConfigError(self, data, message):
        error = self.assertRaises(
            ProviderConfigError, MachineProviderConfig.from_dict, data)
        self.assertEqual(str(error), message)

    def test_parse(self):
        config = MachineProviderConfig.parse(SAMPLE_CONFIG)
        self.assertEqual(config.region, "eu-de-1")
        self.assertEqual(config.network_id, "net-pods")
        self.assertEqual(config.subnet_id, "subnet-nodes")
        self.assertEqual(config.security_groups, ("nodes", "ssh"))
        self.assertEqual(config.image_id, None)
        self.assertEqual(config.image_name, "ubuntu-22.04")
        self.assertEqual(config.flavor_name, "m1.large")
        self.assertEqual(config.availability_zone, "eu-de-1a")
        self.assertEqual(config.key_name, "shoot--dev-ssh")
        self.assertEqual(config.root_disk_size, 50)
        self.assertEqual(config.server_group_id, "group-1")
        self.assertEqual(config.use_config_drive, True)
        self.assertEqual(config.pod_network_cidr, "100.96.0.0/11")
        self.assertEqual(config.tags, {
            "kubernetes.io-cluster-shoot--dev": "1",
            "kubernetes.io-role-node": "1"})

    def test_parse_networks(self):
        config = MachineProviderConfig.parse(NETWORKS_CONFIG)
        self.assertEqual(config.network_id, None)
        self.assertEqual(len(config.networks), 2)
        pods, storage = config.networks
        self.assertEqual((pods.id, pods.name, pods.pod_network),
                         (None, "pods", True))
        self.assertEqual((storage.id, storage.name, storage.pod_network),
                         ("net-storage", None, False))

    def test_defaults(self):
        config = MachineProviderConfig.from_dict(self.get_data())
        self.assertEqual(config.subnet_id, None)
        self.assertEqual(config.networks, ())
        self.assertEqual(config.security_groups, ())
        self.assertEqual(config.availability_zone, "")
        self.assertEqual(config.key_name, "")
        self.assertEqual(config.tags, {})
        self.assertEqual(config.server_group_id, None)
        self.assertEqual(config.root_disk_size, 0)
        self.assertEqual(config.use_config_drive, None)

    def test_missing_required_key(self):
        data = self.get_data()
        del data["flavor-name"]
        self.assertConfigError(
            data, "Invalid machine provider configuration: "
            "flavor-name: required value not found")

    def test_bad_value_type(self):
        self.assertConfigError(
            self.get_data(**{"root-disk-size": "big"}),
            "Invalid machine provider configuration: "
            "root-disk-size: expected int, got 'big'")

    def test_bad_network_entry(self):
        self.assertConfigError(
            self.get_data(**{"network-id": None,
                             "networks": [{"pod-network": "yes"}]}),
            "Invalid machine provider configuration: "
            "networks[0].pod-network: expected bool, got 'yes'")

    def test_subnet_requires_network(self):
        self.assertConfigError(
            self.get_data(**{"network-id": None, "subnet-id": "s",
                             "networks": [{"id": "n"}]}),
            "subnet-id 's' requires network-id to be set")

    def test_network_id_and_networks_exclusive(self):
        self.assertConfigError(
            self.get_data(networks=[{"id": "n"}]),
            "network-id and networks are mutually exclusive")

    def test_no_network(self):
        self.assertConfigError(
            self.get_data(**{"network-id": None}),
            "Either network-id or networks must be set")

    def test_network_entry_without_id_or_name(self):
        self.assertConfigError(
            self.get_data(**{"network-id": None,
                             "networks": [{"id": "n"}, {}]}),
            "networks[1]: either id or name must be set")

    def test_no_image(self):
        self.assertConfigError(
            self.get_data(**{"image-name": None}),
            "Either image-id or image-name must be set")

    def test_negative_root_disk_size(self):
        self.assertConfigError(
            self.get_data(**{"root-disk-size": -1}),
            "root-disk-size must not be negative, got -1")

    def test_invalid_pod_network_cidr(self):
        self.assertConfigError(
            self.get_data(**{"pod-network-cidr": "100.96.0.0/33"}),
            "pod-network-cidr '100.96.0.0/33' is not a valid CIDR")

    def test_parse_invalid_yaml(self):
        error = self.assertRaises(
            ProviderConfigError, MachineProviderConfig.parse,
            "region: [eu", "/tmp/provider.yaml")
        self.assertIn("Invalid YAML in /tmp/provider.yaml", str(error))

    def test_parse_not_a_dict(self):
        error = self.assertRaises(
            ProviderConfigError, MachineProviderConfig.parse, "- a\n- b\n")
        self.assertEqual(
            str(error), "Configuration must be a dictionary: configuration")

    def test_parse_not_a_string(self):
        self.assertRaises(
            ProviderConfigError, MachineProviderConfig.parse, b"region: x")

    def test_load(self):
        path = self.mktemp()
        with open(path, "w") as file:
            file.write(SAMPLE_CONFIG)
        config = MachineProviderConfig.load(path)
        self.assertEqual(config.region, "eu-de-1")

    def test_load_missing_file(self):
        path = os.path.join(self.mktemp(), "provider.yaml")
        error = self.assertRaises(
            FileNotFound, MachineProviderConfig.load, path)
        self.assertEqual(error.path, path)
