"""Machine provider configuration.

The configuration describes where and how new OpenStack servers are
created, eg.::

    region: eu-de-1
    network-id: 5cd2e2d4-5bd5-4a5c-9f45-1c2b1d1a3f77
    subnet-id: 0b1d2e0c-4c56-4a76-8f0e-2b7a2a9b6c11
    security-groups: [shoot--dev--nodes]
    image-name: ubuntu-22.04
    flavor-name: m1.large
    availability-zone: eu-de-1a
    key-name: shoot--dev-ssh
    pod-network-cidr: 100.96.0.0/11
    tags:
      kubernetes.io-cluster-shoot--dev: "1"
      kubernetes.io-role-node: "1"
"""

import ipaddress
import os

import yaml

from machineprovider.errors import FileNotFound, ProviderConfigError
from machineprovider.lib.schema import (
    Bool, Dict, Int, KeyDict, List, OneOf, Constant, SchemaError, String)


_OPTIONAL_STRING = OneOf(Constant(None), String())

SCHEMA = KeyDict({
    "region": String(),
    "network-id": _OPTIONAL_STRING,
    "subnet-id": _OPTIONAL_STRING,
    "networks": List(KeyDict({
        "id": _OPTIONAL_STRING,
        "name": _OPTIONAL_STRING,
        "pod-network": Bool()},
        optional=["id", "name", "pod-network"])),
    "security-groups": List(String()),
    "image-id": _OPTIONAL_STRING,
    "image-name": _OPTIONAL_STRING,
    "flavor-name": String(),
    "availability-zone": String(),
    "key-name": String(),
    "tags": Dict(String(), String()),
    "server-group-id": _OPTIONAL_STRING,
    "root-disk-size": Int(),
    "use-config-drive": OneOf(Constant(None), Bool()),
    "pod-network-cidr": String()},
    optional=[
        "network-id", "subnet-id", "networks", "security-groups",
        "image-id", "image-name", "availability-zone", "key-name", "tags",
        "server-group-id", "root-disk-size", "use-config-drive"])


class NetworkSpec(object):
    """A network from the configured network list."""

    def __init__(self, id=None, name=None, pod_network=False):
        self.id = id
        self.name = name
        self.pod_network = pod_network

    def __repr__(self):
        return "<NetworkSpec id=%r name=%r pod_network=%r>" % (
            self.id, self.name, self.pod_network)


class MachineProviderConfig(object):
    """Validated, read-only configuration of the OpenStack machine provider.

    Use :meth:`from_dict`, :meth:`parse` or :meth:`load` to build one; they
    raise :exc:`machineprovider.errors.ProviderConfigError` for anything
    the provider could not work with.
    """

    def __init__(self, region, flavor_name, pod_network_cidr,
                 network_id=None, subnet_id=None, networks=(),
                 security_groups=(), image_id=None, image_name=None,
                 availability_zone="", key_name="", tags=None,
                 server_group_id=None, root_disk_size=0,
                 use_config_drive=None):
        self.region = region
        self.flavor_name = flavor_name
        self.pod_network_cidr = pod_network_cidr
        self.network_id = network_id
        self.subnet_id = subnet_id
        self.networks = tuple(networks)
        self.security_groups = tuple(security_groups)
        self.image_id = image_id
        self.image_name = image_name
        self.availability_zone = availability_zone
        self.key_name = key_name
        self.tags = dict(tags or {})
        self.server_group_id = server_group_id
        self.root_disk_size = root_disk_size
        self.use_config_drive = use_config_drive
        self._validate()

    def _validate(self):
        if self.subnet_id and not self.network_id:
            raise ProviderConfigError(
                "subnet-id %r requires network-id to be set" % self.subnet_id)
        if self.network_id and self.networks:
            raise ProviderConfigError(
                "network-id and networks are mutually exclusive")
        if not self.network_id and not self.networks:
            raise ProviderConfigError(
                "Either network-id or networks must be set")
        for index, network in enumerate(self.networks):
            if not network.id and not network.name:
                raise ProviderConfigError(
                    "networks[%d]: either id or name must be set" % index)
        if not self.image_id and not self.image_name:
            raise ProviderConfigError(
                "Either image-id or image-name must be set")
        if self.root_disk_size < 0:
            raise ProviderConfigError(
                "root-disk-size must not be negative, got %d"
                % self.root_disk_size)
        try:
            ipaddress.ip_network(self.pod_network_cidr, strict=False)
        except ValueError:
            raise ProviderConfigError(
                "pod-network-cidr %r is not a valid CIDR"
                % self.pod_network_cidr)

    @classmethod
    def from_dict(cls, data):
        """Build a configuration from a raw dict, eg. parsed from YAML."""
        try:
            data = SCHEMA.coerce(data, [])
        except SchemaError as error:
            raise ProviderConfigError(
                "Invalid machine provider configuration: %s" % error)

        networks = [
            NetworkSpec(network.get("id"), network.get("name"),
                        network.get("pod-network", False))
            for network in data.get("networks", ())]
        return cls(
            region=data["region"],
            flavor_name=data["flavor-name"],
            pod_network_cidr=data["pod-network-cidr"],
            network_id=data.get("network-id"),
            subnet_id=data.get("subnet-id"),
            networks=networks,
            security_groups=data.get("security-groups", ()),
            image_id=data.get("image-id"),
            image_name=data.get("image-name"),
            availability_zone=data.get("availability-zone", ""),
            key_name=data.get("key-name", ""),
            tags=data.get("tags"),
            server_group_id=data.get("server-group-id"),
            root_disk_size=data.get("root-disk-size", 0),
            use_config_drive=data.get("use-config-drive"))

    @classmethod
    def parse(cls, content, path=None):
        """Parse a YAML machine provider configuration.

        @param content: The content to parse.
        @param path: An optional configuration file path, used when
            raising errors.
        """
        if not isinstance(content, str):
            raise ProviderConfigError(
                "Configuration must be a string, got %r" % (content,))
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as error:
            raise ProviderConfigError(
                "Invalid YAML in %s: %s" % (path or "configuration", error))
        if not isinstance(data, dict):
            raise ProviderConfigError(
                "Configuration must be a dictionary: %s"
                % (path or "configuration"))
        return cls.from_dict(data)

    @classmethod
    def load(cls, path):
        """Load a machine provider configuration file."""
        path = os.path.expanduser(path)
        if not os.path.isfile(path):
            raise FileNotFound(path)
        with open(path) as file:
            return cls.parse(file.read(), path)
