"""Helpers for testing machineprovider.providers.openstack."""

import itertools

from twisted.internet.defer import fail, succeed
from twisted.internet.task import Clock

from machineprovider.config import MachineProviderConfig
from machineprovider.errors import MultipleResourcesFound, ResourceNotFound
from machineprovider.providers.openstack import MachineProvider
from machineprovider.providers.openstack.capabilities import Compute, Network
from machineprovider.providers.openstack.machine import Port, Server

CLUSTER_TAG = "kubernetes.io-cluster-shoot--dev"
ROLE_TAG = "kubernetes.io-role-node"
POD_CIDR = "100.96.0.0/11"

CONFIG = {
    "region": "eu-de-1",
    "network-id": "net-pods",
    "security-groups": ["nodes", "ssh"],
    "image-name": "ubuntu-22.04",
    "flavor-name": "m1.large",
    "availability-zone": "eu-de-1a",
    "key-name": "shoot--dev-ssh",
    "pod-network-cidr": POD_CIDR,
    "tags": {CLUSTER_TAG: "1", ROLE_TAG: "1", "team": "infra"}}


def get_config(**overrides):
    """Return a configuration, with keys given as eg. ``subnet_id="s"``."""
    data = dict(CONFIG)
    for key, value in overrides.items():
        data[key.replace("_", "-")] = value
    return MachineProviderConfig.from_dict(data)


def owned_metadata():
    return {CLUSTER_TAG: "1", ROLE_TAG: "1"}


class FakeCapability(object):
    """Records calls and fails those registered in `failures`."""

    def __init__(self):
        self.calls = []
        self.failures = {}
        self._ids = itertools.count(1)

    def _call(self, method, *args):
        self.calls.append((method,) + args)
        if method in self.failures:
            return fail(self.failures[method])
        return None

    def called(self, method):
        return [call[1:] for call in self.calls if call[0] == method]

    def _next_id(self, prefix):
        return "%s-%d" % (prefix, next(self._ids))


class FakeCompute(FakeCapability, Compute):
    """An in-memory compute capability.

    Servers created by it report the statuses from `build_statuses` in
    turn, one per :meth:`get_server`, the last one sticking. Deleted
    servers disappear immediately unless `delete_statuses` is set, in
    which case those are reported (the last one sticking) instead.
    """

    def __init__(self, network=None):
        super(FakeCompute, self).__init__()
        self.network = network
        self.servers = {}
        self.images = {"ubuntu-22.04": "image-ubuntu"}
        self.flavors = {"m1.large": "flavor-large"}
        self.build_statuses = ["BUILD", "ACTIVE"]
        self.delete_statuses = None
        self._statuses = {}

    def add_server(self, name, metadata=None, status="ACTIVE", id=None):
        server = Server(id or self._next_id("server"), name, status,
                        metadata if metadata is not None else {})
        self.servers[server.id] = server
        self._statuses[server.id] = [status]
        return server

    def _create(self, method, request):
        failure = self._call(method, request)
        if failure is not None:
            return failure
        server = self.add_server(request["name"], request["metadata"])
        self._statuses[server.id] = list(self.build_statuses)
        server.status = self.build_statuses[0]
        if self.network is not None:
            for attachment in request["networks"]:
                if "port" in attachment:
                    self.network.ports[attachment["port"]].device_id = \
                        server.id
                else:
                    self.network.add_port(attachment["uuid"], server.id)
        return succeed(server)

    def create_server(self, request):
        return self._create("create_server", request)

    def boot_from_volume(self, request):
        return self._create("boot_from_volume", request)

    def get_server(self, server_id):
        failure = self._call("get_server", server_id)
        if failure is not None:
            return failure
        if server_id not in self.servers:
            return fail(ResourceNotFound("server", server_id))
        server = self.servers[server_id]
        statuses = self._statuses[server_id]
        if len(statuses) > 1:
            server.status = statuses.pop(0)
        else:
            server.status = statuses[0]
        return succeed(Server(server.id, server.name, server.status,
                              server.metadata, server.fault))

    def list_servers(self, name=None):
        failure = self._call("list_servers", name)
        if failure is not None:
            return failure
        # Like Nova, the name filter is a loose match.
        return succeed([
            server for server in self.servers.values()
            if name is None or name in server.name])

    def delete_server(self, server_id):
        failure = self._call("delete_server", server_id)
        if failure is not None:
            return failure
        if server_id not in self.servers:
            return fail(ResourceNotFound("server", server_id))
        if self.delete_statuses is None:
            del self.servers[server_id]
        else:
            self._statuses[server_id] = list(self.delete_statuses)
        return succeed(None)

    def image_id_from_name(self, name):
        failure = self._call("image_id_from_name", name)
        if failure is not None:
            return failure
        if name not in self.images:
            return fail(ResourceNotFound("image", name))
        return succeed(self.images[name])

    def flavor_id_from_name(self, name):
        failure = self._call("flavor_id_from_name", name)
        if failure is not None:
            return failure
        if name not in self.flavors:
            return fail(ResourceNotFound("flavor", name))
        return succeed(self.flavors[name])


class FakeNetwork(FakeCapability, Network):
    """An in-memory network capability."""

    def __init__(self):
        super(FakeNetwork, self).__init__()
        self.subnets = set(["subnet-nodes"])
        self.networks = {"pods": "net-pods", "storage": "net-storage"}
        self.groups = {"nodes": "group-nodes", "ssh": "group-ssh"}
        self.ports = {}
        self.port_names = {}

    def add_port(self, network_id, device_id=None, name=None,
                 allowed_address_pairs=()):
        port = Port(self._next_id("port"), network_id, device_id,
                    allowed_address_pairs)
        self.ports[port.id] = port
        if name is not None:
            self.port_names[port.id] = name
        return port

    def get_subnet(self, subnet_id):
        failure = self._call("get_subnet", subnet_id)
        if failure is not None:
            return failure
        if subnet_id not in self.subnets:
            return fail(ResourceNotFound("subnet", subnet_id))
        return succeed({"id": subnet_id})

    def create_port(self, request):
        failure = self._call("create_port", request)
        if failure is not None:
            return failure
        port = self.add_port(
            request["network_id"], name=request["name"],
            allowed_address_pairs=request["allowed_address_pairs"])
        return succeed(port)

    def update_port(self, port_id, changes):
        failure = self._call("update_port", port_id, changes)
        if failure is not None:
            return failure
        if port_id not in self.ports:
            return fail(ResourceNotFound("port", port_id))
        port = self.ports[port_id]
        port.allowed_address_pairs = list(changes["allowed_address_pairs"])
        return succeed(port)

    def delete_port(self, port_id):
        failure = self._call("delete_port", port_id)
        if failure is not None:
            return failure
        if port_id not in self.ports:
            return fail(ResourceNotFound("port", port_id))
        del self.ports[port_id]
        self.port_names.pop(port_id, None)
        return succeed(None)

    def list_ports(self, device_id):
        failure = self._call("list_ports", device_id)
        if failure is not None:
            return failure
        return succeed([port for port in self.ports.values()
                        if port.device_id == device_id])

    def network_id_from_name(self, name):
        failure = self._call("network_id_from_name", name)
        if failure is not None:
            return failure
        if name not in self.networks:
            return fail(ResourceNotFound("network", name))
        return succeed(self.networks[name])

    def port_id_from_name(self, name):
        failure = self._call("port_id_from_name", name)
        if failure is not None:
            return failure
        port_ids = [port_id for port_id, port_name in self.port_names.items()
                    if port_name == name]
        if len(port_ids) > 1:
            return fail(MultipleResourcesFound("port", name))
        if not port_ids:
            return fail(ResourceNotFound("port", name))
        return succeed(port_ids[0])

    def group_id_from_name(self, name):
        failure = self._call("group_id_from_name", name)
        if failure is not None:
            return failure
        if name not in self.groups:
            return fail(ResourceNotFound("security group", name))
        return succeed(self.groups[name])


class OpenStackTestMixin(object):

    def setUp(self):
        super(OpenStackTestMixin, self).setUp()
        self.clock = Clock()
        self.network = FakeNetwork()
        self.compute = FakeCompute(self.network)

    def get_provider(self, **overrides):
        return MachineProvider(
            get_config(**overrides), self.compute, self.network, self.clock)

    def pump(self, seconds):
        """Advance the test clock one second at a time."""
        self.clock.pump([1] * seconds)
