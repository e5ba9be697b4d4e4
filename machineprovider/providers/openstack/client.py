"""OpenStack compute and network capabilities backed by openstacksdk.

openstacksdk is blocking, so every call runs in the reactor thread pool.
"""

from base64 import b64encode
import os

import openstack
from openstack import exceptions as sdk_exceptions
from twisted.internet.threads import deferToThread

from machineprovider.errors import MultipleResourcesFound, ResourceNotFound
from machineprovider.providers.common.utils import convert_unknown_error

from .capabilities import Compute, Network
from .machine import port_from_resource, server_from_resource
from .utils import log

# Only sent when set; the provider applies its own defaults otherwise.
_OPTIONAL_SERVER_ATTRIBUTES = ("availability_zone", "config_drive", "key_name")


def _translate_error(failure, kind, reference, operation):
    if failure.check(sdk_exceptions.ResourceNotFound):
        raise ResourceNotFound(kind, reference)
    if failure.check(sdk_exceptions.DuplicateResource):
        raise MultipleResourcesFound(kind, reference)
    return convert_unknown_error(failure, operation)


def call_sdk(kind, reference, operation, f, *args, **kw):
    """Run the blocking openstacksdk call `f` in a thread.

    Absent resources are reported as
    :exc:`machineprovider.errors.ResourceNotFound`, ambiguous names as
    :exc:`machineprovider.errors.MultipleResourcesFound`; anything
    unexpected as :exc:`machineprovider.errors.ProviderInteractionError`.

    :param str kind: the kind of resource `reference` names.
    :param str operation: describes the call, for error messages.
    """
    d = deferToThread(f, *args, **kw)
    d.addErrback(_translate_error, kind, reference, operation)
    return d


def _server_attributes(request):
    attributes = dict(request)
    for key in _OPTIONAL_SERVER_ATTRIBUTES:
        if attributes.get(key) in (None, ""):
            attributes.pop(key, None)
    user_data = attributes.pop("user_data", None)
    if user_data:
        attributes["user_data"] = b64encode(user_data).decode("ascii")
    return attributes


class OpenStackCompute(Compute):
    """Compute capability on top of an openstacksdk `Connection`."""

    def __init__(self, connection):
        self._connection = connection

    def _create_server(self, request):
        resource = self._connection.compute.create_server(
            **_server_attributes(request))
        return server_from_resource(resource)

    def create_server(self, request):
        return call_sdk(
            "server", request["name"],
            "Creating server %r" % request["name"],
            self._create_server, request)

    def boot_from_volume(self, request):
        # Nova takes the block device mapping on the regular create call.
        return call_sdk(
            "server", request["name"],
            "Booting server %r from volume" % request["name"],
            self._create_server, request)

    def get_server(self, server_id):
        def get():
            return server_from_resource(
                self._connection.compute.get_server(server_id))
        return call_sdk(
            "server", server_id, "Getting server %s" % server_id, get)

    def list_servers(self, name=None):
        query = {"details": True}
        if name is not None:
            query["name"] = name

        def list_():
            return [server_from_resource(resource) for resource in
                    self._connection.compute.servers(**query)]
        return call_sdk("server", name, "Listing servers", list_)

    def delete_server(self, server_id):
        return call_sdk(
            "server", server_id, "Deleting server %s" % server_id,
            self._connection.compute.delete_server, server_id,
            ignore_missing=False)

    def image_id_from_name(self, name):
        def find():
            return self._connection.image.find_image(
                name, ignore_missing=False).id
        return call_sdk("image", name, "Finding image %r" % name, find)

    def flavor_id_from_name(self, name):
        def find():
            return self._connection.compute.find_flavor(
                name, ignore_missing=False).id
        return call_sdk("flavor", name, "Finding flavor %r" % name, find)


class OpenStackNetwork(Network):
    """Network capability on top of an openstacksdk `Connection`."""

    def __init__(self, connection):
        self._connection = connection

    def get_subnet(self, subnet_id):
        return call_sdk(
            "subnet", subnet_id, "Getting subnet %s" % subnet_id,
            self._connection.network.get_subnet, subnet_id)

    def create_port(self, request):
        def create():
            return port_from_resource(
                self._connection.network.create_port(**request))
        return call_sdk(
            "port", request["name"], "Creating port %r" % request["name"],
            create)

    def update_port(self, port_id, changes):
        def update():
            return port_from_resource(
                self._connection.network.update_port(port_id, **changes))
        return call_sdk(
            "port", port_id, "Updating port %s" % port_id, update)

    def delete_port(self, port_id):
        return call_sdk(
            "port", port_id, "Deleting port %s" % port_id,
            self._connection.network.delete_port, port_id,
            ignore_missing=False)

    def list_ports(self, device_id):
        def list_():
            return [port_from_resource(resource) for resource in
                    self._connection.network.ports(device_id=device_id)]
        return call_sdk(
            "port", device_id, "Listing ports of %s" % device_id, list_)

    def network_id_from_name(self, name):
        def find():
            return self._connection.network.find_network(
                name, ignore_missing=False).id
        return call_sdk("network", name, "Finding network %r" % name, find)

    def port_id_from_name(self, name):
        def find():
            return self._connection.network.find_port(
                name, ignore_missing=False).id
        return call_sdk("port", name, "Finding port %r" % name, find)

    def group_id_from_name(self, name):
        def find():
            return self._connection.network.find_security_group(
                name, ignore_missing=False).id
        return call_sdk(
            "security group", name, "Finding security group %r" % name, find)


def connect(config, cloud=None):
    """Connect to OpenStack in the configured region.

    Credentials come from clouds.yaml (or the OS_* environment variables).

    :param cloud: cloud name from clouds.yaml (default: from OS_CLOUD env)
    :return: a (compute, network) tuple of capabilities
    """
    cloud = cloud or os.environ.get("OS_CLOUD", "openstack")
    log.info("Connecting to OpenStack cloud %s in region %s",
             cloud, config.region)
    connection = openstack.connect(cloud=cloud, region_name=config.region)
    return OpenStackCompute(connection), OpenStackNetwork(connection)
