"""Find the servers owned by a cluster.

Servers carry their cluster and role as metadata keys (not values), eg.
``kubernetes.io-cluster-shoot--dev`` and ``kubernetes.io-role-node``.
A server is owned by the provider when its metadata holds both of the
keys found in the configured tags. Nova versions exposing server tags
would allow filtering on the server side; metadata is used so older
versions keep working, which means filtering happens here.
"""

from twisted.internet.defer import inlineCallbacks

from machineprovider.errors import (
    MachineNotFound, MultipleMachinesFound, ProviderConfigError,
    ResourceNotFound)

from .utils import (
    SERVER_TAG_CLUSTER_PREFIX, SERVER_TAG_ROLE_PREFIX, decode_provider_id,
    encode_provider_id, log)


class OwnershipTags(object):
    """The cluster and role metadata keys proving server ownership."""

    def __init__(self, cluster_key=None, role_key=None):
        self.cluster_key = cluster_key
        self.role_key = role_key

    @classmethod
    def from_tags(cls, tags):
        """Pick the cluster and role keys out of the configured tags."""
        cluster_key = role_key = None
        for key in sorted(tags):
            if key.startswith(SERVER_TAG_CLUSTER_PREFIX):
                cluster_key = key
            elif key.startswith(SERVER_TAG_ROLE_PREFIX):
                role_key = key
        return cls(cluster_key, role_key)

    @property
    def complete(self):
        return bool(self.cluster_key and self.role_key)

    def require(self, operation):
        """Raise a config error unless both keys are known."""
        if not self.complete:
            log.warning("%s can not proceed: cluster/role tags are missing",
                        operation)
            raise ProviderConfigError(
                "%s can not proceed: cluster/role tags are missing"
                % operation)

    def owns(self, server):
        """Whether `server` carries both the cluster and role keys."""
        if not self.complete:
            return False
        return (self.cluster_key in server.metadata and
                self.role_key in server.metadata)


@inlineCallbacks
def get_server_by_provider_id(compute, provider_id, tags):
    """Fetch an owned server from its provider id.

    A server which exists but lacks the ownership tags is reported as not
    found: it is stale or foreign state, which must not be acted upon.

    :raises: :exc:`machineprovider.errors.InvalidProviderID`,
        :exc:`machineprovider.errors.MachineNotFound`
    """
    log.debug("Finding server with provider id %s", provider_id)
    _, server_id = decode_provider_id(provider_id)
    try:
        server = yield compute.get_server(server_id)
    except ResourceNotFound:
        log.debug("Server %s does not exist", server_id)
        raise MachineNotFound(server_id)

    if not tags.owns(server):
        log.warning("Server %s found, but cluster/role tags are "
                    "missing/not matching", server_id)
        raise MachineNotFound(server_id)
    return server


@inlineCallbacks
def get_server_by_name(compute, machine_name, tags):
    """Fetch the single owned server named `machine_name`.

    :raises: :exc:`machineprovider.errors.ProviderConfigError` if the
        ownership tags are not configured,
        :exc:`machineprovider.errors.MachineNotFound` if no owned server
        has that name, and
        :exc:`machineprovider.errors.MultipleMachinesFound` if several do.
    """
    tags.require("Finding machine %r" % machine_name)
    servers = yield compute.list_servers(name=machine_name)
    matching = [server for server in servers
                if server.name == machine_name and tags.owns(server)]
    if len(matching) > 1:
        raise MultipleMachinesFound(
            machine_name, [server.id for server in matching])
    if not matching:
        raise MachineNotFound(machine_name)
    return matching[0]


@inlineCallbacks
def list_owned_servers(compute, region, tags):
    """Map the provider ids of all owned servers to their names."""
    tags.require("Listing machines")
    servers = yield compute.list_servers()
    result = {}
    for server in servers:
        if tags.owns(server):
            result[encode_provider_id(region, server.id)] = server.name
    return result
