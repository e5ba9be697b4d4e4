from twisted.internet.defer import inlineCallbacks, succeed

from machineprovider.errors import PodNetworkError

from .utils import log, resolve_reference


@inlineCallbacks
def compute_server_networks(config, network, machine_name):
    """Decide which networks a new server attaches to.

    In order of priority:

    * with both `network_id` and `subnet_id` configured, a port is
      pre-allocated on the subnet, since the create server call can't
      pick the subnet the server gets its address from. The port is
      named after the machine, lets the pod network through and carries
      the configured security groups.
    * with only `network_id`, the server attaches to that network and the
      provider picks subnet and address.
    * otherwise the configured network list is used in order, resolving
      names to ids where no id is given.

    :return: a list of network attachments, ie. dicts with an ``uuid`` and
        optionally a ``port`` key.
    :rtype: :class:`twisted.internet.defer.Deferred`

    :raises: :exc:`machineprovider.errors.ResourceNotFound` when the
        configured subnet does not exist, and
        :exc:`machineprovider.errors.UnresolvableReference` for network or
        security group names the provider does not know.
    """
    log.debug("Resolving network setup for machine %r", machine_name)
    if config.network_id and config.subnet_id:
        port = yield _create_subnet_port(config, network, machine_name)
        return [{"uuid": config.network_id, "port": port.id}]

    if config.network_id:
        log.debug("Deploying in existing network %s", config.network_id)
        return [{"uuid": config.network_id}]

    server_networks = []
    for spec in config.networks:
        network_id = yield _get_network_id(network, spec)
        server_networks.append({"uuid": network_id})
    return server_networks


@inlineCallbacks
def _create_subnet_port(config, network, machine_name):
    log.debug("Deploying in existing subnet %s. Pre-allocating port...",
              config.subnet_id)
    yield network.get_subnet(config.subnet_id)

    security_group_ids = []
    for name in config.security_groups:
        group_id = yield resolve_reference(
            "security group", network.group_id_from_name, name)
        security_group_ids.append(group_id)

    port = yield network.create_port({
        "name": machine_name,
        "network_id": config.network_id,
        "fixed_ips": [{"subnet_id": config.subnet_id}],
        "allowed_address_pairs": [{"ip_address": config.pod_network_cidr}],
        "security_group_ids": security_group_ids})
    log.debug("Port %s successfully created", port.id)
    return port


def _get_network_id(network, spec):
    if spec.id:
        return succeed(spec.id)
    return resolve_reference("network", network.network_id_from_name,
                             spec.name)


@inlineCallbacks
def get_pod_network_ports(config, network, server_id):
    """Return the ports of server `server_id` which are on the pod network.

    The pod network is the configured `network_id`, or else every network
    of the network list flagged as `pod_network`.

    :raises: :exc:`machineprovider.errors.PodNetworkError` when the server
        has no ports at all, or none on the pod network.
    """
    network_ids = set()
    if config.network_id:
        network_ids.add(config.network_id)
    else:
        for spec in config.networks:
            if spec.pod_network:
                network_id = yield _get_network_id(network, spec)
                network_ids.add(network_id)

    server_ports = yield network.list_ports(server_id)
    if not server_ports:
        raise PodNetworkError(
            "Got an empty port list for server %s" % server_id)

    ports = [port for port in server_ports if port.network_id in network_ids]
    if not ports:
        raise PodNetworkError(
            "No port candidates found for pod network on server %s"
            % server_id)
    return ports


@inlineCallbacks
def patch_pod_network_ports(config, network, server_id):
    """Let the pod network CIDR through the pod network ports of a server."""
    ports = yield get_pod_network_ports(config, network, server_id)
    for port in ports:
        log.debug("Allowing %s on port %s of server %s",
                  config.pod_network_cidr, port.id, server_id)
        yield network.update_port(port.id, {
            "allowed_address_pairs": [
                {"ip_address": config.pod_network_cidr}]})


@inlineCallbacks
def verify_pod_network_ports(config, network, server_id):
    """Check every pod network port of a server lets the pod CIDR through.

    A port missing the CIDR means the server was only partially set up.
    """
    ports = yield get_pod_network_ports(config, network, server_id)
    for port in ports:
        if not port.allows_address(config.pod_network_cidr):
            raise PodNetworkError(
                "Port %s of server %s is not configured for pod network, "
                "but it should" % (port.id, server_id))
