class Compute(object):
    """The compute operations the OpenStack machine provider relies on.

    Every method returns a :class:`twisted.internet.defer.Deferred`. When
    the requested resource does not exist, the Deferred fails with
    :exc:`machineprovider.errors.ResourceNotFound`; other failures are
    reported as :exc:`machineprovider.errors.ProviderInteractionError`.

    Servers are returned as :class:`machineprovider.providers.openstack.
    machine.Server` instances.
    """

    def create_server(self, request):
        """Submit a server create request.

        :param dict request: server attributes, see
            :class:`machineprovider.providers.openstack.launch.ServerLaunch`
        """
        raise NotImplementedError()

    def boot_from_volume(self, request):
        """Submit a server create request carrying a block device mapping."""
        raise NotImplementedError()

    def get_server(self, server_id):
        raise NotImplementedError()

    def list_servers(self, name=None):
        """List servers, optionally only those whose name matches `name`.

        The provider may match names loosely; callers compare names
        themselves.
        """
        raise NotImplementedError()

    def delete_server(self, server_id):
        raise NotImplementedError()

    def image_id_from_name(self, name):
        raise NotImplementedError()

    def flavor_id_from_name(self, name):
        raise NotImplementedError()


class Network(object):
    """The network operations the OpenStack machine provider relies on.

    Follows the same conventions as :class:`Compute`; ports are returned
    as :class:`machineprovider.providers.openstack.machine.Port`
    instances.
    """

    def get_subnet(self, subnet_id):
        raise NotImplementedError()

    def create_port(self, request):
        """Create a port.

        :param dict request: port attributes: ``name``, ``network_id``,
            ``fixed_ips``, ``allowed_address_pairs`` and
            ``security_group_ids``.
        """
        raise NotImplementedError()

    def update_port(self, port_id, changes):
        raise NotImplementedError()

    def delete_port(self, port_id):
        raise NotImplementedError()

    def list_ports(self, device_id):
        """List the ports attached to the device (server) `device_id`."""
        raise NotImplementedError()

    def network_id_from_name(self, name):
        raise NotImplementedError()

    def port_id_from_name(self, name):
        raise NotImplementedError()

    def group_id_from_name(self, name):
        raise NotImplementedError()
