from twisted.internet.defer import inlineCallbacks

from machineprovider.errors import (
    MachineNotFound, ResourceNotFound, RollbackFailed)
from machineprovider.providers.common.base import MachineProviderBase
from machineprovider.providers.common.utils import convert_unknown_error

from .client import connect
from .launch import ServerLaunch
from .locate import (
    OwnershipTags, get_server_by_name, get_server_by_provider_id,
    list_owned_servers)
from .network import (
    compute_server_networks, patch_pod_network_ports,
    verify_pod_network_ports)
from .utils import (
    CREATE_TIMEOUT, DELETE_TIMEOUT, SERVER_STATUS_ACTIVE,
    SERVER_STATUS_BUILD, SERVER_STATUS_DELETED, encode_provider_id, log)
from .wait import wait_for_status


class MachineProvider(MachineProviderBase):
    """MachineProvider for use in an OpenStack environment

    :param config: the :class:`machineprovider.config.MachineProviderConfig`
    :param compute: a :class:`machineprovider.providers.openstack.
        capabilities.Compute`
    :param network: a :class:`machineprovider.providers.openstack.
        capabilities.Network`
    :param clock: the clock status polling is scheduled on; defaults to
        the reactor.
    """

    def __init__(self, config, compute, network, clock=None):
        super(MachineProvider, self).__init__(config)
        self.compute = compute
        self.network = network
        self._clock = clock
        self._tags = OwnershipTags.from_tags(config.tags)

    @classmethod
    def connect(cls, config, cloud=None):
        """Create a provider talking to the cloud `cloud` of clouds.yaml."""
        compute, network = connect(config, cloud)
        return cls(config, compute, network)

    @property
    def provider_type(self):
        return "openstack"

    def create_machine(self, machine_name, user_data):
        """Create a server and wait until it is ACTIVE.

        If the server fails to become ACTIVE in time, or its ports can't
        be set up for the pod network, the server (and any port allocated
        for it) is deleted again before the error is reported.

        :param str machine_name: name of the new server.
        :param bytes user_data: raw user data handed to the server.

        :return: the provider id of the new server
        :rtype: :class:`twisted.internet.defer.Deferred`

        :raises: :exc:`machineprovider.errors.RollbackFailed` if deleting
            the server failed too; it carries both errors.
        """
        d = self._create_machine(machine_name, user_data)
        d.addErrback(
            convert_unknown_error, "Creating machine %r" % machine_name)
        return d

    @inlineCallbacks
    def _create_machine(self, machine_name, user_data):
        # Rollback finds the new server through its ownership keys.
        self._tags.require("Creating machine %r" % machine_name)
        networks = yield compute_server_networks(
            self.config, self.network, machine_name)

        try:
            server = yield ServerLaunch(self.config, self.compute).run(
                machine_name, user_data, networks)
        except Exception as error:
            for attachment in networks:
                if "port" in attachment:
                    yield self._rollback_port(
                        machine_name, attachment["port"], error)
            raise error

        provider_id = encode_provider_id(self.config.region, server.id)
        try:
            yield wait_for_status(
                self.compute, server.id, [SERVER_STATUS_BUILD],
                [SERVER_STATUS_ACTIVE], CREATE_TIMEOUT, self._clock)
            yield patch_pod_network_ports(
                self.config, self.network, server.id)
        except Exception as error:
            log.info("Attempting to delete server %s after unsuccessful "
                     "create operation: %s", server.id, error)
            try:
                yield self.delete_machine(machine_name, provider_id)
            except Exception as rollback_error:
                raise RollbackFailed(
                    "server %s" % server.id, error, rollback_error)
            raise error
        return provider_id

    @inlineCallbacks
    def _rollback_port(self, machine_name, port_id, error):
        log.info("Deleting port %s of machine %r after unsuccessful create "
                 "operation: %s", port_id, machine_name, error)
        try:
            yield self._delete_port_id(port_id)
        except Exception as rollback_error:
            raise RollbackFailed(
                "port of machine %r" % machine_name, error, rollback_error)

    def delete_machine(self, machine_name, provider_id=None):
        """Delete a server and wait until it is gone.

        The server is found from `provider_id` when given, else from
        `machine_name`. A server which can't be found counts as deleted.
        When a subnet is configured, the port allocated for the server is
        deleted as well.

        :rtype: :class:`twisted.internet.defer.Deferred`
        """
        d = self._delete_machine(machine_name, provider_id)
        d.addErrback(
            convert_unknown_error, "Deleting machine %r" % machine_name)
        return d

    @inlineCallbacks
    def _delete_machine(self, machine_name, provider_id):
        try:
            if provider_id:
                server = yield get_server_by_provider_id(
                    self.compute, provider_id, self._tags)
            else:
                server = yield get_server_by_name(
                    self.compute, machine_name, self._tags)
        except MachineNotFound as error:
            log.info("Nothing to delete for machine %r: %s",
                     machine_name, error)
            return

        log.info("Deleting server %s", server.id)
        try:
            yield self.compute.delete_server(server.id)
        except ResourceNotFound:
            log.debug("Server %s disappeared before deletion", server.id)

        yield wait_for_status(
            self.compute, server.id, [], [SERVER_STATUS_DELETED],
            DELETE_TIMEOUT, self._clock)

        if self.config.subnet_id:
            yield self._delete_port(machine_name)

    @inlineCallbacks
    def _delete_port(self, machine_name):
        try:
            port_id = yield self.network.port_id_from_name(machine_name)
        except ResourceNotFound:
            log.debug("Port %r was not found", machine_name)
            return
        yield self._delete_port_id(port_id)

    @inlineCallbacks
    def _delete_port_id(self, port_id):
        log.debug("Deleting port %s", port_id)
        try:
            yield self.network.delete_port(port_id)
        except ResourceNotFound:
            log.debug("Port %s disappeared before deletion", port_id)
        except Exception:
            log.error("Failed to delete port %s", port_id)
            raise
        else:
            log.info("Deleted port %s", port_id)

    def get_machine_status(self, machine_name):
        """Return the provider id of the server named `machine_name`.

        The server's pod network ports must let the pod network through;
        a server where they don't was only partially created.

        :rtype: :class:`twisted.internet.defer.Deferred`

        :raises: :exc:`machineprovider.errors.MachineNotFound`,
            :exc:`machineprovider.errors.MultipleMachinesFound`,
            :exc:`machineprovider.errors.PodNetworkError`
        """
        d = self._get_machine_status(machine_name)
        d.addErrback(
            convert_unknown_error,
            "Getting status of machine %r" % machine_name)
        return d

    @inlineCallbacks
    def _get_machine_status(self, machine_name):
        server = yield get_server_by_name(
            self.compute, machine_name, self._tags)
        yield verify_pod_network_ports(self.config, self.network, server.id)
        return encode_provider_id(self.config.region, server.id)

    def list_machines(self):
        """List the servers owned by this cluster and role.

        :return: a dict mapping provider ids to server names
        :rtype: :class:`twisted.internet.defer.Deferred`

        :raises: :exc:`machineprovider.errors.ProviderConfigError` if the
            cluster or role tag is not configured.
        """
        d = list_owned_servers(self.compute, self.config.region, self._tags)
        d.addErrback(convert_unknown_error, "Listing machines")
        return d
