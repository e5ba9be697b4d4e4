from twisted.internet.defer import inlineCallbacks, succeed

from .utils import log, resolve_reference


def add_key_pair(config, request, image_id):
    """Attach the configured key pair, even when its name is empty."""
    request["key_name"] = config.key_name


def add_scheduler_hints(config, request, image_id):
    """Pin placement to the configured server group."""
    request["scheduler_hints"] = {"group": config.server_group_id}


def add_boot_volume(config, request, image_id):
    """Boot from a volume of the configured size, made from the image.

    The volume goes away with the server.
    """
    request["block_device_mapping"] = [{
        "uuid": image_id,
        "source_type": "image",
        "destination_type": "volume",
        "boot_index": 0,
        "volume_size": config.root_disk_size,
        "delete_on_termination": True}]


# Applied in order on top of the base request, each one only when its
# predicate holds for the configuration. Layers only ever add fields.
LAYERS = (
    (lambda config: True, add_key_pair),
    (lambda config: config.server_group_id is not None, add_scheduler_hints),
    (lambda config: config.root_disk_size > 0, add_boot_volume),
)


class ServerLaunch(object):
    """Operation submitting a single server create request.

    The submit itself is never retried; should it fail, the caller retries
    the whole machine creation.

    :param config: the :class:`machineprovider.config.MachineProviderConfig`
    :param compute: the compute capability to submit the request to
    """

    def __init__(self, config, compute):
        self._config = config
        self._compute = compute

    @inlineCallbacks
    def run(self, machine_name, user_data, networks):
        """Create the server `machine_name`.

        Image and flavor are resolved before anything is submitted, so
        an unknown name fails without side effects.

        :param bytes user_data: the raw user data for the server.
        :param list networks: network attachments, as returned by
            :func:`machineprovider.providers.openstack.network.
            compute_server_networks`.

        :return: the new :class:`machineprovider.providers.openstack.
            machine.Server`, typically in BUILD status.
        :rtype: :class:`twisted.internet.defer.Deferred`
        """
        image_id = yield self._get_image_id()
        flavor_id = yield resolve_reference(
            "flavor", self._compute.flavor_id_from_name,
            self._config.flavor_name)

        request = self.build_request(
            machine_name, user_data, networks, image_id, flavor_id)
        log.debug("Launching server %r with flavor %s and image %s",
                  machine_name, flavor_id, image_id)
        if "block_device_mapping" in request:
            server = yield self._compute.boot_from_volume(request)
        else:
            server = yield self._compute.create_server(request)
        log.info("Launched server %s for machine %r", server.id, machine_name)
        return server

    def build_request(self, machine_name, user_data, networks, image_id,
                      flavor_id):
        """Assemble the create request from the base fields and layers."""
        config = self._config
        request = {
            "name": machine_name,
            "flavor_id": flavor_id,
            "image_id": image_id,
            "networks": list(networks),
            "security_groups": [
                {"name": name} for name in config.security_groups],
            "metadata": dict(config.tags),
            "user_data": user_data,
            "availability_zone": config.availability_zone,
            "config_drive": config.use_config_drive}
        for applies, layer in LAYERS:
            if applies(config):
                layer(config, request, image_id)
        return request

    def _get_image_id(self):
        # An explicit id wins over the name.
        if self._config.image_id:
            return succeed(self._config.image_id)
        return resolve_reference(
            "image", self._compute.image_id_from_name,
            self._config.image_name)
