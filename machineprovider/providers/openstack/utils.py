import logging
import re

from twisted.internet.defer import inlineCallbacks

from machineprovider.errors import (
    InvalidProviderID, MultipleResourcesFound, ResourceNotFound,
    UnresolvableReference)

log = logging.getLogger("machineprovider.openstack")

SERVER_STATUS_BUILD = "BUILD"
SERVER_STATUS_ACTIVE = "ACTIVE"
SERVER_STATUS_ERROR = "ERROR"
# Never reported by the provider; a server which can no longer be found
# is in this state.
SERVER_STATUS_DELETED = "DELETED"

# Seconds to wait for a new server to leave BUILD, and for a deleted
# server to disappear.
CREATE_TIMEOUT = 600
DELETE_TIMEOUT = 300

SERVER_TAG_CLUSTER_PREFIX = "kubernetes.io-cluster-"
SERVER_TAG_ROLE_PREFIX = "kubernetes.io-role-"

PROVIDER_ID_PREFIX = "openstack:///"

_re_provider_id = re.compile(
    r"%s(?P<region>.+)/(?P<server_id>[^/]+)\Z" % re.escape(
        PROVIDER_ID_PREFIX),
    re.DOTALL)


def encode_provider_id(region, server_id):
    """Encode a region and server id into a provider id.

    The provider id is the only identifier persisted by the machine
    controller, eg. ``openstack:///eu-de-1/2f9b1c1e-...``.

    The server id is the last path segment, so it can't contain ``/``;
    the region may.

    :raises: :exc:`machineprovider.errors.InvalidProviderID` for an empty
        region or server id, or a server id containing ``/``.
    """
    provider_id = "%s%s/%s" % (PROVIDER_ID_PREFIX, region, server_id)
    if not region or not server_id or "/" in server_id:
        raise InvalidProviderID(provider_id)
    return provider_id


def decode_provider_id(provider_id):
    """Decode a provider id into its region and server id.

    :return: a (region, server_id) tuple
    :raises: :exc:`machineprovider.errors.InvalidProviderID` when
        `provider_id` does not look like ``openstack:///<region>/<id>``.
    """
    match = _re_provider_id.match(provider_id or "")
    if match is None:
        raise InvalidProviderID(provider_id)
    return match.group("region"), match.group("server_id")


@inlineCallbacks
def resolve_reference(kind, resolve, reference):
    """Resolve a configured name to a provider id.

    :param str kind: the kind of resource, used in error messages.
    :param resolve: a capability method taking `reference` and returning a
        Deferred id.
    :raises: :exc:`machineprovider.errors.UnresolvableReference` when the
        provider knows no such resource.
    """
    try:
        resource_id = yield resolve(reference)
    except (ResourceNotFound, MultipleResourcesFound) as error:
        raise UnresolvableReference(kind, reference, str(error))
    log.debug("Resolved %s %r to %s", kind, reference, resource_id)
    return resource_id
