from twisted.internet.defer import inlineCallbacks

from machineprovider.errors import (
    ProviderRejected, ResourceNotFound, UnexpectedStatus, WaitTimeout)
from machineprovider.lib.twistutils import get_clock, sleep

from .utils import SERVER_STATUS_DELETED, SERVER_STATUS_ERROR, log

POLL_INTERVAL = 1


@inlineCallbacks
def wait_for_status(compute, server_id, pending, target, timeout, clock=None):
    """Wait until the server `server_id` reaches one of the `target` statuses.

    The server is queried once every :data:`POLL_INTERVAL` seconds, the
    first query happening after the first interval.

    :param compute: the compute capability to query.
    :param pending: statuses the server may pass through while waiting.
        When empty, any status outside of `target` is acceptable.
    :param target: statuses ending the wait. If it contains
        ``DELETED``, a server which can't be found counts as deleted.
    :param int timeout: seconds to wait before giving up.
    :param clock: the clock to schedule queries on; defaults to the
        reactor.

    :return: a Deferred firing with None once the server reached its
        target.
    :raises: :exc:`machineprovider.errors.WaitTimeout` when the deadline
        passes, :exc:`machineprovider.errors.UnexpectedStatus` (or
        :exc:`machineprovider.errors.ProviderRejected` for ``ERROR``)
        when the server leaves the `pending` statuses.
    """
    clock = get_clock(clock)
    deadline = clock.seconds() + timeout
    while True:
        yield sleep(POLL_INTERVAL, clock)
        try:
            server = yield compute.get_server(server_id)
        except ResourceNotFound:
            if SERVER_STATUS_DELETED in target:
                return
            raise

        log.debug("Waiting for server %s with status %s to reach %s",
                  server_id, server.status, ", ".join(target))
        if server.status in target:
            return

        if pending and server.status not in pending:
            if server.status == SERVER_STATUS_ERROR:
                raise ProviderRejected(server_id, server.status, server.fault)
            raise UnexpectedStatus(server_id, server.status)

        if clock.seconds() >= deadline:
            raise WaitTimeout(server_id, target, timeout)
