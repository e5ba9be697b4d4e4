import logging

from twisted.python.failure import Failure

from machineprovider.errors import (
    MachineProviderError, ProviderInteractionError)

log = logging.getLogger("machineprovider.common")


def convert_unknown_error(failure, operation=None):
    """Convert any non-machineprovider errors to a provider interaction error.

    Supports both usage from within an except clause, and as an
    errback handler ie. both the following forms are supported.

    ...
        try:
           something()
        except Exception as e:
           convert_unknown_error(e, "deleting server abc")

    ...
        d.addErrback(convert_unknown_error, "deleting server abc")

    :param str operation: optional description of what was being done,
        prefixed to the converted error's message.
    """
    if isinstance(failure, Failure):
        error = failure.value
    else:
        error = failure

    if not isinstance(error, MachineProviderError):
        message = ("Unexpected %s interacting with provider: %s"
                   % (type(error).__name__, str(error)))
        if operation:
            message = "%s: %s" % (operation, message)
        error = ProviderInteractionError(message)

    if isinstance(failure, Failure):
        return Failure(error)
    raise error
