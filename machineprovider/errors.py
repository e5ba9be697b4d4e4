"""
This file holds the errors raised while orchestrating machines on the
OpenStack provider.
"""


class MachineProviderError(Exception):
    """All errors in machineprovider are subclasses of this.

    This error should not be raised by itself, though, since it means
    pretty much nothing.  It's useful mostly as something to catch instead.
    """


class FileNotFound(MachineProviderError):
    """Raised when a file is not found, obviously! :-)

    @ivar path: Path of the directory or file which wasn't found.
    """

    def __init__(self, path):
        self.path = path

    def __str__(self):
        return "File was not found: %r" % (self.path,)


class ProviderConfigError(MachineProviderError):
    """The machine provider configuration is invalid or incomplete."""


class UnresolvableReference(ProviderConfigError):
    """A configured name could not be resolved to a provider id.

    @ivar kind: The kind of resource, eg. "image" or "security group".
    @ivar reference: The configured name or id which failed to resolve.
    """

    def __init__(self, kind, reference, reason=None):
        self.kind = kind
        self.reference = reference
        self.reason = reason

    def __str__(self):
        message = "Cannot resolve %s %r" % (self.kind, self.reference)
        if self.reason:
            message = "%s: %s" % (message, self.reason)
        return message


class ResourceNotFound(MachineProviderError):
    """A provider resource does not exist.

    Raised by the compute and network capabilities, whatever the kind of
    resource being looked up.
    """

    def __init__(self, kind, reference):
        self.kind = kind
        self.reference = reference

    def __str__(self):
        return "%s not found: %s" % (self.kind.capitalize(), self.reference)


class MachineNotFound(MachineProviderError):
    """No machine owned by this cluster matches the lookup."""

    def __init__(self, reference):
        self.reference = reference

    def __str__(self):
        return "Cannot find machine: %s" % self.reference


class MultipleMachinesFound(MachineProviderError):
    """More than one owned machine matches a name lookup."""

    def __init__(self, name, server_ids):
        self.name = name
        self.server_ids = list(server_ids)

    def __str__(self):
        return "Multiple machines named %r found: %s" % (
            self.name, ", ".join(self.server_ids))


class MultipleResourcesFound(MachineProviderError):
    """A lookup by name matched more than one provider resource."""

    def __init__(self, kind, reference):
        self.kind = kind
        self.reference = reference

    def __str__(self):
        return "Multiple %s resources named %r found" % (
            self.kind, self.reference)


class InvalidProviderID(MachineProviderError):
    """A provider id does not have the openstack:///<region>/<id> shape."""

    def __init__(self, provider_id):
        self.provider_id = provider_id

    def __str__(self):
        return "Cannot parse server id from provider id %r" % (
            self.provider_id,)


class UnexpectedStatus(MachineProviderError):
    """A server reached a status outside of the pending and target sets."""

    def __init__(self, server_id, status):
        self.server_id = server_id
        self.status = status

    def __str__(self):
        return "Server %s reached unexpected status %r" % (
            self.server_id, self.status)


class ProviderRejected(UnexpectedStatus):
    """A server entered the ERROR status.

    @ivar fault: The fault detail reported by the provider, if any.
    """

    def __init__(self, server_id, status, fault=None):
        super(ProviderRejected, self).__init__(server_id, status)
        self.fault = fault

    def __str__(self):
        message = super(ProviderRejected, self).__str__()
        return "%s, fault: %s" % (message, self.fault)


class WaitTimeout(MachineProviderError):
    """A server did not reach its target status within the deadline."""

    def __init__(self, server_id, target, timeout):
        self.server_id = server_id
        self.target = list(target)
        self.timeout = timeout

    def __str__(self):
        return "Timed out after %ss waiting for server %s to reach %s" % (
            self.timeout, self.server_id, ", ".join(self.target))


class PodNetworkError(MachineProviderError):
    """A server's ports are not (or cannot be) set up for the pod network."""


class RollbackFailed(MachineProviderError):
    """Deleting a partially created machine failed.

    Both the error which triggered the rollback and the error raised by
    the rollback itself are kept.

    @ivar resource: What was being deleted, eg. "server 2f9b1c1e".
    """

    def __init__(self, resource, error, rollback_error):
        self.resource = resource
        self.error = error
        self.rollback_error = rollback_error

    def __str__(self):
        return ("Error deleting %s after unsuccessful creation attempt: %s. "
                "Original error: %s" % (
                    self.resource, self.rollback_error, self.error))


class ProviderInteractionError(MachineProviderError):
    """Raised when an unexpected error occurs interacting with a provider"""
