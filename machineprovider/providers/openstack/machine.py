class Server(object):
    """A compute instance as last reported by the provider.

    Servers are never cached; each lookup returns a fresh instance.
    """

    def __init__(self, id, name, status="unknown", metadata=None,
                 fault=None):
        self.id = id
        self.name = name
        self.status = status
        self.metadata = dict(metadata or {})
        self.fault = fault

    def __repr__(self):
        return "<Server id=%r name=%r status=%r>" % (
            self.id, self.name, self.status)


class Port(object):
    """A network port, with the source addresses it lets through."""

    def __init__(self, id, network_id, device_id=None,
                 allowed_address_pairs=()):
        self.id = id
        self.network_id = network_id
        self.device_id = device_id
        self.allowed_address_pairs = list(allowed_address_pairs)

    def allows_address(self, ip_address):
        """Whether `ip_address` is among the port's allowed address pairs."""
        for pair in self.allowed_address_pairs:
            if pair.get("ip_address") == ip_address:
                return True
        return False

    def __repr__(self):
        return "<Port id=%r network_id=%r>" % (self.id, self.network_id)


def server_from_resource(resource):
    """Create a :class:`Server` from an openstacksdk server resource."""
    return Server(
        resource.id,
        resource.name,
        resource.status,
        resource.metadata,
        resource.fault)


def port_from_resource(resource):
    """Create a :class:`Port` from an openstacksdk port resource."""
    return Port(
        resource.id,
        resource.network_id,
        resource.device_id,
        resource.allowed_address_pairs or ())
