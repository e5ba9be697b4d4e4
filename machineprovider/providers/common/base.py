class MachineProviderBase(object):
    """Base class supplying common functionality for MachineProviders.

    To write a working subclass, you will need to override the following
    methods:

        * :meth:`create_machine`
        * :meth:`delete_machine`
        * :meth:`get_machine_status`
        * :meth:`list_machines`

    Every method returns a :class:`twisted.internet.defer.Deferred`. One
    call is made per logical machine action; providers keep no mutable
    state between calls, so calls for distinct machines may run
    concurrently.
    """

    def __init__(self, config):
        self.config = config

    @property
    def provider_type(self):
        raise NotImplementedError()

    #================================================================
    # Subclasses need to implement their own versions of everything
    # in the following block

    def create_machine(self, machine_name, user_data):
        """Create a machine and wait until it is usable.

        :param str machine_name: name of the new machine.
        :param bytes user_data: raw user data handed to the machine.

        :return: the provider id of the new machine
        :rtype: :class:`twisted.internet.defer.Deferred`
        """
        raise NotImplementedError()

    def delete_machine(self, machine_name, provider_id=None):
        """Delete a machine, succeeding if it is already gone.

        :param str machine_name: name of the machine, used when no
            `provider_id` is given.
        :param str provider_id: provider id of the machine; takes priority
            over `machine_name`.

        :rtype: :class:`twisted.internet.defer.Deferred`
        """
        raise NotImplementedError()

    def get_machine_status(self, machine_name):
        """Return the provider id of an existing, correctly set up machine.

        :rtype: :class:`twisted.internet.defer.Deferred`

        :raises: :exc:`machineprovider.errors.MachineNotFound`
        """
        raise NotImplementedError()

    def list_machines(self):
        """List the machines owned by this provider.

        :return: a dict mapping provider ids to machine names
        :rtype: :class:`twisted.internet.defer.Deferred`
        """
        raise NotImplementedError()
