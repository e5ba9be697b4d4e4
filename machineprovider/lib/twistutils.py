from twisted.internet import reactor
from twisted.internet.defer import Deferred


def get_clock(clock=None):
    """Return `clock`, or the global reactor when none is given.

    Anything providing ``seconds()`` and ``callLater()`` will do, which
    lets tests drive time with a :class:`twisted.internet.task.Clock`.
    """
    if clock is None:
        return reactor
    return clock


def sleep(delay, clock=None):
    """Non-blocking sleep.

    :param int delay: time in seconds to sleep.
    :param clock: the clock to schedule the wake up on; defaults to the
        reactor.
    :return: a Deferred that fires after the desired delay.
    :rtype: :class:`twisted.internet.defer.Deferred`
    """
    deferred = Deferred()
    get_clock(clock).callLater(delay, deferred.callback, None)
    return deferred
