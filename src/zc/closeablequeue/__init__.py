from zc.closeablequeue._queue import Queue  # noqa: F401
from zc.closeablequeue.interfaces import QueueClosedError  # noqa: F401
