import collections
import logging
import threading

from zope import interface

from zc.closeablequeue import interfaces

logger = logging.getLogger(__name__)


@interface.implementer(interfaces.IQueue)
class Queue(object):

    def __init__(self):
        self._data = collections.deque()
        self._closed = False
        self._lock = threading.Lock()
        # signalled on every put and on close, never on pull or clear
        self._changed = threading.Condition(self._lock)

    @property
    def closed(self):
        with self._lock:
            return self._closed

    def put(self, item):
        with self._lock:
            self._check_open()
            self._data.append(item)
            self._changed.notify_all()

    def put_unique(self, item, predicate):
        with self._lock:
            self._check_open()
            for existing in self._data:
                if predicate(existing):
                    return False
            self._data.append(item)
            self._changed.notify_all()
            return True

    def pull(self):
        with self._lock:
            if not self._data:
                return None, False
            return self._data.popleft(), True

    def next(self):
        with self._lock:
            while not self._data:
                if self._closed:
                    return False
                self._changed.wait()
            return True

    def pull_blocking(self):
        with self._lock:
            while not self._data:
                if self._closed:
                    return None, False
                self._changed.wait()
            return self._data.popleft(), True

    def has(self, predicate):
        with self._lock:
            for item in self._data:
                if predicate(item):
                    return True
            return False

    def clear(self):
        with self._lock:
            self._data.clear()

    def close(self):
        with self._lock:
            if not self._closed:
                logger.debug("Closing %s with %d item(s) left to drain",
                             self._repr(), len(self._data))
            self._closed = True
            self._changed.notify_all()

    def __len__(self):
        with self._lock:
            return len(self._data)

    def __bool__(self):
        return len(self) > 0

    def __repr__(self):
        with self._lock:
            return self._repr()

    def _repr(self):
        # caller holds the lock
        return '<%s.%s (%s, %d items) at 0x%x>' % (
            self.__class__.__module__, self.__class__.__name__,
            'closed' if self._closed else 'open', len(self._data), id(self))

    def _check_open(self):
        # caller holds the lock
        if self._closed:
            logger.debug("Refused put into %s", self._repr())
            raise interfaces.QueueClosedError(self, self._repr())
