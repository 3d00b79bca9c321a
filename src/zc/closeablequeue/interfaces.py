##############################################################################
#
# Copyright (c) 2011 Zope Foundation and Contributors.
# All Rights Reserved.
#
# This software is subject to the provisions of the Zope Public License,
# Version 2.1 (ZPL).  A copy of the ZPL should accompany this distribution.
# THIS SOFTWARE IS PROVIDED "AS IS" AND ANY AND ALL EXPRESS OR IMPLIED
# WARRANTIES ARE DISCLAIMED, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED
# WARRANTIES OF TITLE, MERCHANTABILITY, AGAINST INFRINGEMENT, AND FITNESS
# FOR A PARTICULAR PURPOSE.
#
##############################################################################
"""Queue Interfaces
"""
from zope.interface import Attribute
from zope.interface import Interface


class QueueClosedError(ValueError):
    """An item was put into a queue that has been closed."""

    def __init__(self, queue, name=None):
        if name is None:
            name = repr(queue)
        ValueError.__init__(
            self, '%s: cannot put an item into a closed queue' % name)
        self.queue = queue


class IQueue(Interface):
    """A closeable, unbounded FIFO queue shared by threads.

    Any number of threads may put and pull concurrently.  Closing the queue
    refuses further puts; items already queued are still handed out, and
    blocked consumers are released once nothing is left.

    The predicates given to `has` and `put_unique` are called while the
    queue's lock is held.  They must not call back into the queue: the lock
    is not reentrant and such a call deadlocks.
    """

    closed = Attribute("True once `close` has been called.  Never reset.")

    def put(item):
        """Put an item on the end of the queue and wake all waiters.

        Raise QueueClosedError if the queue is closed.
        """

    def put_unique(item, predicate):
        """Put an item on the end of the queue unless one is already there.

        `predicate` is called with each queued item, front to back.  If it
        returns a true value for any of them the queue is left alone and
        False is returned; otherwise the item is added and True is
        returned.  The check and the put happen under one lock.

        Raise QueueClosedError if the queue is closed.
        """

    def pull():
        """Remove and return the front item without blocking.

        Return an ``(item, True)`` pair, or ``(None, False)`` if the queue
        is empty.
        """

    def next():
        """Block until the queue holds an item or is closed and empty.

        Return True if an item was available, False once the queue is
        closed and drained.  Another consumer may take the item before the
        caller pulls it; use `pull_blocking` to wait and take atomically.
        """

    def pull_blocking():
        """Remove and return the front item, waiting for one if needed.

        Return an ``(item, True)`` pair, or ``(None, False)`` once the queue
        is closed and empty.
        """

    def has(predicate):
        """Return True if `predicate` is true for any queued item.

        The answer may be stale as soon as it is returned.
        """

    def clear():
        """Remove all items.  Does not wake waiters or reopen the queue."""

    def close():
        """Close the queue and wake all waiters.

        Closing twice is harmless.  Queued items stay available to
        consumers.
        """

    def __len__():
        """Return len of queue"""

    def __bool__():
        """return True if the queue contains more than zero items, else False.
        """
