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
"""Test Setup
"""
import doctest
import logging
import re
import threading
import time
import unittest

from zope.interface.verify import verifyObject
from zope.testing import loggingsupport
from zope.testing import renormalizing

import zc.closeablequeue
from zc.closeablequeue import interfaces

checker = renormalizing.RENormalizing([
    # object addresses change from run to run
    (re.compile(r"at 0x[0-9a-fA-F]+"),
     r"at 0x..."),
    ])

# generous upper bound for anything that should not block
TIMEOUT = 10


def equals(value):
    return lambda item: item == value


def start(target, *args):
    thread = threading.Thread(target=target, args=args)
    thread.daemon = True
    thread.start()
    return thread


class TestQueue(unittest.TestCase):

    def _make_one(self):
        return zc.closeablequeue.Queue()

    def test_provides_interface(self):
        self.assertTrue(verifyObject(interfaces.IQueue, self._make_one()))

    def test_new_queue_is_empty_and_open(self):
        q = self._make_one()
        self.assertEqual(len(q), 0)
        self.assertFalse(q)
        self.assertFalse(q.closed)

    def test_pull_empty(self):
        self.assertEqual(self._make_one().pull(), (None, False))

    def test_pull_in_put_order(self):
        q = self._make_one()
        for i in range(10):
            q.put(i)
        self.assertEqual(len(q), 10)
        self.assertEqual([q.pull() for i in range(10)],
                         [(i, True) for i in range(10)])
        self.assertEqual(q.pull(), (None, False))

    def test_none_is_an_item(self):
        q = self._make_one()
        q.put(None)
        self.assertTrue(q)
        self.assertEqual(q.pull(), (None, True))
        self.assertEqual(q.pull(), (None, False))

    def test_pull_blocking_drains_across_close(self):
        q = self._make_one()
        for i in range(10):
            q.put(i)
        q.close()
        got = [q.pull_blocking() for i in range(11)]
        self.assertEqual(got, [(i, True) for i in range(10)] + [(None, False)])

    def test_pull_blocking_on_closed_empty_queue(self):
        q = self._make_one()
        q.close()
        self.assertEqual(q.pull_blocking(), (None, False))
        self.assertEqual(q.pull_blocking(), (None, False))
        self.assertFalse(q.next())

    def test_next_with_items_does_not_consume(self):
        q = self._make_one()
        q.put('x')
        self.assertTrue(q.next())
        self.assertTrue(q.next())
        self.assertEqual(len(q), 1)

    def test_put_after_close(self):
        q = self._make_one()
        q.put(1)
        q.close()
        with self.assertRaises(interfaces.QueueClosedError) as caught:
            q.put(2)
        self.assertIs(caught.exception.queue, q)
        self.assertIn('closed', str(caught.exception))
        self.assertIn('Queue', str(caught.exception))
        self.assertEqual(len(q), 1)
        self.assertEqual(q.pull(), (1, True))

    def test_closed_error_is_value_error(self):
        q = self._make_one()
        q.close()
        self.assertRaises(ValueError, q.put, 1)
        self.assertIs(zc.closeablequeue.QueueClosedError,
                      interfaces.QueueClosedError)

    def test_put_unique_after_close(self):
        q = self._make_one()
        q.close()
        calls = []

        def predicate(item):
            calls.append(item)
            return False

        self.assertRaises(interfaces.QueueClosedError,
                          q.put_unique, 1, predicate)
        self.assertEqual(len(q), 0)
        self.assertEqual(calls, [])

    def test_close_twice(self):
        q = self._make_one()
        q.put(1)
        q.close()
        q.close()
        self.assertTrue(q.closed)
        self.assertEqual(len(q), 1)
        self.assertEqual(q.pull_blocking(), (1, True))
        self.assertEqual(q.pull_blocking(), (None, False))

    def test_put_unique(self):
        q = self._make_one()
        for i in range(10):
            self.assertTrue(q.put_unique(i, equals(i)), i)
        for i in range(10):
            self.assertFalse(q.put_unique(i, equals(i)), i)
        self.assertEqual(len(q), 10)
        self.assertEqual([q.pull()[0] for i in range(10)], list(range(10)))

    def test_put_unique_scans_front_to_back(self):
        q = self._make_one()
        for i in range(5):
            q.put(i)
        seen = []

        def predicate(item):
            seen.append(item)
            return item == 2

        self.assertFalse(q.put_unique('new', predicate))
        self.assertEqual(seen, [0, 1, 2])

    def test_has(self):
        q = self._make_one()
        for i in range(10):
            q.put(i)
        self.assertTrue(q.has(equals(8)))
        self.assertFalse(q.has(equals(12)))
        self.assertEqual(len(q), 10)

    def test_has_empty(self):
        self.assertFalse(self._make_one().has(lambda item: True))

    def test_has_on_closed_queue(self):
        q = self._make_one()
        q.put('a')
        q.close()
        self.assertTrue(q.has(equals('a')))

    def test_predicate_error_releases_lock(self):
        q = self._make_one()
        q.put(1)

        def broken(item):
            raise KeyError(item)

        self.assertRaises(KeyError, q.has, broken)
        self.assertRaises(KeyError, q.put_unique, 2, broken)
        # the lock was released, and the failed put_unique added nothing
        self.assertEqual(len(q), 1)
        q.put(3)
        self.assertEqual(len(q), 2)

    def test_clear(self):
        q = self._make_one()
        for i in range(5):
            q.put(i)
        q.clear()
        self.assertEqual(len(q), 0)
        self.assertEqual(q.pull(), (None, False))
        self.assertFalse(q.closed)
        q.put('again')
        self.assertEqual(q.pull(), ('again', True))

    def test_clear_after_close(self):
        q = self._make_one()
        q.put(1)
        q.close()
        q.clear()
        self.assertTrue(q.closed)
        self.assertEqual(len(q), 0)
        self.assertFalse(q.next())
        self.assertEqual(q.pull_blocking(), (None, False))

    def test_repr_names_state(self):
        q = self._make_one()
        q.put(1)
        self.assertIn('(open, 1 items)', repr(q))
        q.close()
        self.assertIn('(closed, 1 items)', repr(q))


class TestLogging(unittest.TestCase):

    def setUp(self):
        self.handler = loggingsupport.InstalledHandler(
            'zc.closeablequeue', level=logging.DEBUG)

    def tearDown(self):
        self.handler.uninstall()

    def messages(self):
        return [record.getMessage() for record in self.handler.records]

    def test_close_is_logged_once(self):
        q = zc.closeablequeue.Queue()
        q.put(1)
        q.put(2)
        q.close()
        q.close()
        messages = self.messages()
        self.assertEqual(len(messages), 1)
        self.assertIn('2 item(s) left to drain', messages[0])

    def test_refused_put_is_logged(self):
        q = zc.closeablequeue.Queue()
        q.close()
        self.handler.clear()
        self.assertRaises(interfaces.QueueClosedError, q.put, 1)
        messages = self.messages()
        self.assertEqual(len(messages), 1)
        self.assertTrue(messages[0].startswith('Refused put'))

    def test_successful_operations_are_quiet(self):
        q = zc.closeablequeue.Queue()
        q.put(1)
        q.put_unique(2, equals(2))
        q.pull()
        q.pull_blocking()
        self.assertEqual(self.messages(), [])


class TestQueueThreads(unittest.TestCase):

    def _make_one(self):
        return zc.closeablequeue.Queue()

    def _time_next(self, q, result):
        result.append(q.next())
        result.append(time.monotonic())

    def test_next_released_by_put(self):
        q = self._make_one()
        result = []
        thread = start(self._time_next, q, result)
        time.sleep(0.1)
        self.assertEqual(result, [])
        q.put(1)
        released = time.monotonic()
        thread.join(TIMEOUT)
        self.assertFalse(thread.is_alive())
        self.assertIs(result[0], True)
        self.assertLess(result[1] - released, 0.05)
        self.assertEqual(len(q), 1)

    def test_next_released_by_close(self):
        q = self._make_one()
        result = []
        thread = start(self._time_next, q, result)
        time.sleep(0.1)
        self.assertEqual(result, [])
        q.close()
        released = time.monotonic()
        thread.join(TIMEOUT)
        self.assertFalse(thread.is_alive())
        self.assertIs(result[0], False)
        self.assertLess(result[1] - released, 0.05)

    def test_pull_blocking_released_by_put(self):
        q = self._make_one()
        result = []
        thread = start(lambda: result.append(q.pull_blocking()))
        time.sleep(0.05)
        q.put('x')
        thread.join(TIMEOUT)
        self.assertFalse(thread.is_alive())
        self.assertEqual(result, [('x', True)])
        self.assertEqual(len(q), 0)

    def test_close_releases_every_waiter(self):
        q = self._make_one()
        results = []
        threads = [start(lambda: results.append(q.pull_blocking()))
                   for i in range(5)]
        threads.extend(start(lambda: results.append(q.next()))
                       for i in range(5))
        time.sleep(0.05)
        q.close()
        for thread in threads:
            thread.join(TIMEOUT)
            self.assertFalse(thread.is_alive())
        self.assertEqual(results.count((None, False)), 5)
        self.assertEqual(results.count(False), 5)

    def _check_one_put_wakes_every_next(self, put):
        q = self._make_one()
        results = []
        threads = [start(lambda: results.append(q.next()))
                   for i in range(5)]
        time.sleep(0.1)
        self.assertEqual(results, [])
        put(q)
        try:
            for thread in threads:
                thread.join(1)
            self.assertEqual(results, [True] * 5)
        finally:
            q.close()
        self.assertEqual(len(q), 1)

    def test_put_wakes_every_next_waiter(self):
        self._check_one_put_wakes_every_next(lambda q: q.put(1))

    def test_put_unique_wakes_every_next_waiter(self):
        self._check_one_put_wakes_every_next(
            lambda q: self.assertTrue(q.put_unique(1, equals(1))))

    def test_wakeup_without_change_keeps_waiting(self):
        q = self._make_one()
        results = []
        threads = [start(lambda: results.append(q.next())),
                   start(lambda: results.append(q.pull_blocking()))]
        time.sleep(0.05)
        with q._changed:
            q._changed.notify_all()
        time.sleep(0.05)
        for thread in threads:
            self.assertTrue(thread.is_alive())
        self.assertEqual(results, [])
        q.close()
        for thread in threads:
            thread.join(TIMEOUT)
            self.assertFalse(thread.is_alive())
        self.assertEqual(sorted(results, key=repr), [(None, False), False])

    def test_clear_does_not_release_waiters(self):
        q = self._make_one()
        result = []
        thread = start(lambda: result.append(q.pull_blocking()))
        time.sleep(0.05)
        q.clear()
        time.sleep(0.05)
        self.assertTrue(thread.is_alive())
        self.assertEqual(result, [])
        q.close()
        thread.join(TIMEOUT)
        self.assertEqual(result, [(None, False)])

    def test_put_next_pull(self):
        q = self._make_one()
        delivered = []

        def produce():
            for i in range(10):
                q.put(object())
            q.close()

        def consume():
            while q.next():
                item, present = q.pull()
                if present:
                    delivered.append(item)

        threads = [start(produce), start(consume)]
        for thread in threads:
            thread.join(TIMEOUT)
            self.assertFalse(thread.is_alive())
        self.assertLessEqual(len(delivered), 10)
        self.assertEqual(len(q), 0)

    def test_single_producer_single_consumer_order(self):
        q = self._make_one()
        received = []

        def produce():
            for i in range(1000):
                q.put(i)
            q.close()

        def consume():
            while True:
                item, present = q.pull_blocking()
                if not present:
                    return
                received.append(item)

        threads = [start(consume), start(produce)]
        for thread in threads:
            thread.join(TIMEOUT)
            self.assertFalse(thread.is_alive())
        self.assertEqual(received, list(range(1000)))

    def test_many_producers_many_consumers(self):
        q = self._make_one()
        producers, consumers, per_producer = 4, 4, 500
        received = [[] for i in range(consumers)]

        def produce(n):
            for i in range(per_producer):
                q.put((n, i))

        def consume(sink):
            while True:
                item, present = q.pull_blocking()
                if not present:
                    return
                sink.append(item)

        consuming = [start(consume, sink) for sink in received]
        producing = [start(produce, n) for n in range(producers)]
        for thread in producing:
            thread.join(TIMEOUT)
        q.close()
        for thread in consuming:
            thread.join(TIMEOUT)
            self.assertFalse(thread.is_alive())

        everything = [item for sink in received for item in sink]
        expected = [(n, i) for n in range(producers)
                    for i in range(per_producer)]
        self.assertEqual(sorted(everything), expected)
        # each consumer sees every producer's items in put order
        for sink in received:
            for n in range(producers):
                mine = [i for (p, i) in sink if p == n]
                self.assertEqual(mine, sorted(mine))

    def test_drain_after_close_with_many_consumers(self):
        q = self._make_one()
        for i in range(100):
            q.put(i)
        q.close()
        received = []
        lock = threading.Lock()

        def consume():
            while True:
                item, present = q.pull_blocking()
                if not present:
                    return
                with lock:
                    received.append(item)

        threads = [start(consume) for i in range(3)]
        for thread in threads:
            thread.join(TIMEOUT)
            self.assertFalse(thread.is_alive())
        self.assertEqual(sorted(received), list(range(100)))

    def test_concurrent_put_unique_adds_once(self):
        q = self._make_one()
        added = []
        barrier = threading.Barrier(8)

        def add():
            barrier.wait()
            added.append(q.put_unique('only', equals('only')))

        threads = [start(add) for i in range(8)]
        for thread in threads:
            thread.join(TIMEOUT)
            self.assertFalse(thread.is_alive())
        self.assertEqual(added.count(True), 1)
        self.assertEqual(len(q), 1)


def load_tests(loader, tests, pattern):
    tests.addTest(doctest.DocFileSuite(
        'queue.rst',
        optionflags=doctest.ELLIPSIS | doctest.NORMALIZE_WHITESPACE,
        checker=checker))
    return tests
