import time
import threading
from concurrent.futures import wait

import pytest

from station_print_service.dispatch import PrintDispatcher
from station_print_service.handlers import ESCPOSHandler
from station_print_service.models import EncodedJob, PrinterEndpoint

INIT = b'\x1b\x40'
CUT = b'\x1d\x56\x00'


class RecordingDelivery:
    """Fake delivery that tracks how many jobs run at once per endpoint."""

    def __init__(self, delay=0.05):
        self.delay = delay
        self.calls = []
        self.active = {}
        self.max_active = {}
        self._lock = threading.Lock()

    def __call__(self, job):
        key = job.endpoint.key
        with self._lock:
            self.active[key] = self.active.get(key, 0) + 1
            self.max_active[key] = max(self.max_active.get(key, 0), self.active[key])
            self.calls.append(job.payload)
        time.sleep(self.delay)
        with self._lock:
            self.active[key] -= 1
        return {'success': True, 'bytes_sent': len(job)}


@pytest.fixture
def endpoint():
    return PrinterEndpoint('192.168.192.12', 9100)


def test_same_endpoint_runs_one_at_a_time_in_order(endpoint):
    delivery = RecordingDelivery()
    dispatcher = PrintDispatcher(delivery)

    futures = [dispatcher.enqueue(EncodedJob(endpoint, bytes([n]))) for n in range(6)]
    wait(futures, timeout=5)
    dispatcher.shutdown()

    assert all(f.result()['success'] for f in futures)
    assert delivery.max_active[endpoint.key] == 1
    assert delivery.calls == [bytes([n]) for n in range(6)]


def test_concurrent_callers_are_serialized(endpoint):
    delivery = RecordingDelivery(delay=0.02)
    dispatcher = PrintDispatcher(delivery)

    threads = [
        threading.Thread(target=dispatcher.dispatch, args=(EncodedJob(endpoint, b'job'),))
        for _ in range(8)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    dispatcher.shutdown()

    assert len(delivery.calls) == 8
    assert delivery.max_active[endpoint.key] == 1


def test_different_endpoints_run_concurrently():
    barrier = threading.Barrier(2, timeout=3)

    def deliver(job):
        # Both jobs must be inside deliver at the same time to pass
        barrier.wait()
        return {'success': True}

    dispatcher = PrintDispatcher(deliver)
    first = dispatcher.enqueue(EncodedJob(PrinterEndpoint('10.0.0.1', 9100), b'a'))
    second = dispatcher.enqueue(EncodedJob(PrinterEndpoint('10.0.0.2', 9100), b'b'))

    assert first.result(timeout=5)['success']
    assert second.result(timeout=5)['success']
    assert dispatcher.endpoint_count == 2
    dispatcher.shutdown()


def test_host_case_shares_one_queue():
    dispatcher = PrintDispatcher(RecordingDelivery(delay=0))
    dispatcher.dispatch(EncodedJob(PrinterEndpoint('Printer.local', 9100), b'a'))
    dispatcher.dispatch(EncodedJob(PrinterEndpoint('printer.local', 9100), b'b'))

    assert dispatcher.endpoint_count == 1
    dispatcher.shutdown()


def test_failed_job_releases_the_endpoint(endpoint):
    outcomes = iter([RuntimeError('boom'), {'success': True}])

    def deliver(job):
        outcome = next(outcomes)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    dispatcher = PrintDispatcher(deliver)
    first = dispatcher.enqueue(EncodedJob(endpoint, b'a'))
    second = dispatcher.enqueue(EncodedJob(endpoint, b'b'))

    assert first.result(timeout=5) == {
        'success': False, 'reason': 'internal error', 'error': 'boom',
        'host': endpoint.host, 'port': endpoint.port,
    }
    assert second.result(timeout=5) == {'success': True}
    dispatcher.shutdown()


def test_jobs_never_interleave_on_the_wire(virtual_printer, channel):
    dispatcher = PrintDispatcher(channel.deliver)
    endpoint = PrinterEndpoint('127.0.0.1', virtual_printer.port)
    handler = ESCPOSHandler()
    payloads = [handler.encode([f'Ticket {n}'] + ['-' * 32] * 200) for n in range(4)]

    threads = [
        threading.Thread(target=dispatcher.dispatch, args=(EncodedJob(endpoint, payload),))
        for payload in payloads
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)
    dispatcher.shutdown()

    assert virtual_printer.wait_for_jobs(4)
    received = [job.data for job in virtual_printer.jobs]
    for data in received:
        assert data.startswith(INIT)
        assert data.endswith(CUT)
        assert data.count(INIT) == 1
    assert sorted(received) == sorted(payloads)


def test_wire_order_follows_enqueue_order(virtual_printer, channel):
    dispatcher = PrintDispatcher(channel.deliver)
    endpoint = PrinterEndpoint('127.0.0.1', virtual_printer.port)
    payloads = [ESCPOSHandler().encode([f'Ticket {n}']) for n in range(3)]

    futures = [dispatcher.enqueue(EncodedJob(endpoint, payload)) for payload in payloads]
    wait(futures, timeout=10)
    dispatcher.shutdown()

    assert virtual_printer.wait_for_jobs(3)
    by_arrival = sorted(virtual_printer.jobs, key=lambda job: job.opened_at)
    assert [job.data for job in by_arrival] == payloads
