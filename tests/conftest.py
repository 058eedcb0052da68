import socket

import pytest

from station_print_service.app import create_app
from station_print_service.delivery import DeliveryChannel
from station_print_service.emulator import VirtualPrinter
from station_print_service.service import PrintService
from station_print_service.store import MemoryConfigStore


@pytest.fixture
def virtual_printer():
    printer = VirtualPrinter('127.0.0.1', 0).start()
    yield printer
    printer.stop()


@pytest.fixture
def closed_port():
    """A local port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(('127.0.0.1', 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.fixture
def channel():
    return DeliveryChannel(timeout=2, linger=1)


@pytest.fixture
def store():
    return MemoryConfigStore()


@pytest.fixture
def service(store, channel):
    service = PrintService(store=store, channel=channel)
    yield service
    service.shutdown()


@pytest.fixture
def app(service):
    app = create_app(service)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def booking():
    return {
        'licensePlate': '123 TU 4567',
        'destinationName': 'Tunis',
        'seatNumber': 3,
        'basePrice': 5.0,
        'stationFee': 0.15,
        'totalAmount': 15.45,
        'createdBy': 'Sami',
        'createdAt': '2024-05-01T08:05:00Z',
        'stationName': 'Monastir',
    }
