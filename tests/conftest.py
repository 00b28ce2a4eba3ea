import io
import json
import urllib.parse
from unittest.mock import patch

import pytest
from PIL import Image

from doxie_cli.device import Doxie
from doxie_cli.utils import Response

HELLO = {
    'model': 'DX250',
    'name': 'Doxie_042D6A',
    'firmwareWiFi': '1.29',
    'hasPassword': False,
    'MAC': '00:11:E5:04:2D:6A',
    'mode': 'AP',
    'network': '',
    'ip': '',
}

SCANS = [
    {'name': '/DOXIE/JPEG/IMG_0001.JPG', 'size': 241220, 'modified': '2010-05-01 00:10:06'},
    {'name': '/DOXIE/JPEG/IMG_0002.JPG', 'size': 265085, 'modified': '2010-05-01 00:09:26'},
    {'name': '/DOXIE/JPEG/IMG_0003.JPG', 'size': 273522, 'modified': '2010-05-01 00:09:44'},
]


def json_response(body, status_code=200) -> Response:
    return Response(status_code=status_code, content=json.dumps(body).encode())


class FakeScanner:
    """Stands in for perform_request, answering by URL path and recording every call."""

    def __init__(self, responses):
        self.responses = responses
        self.requests = []

    def __call__(self, url, password=None, method='GET', json_body=None, timeout_seconds=None):
        path = urllib.parse.urlsplit(url).path
        self.requests.append({'url': url, 'path': path, 'password': password, 'method': method,
                              'json_body': json_body})
        return self.responses.get(path, Response(status_code=404, content=b''))


@pytest.fixture
def jpeg_bytes():
    buffer = io.BytesIO()
    Image.new('RGB', (8, 8), 'white').save(buffer, format='JPEG')
    return buffer.getvalue()


@pytest.fixture
def fake_scanner(jpeg_bytes):
    scanner = FakeScanner({
        '/hello_extra.json': json_response({'firmware': '0.26', 'connectedToExternalPower': True}),
        '/restart.json': Response(status_code=204, content=b''),
        '/scans.json': json_response(SCANS),
        '/scans/recent.json': json_response({'path': '/DOXIE/JPEG/IMG_0003.JPG'}),
        '/scans/DOXIE/JPEG/IMG_0001.JPG': Response(status_code=200, content=jpeg_bytes),
        '/thumbnails/DOXIE/JPEG/IMG_0001.JPG': Response(status_code=200, content=jpeg_bytes),
        '/scans/delete.json': Response(status_code=204, content=b''),
    })
    with patch('doxie_cli.device.perform_request', scanner):
        yield scanner


@pytest.fixture
def doxie():
    return Doxie.from_hello(HELLO, 'http://192.168.1.100:8080/')


@pytest.fixture
def hello():
    return dict(HELLO)
