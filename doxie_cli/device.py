from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Collection, List, Optional

from PIL import Image

from doxie_cli import config
from doxie_cli.images import decode_jpeg
from doxie_cli.scan_item import ScanItem, ScannerExtraStatus, to_bare_name
from doxie_cli.utils import DoxieCliException, DoxieCliDecodeException, DoxieCliRequestFailedException, \
    Response, parse_json, perform_request


class DoxieCliScanNotFoundException(DoxieCliException):
    pass


class DoxieCliNoThumbnailException(DoxieCliException):
    pass


class DoxieCliDownloadFailedException(DoxieCliException):
    pass


class DoxieCliDeleteFailedException(DoxieCliException):
    pass


def to_internal_path(name: str) -> str:
    # The scanner's file system is case sensitive and stores upper case names only
    return config.internal_image_path + to_bare_name(name).upper()


@dataclass
class Doxie:
    """
    A scanner found by discovery. All requests are made relative to url, which is
    fixed once the scanner has been found. password may be set by the caller at
    any time between requests.
    """
    url: str
    model: str = ''
    name: str = ''
    firmware_wifi: str = ''
    mac: str = ''
    mode: str = ''
    network: str = ''
    ip_address: str = ''
    has_password: bool = False
    password: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_hello(cls, hello: Any, url: str) -> 'Doxie':
        if not isinstance(hello, dict):
            raise DoxieCliDecodeException(f'doxie: unexpected hello response: {hello!r}')

        return cls(url=url,
                   model=hello.get('model', ''),
                   name=hello.get('name', ''),
                   firmware_wifi=hello.get('firmwareWiFi', ''),
                   mac=hello.get('MAC', ''),
                   mode=hello.get('mode', ''),
                   network=hello.get('network', ''),
                   ip_address=hello.get('ip', ''),
                   has_password=bool(hello.get('hasPassword', False)))

    def _request(self, path: str, expected_statuses: Collection[int], method: str = 'GET',
                 json_body: Any = None) -> Response:
        response = perform_request(self.url + path, password=self.password, method=method, json_body=json_body)
        if response.status_code not in expected_statuses:
            raise DoxieCliRequestFailedException(response.status_code)
        return response

    def extra_status(self) -> ScannerExtraStatus:
        """Not cached, so the power source immediately reflects any change."""
        extra = parse_json(self._request('hello_extra.json', [HTTPStatus.OK]))
        try:
            return ScannerExtraStatus(firmware=extra['firmware'],
                                      connected_to_external_power=bool(extra['connectedToExternalPower']))
        except (KeyError, TypeError) as e:
            raise DoxieCliDecodeException(f'doxie: unexpected hello_extra response: {extra!r}') from e

    def scanner_firmware(self) -> str:
        return self.extra_status().firmware

    def external_power(self) -> bool:
        return self.extra_status().connected_to_external_power

    def restart(self) -> None:
        # The scanner answers 204 and then restarts its Wi-Fi system
        self._request('restart.json', [HTTPStatus.NO_CONTENT])

    def scans(self) -> List[ScanItem]:
        """
        Scans become available several seconds after scanning. Until then the
        scanner's memory is busy and it sends an empty body, raised as
        DoxieCliScanNotFoundException. Retrying later is up to the caller.
        """
        response = self._request('scans.json', [HTTPStatus.OK])
        if response.is_empty:
            raise DoxieCliScanNotFoundException('doxie: scan(s) not found, scanner memory may be busy')

        items = parse_json(response)
        try:
            return [ScanItem.from_json(item) for item in items]
        except (KeyError, TypeError, ValueError) as e:
            raise DoxieCliDecodeException(f'doxie: unexpected scans response: {items!r}') from e

    def recent(self) -> str:
        """Name of the last scan, or an empty string when there is none."""
        response = self._request('scans/recent.json', [HTTPStatus.OK, HTTPStatus.NO_CONTENT])
        if response.status_code == HTTPStatus.NO_CONTENT:
            return ''

        recent = parse_json(response)
        path = recent.get('path', '') if isinstance(recent, dict) else None
        if not isinstance(path, str):
            raise DoxieCliDecodeException(f'doxie: unexpected recent response: {recent!r}')
        return to_bare_name(path)

    def _get_image(self, directory: str, name: str) -> Image.Image:
        response = perform_request(self.url + directory + to_internal_path(name), password=self.password)

        if response.status_code == HTTPStatus.NOT_FOUND:
            raise DoxieCliScanNotFoundException(f'doxie: scan {name} not found')
        if response.status_code != HTTPStatus.OK:
            raise DoxieCliRequestFailedException(response.status_code)
        if response.is_empty:
            raise DoxieCliDownloadFailedException(f'doxie: error downloading scan {name}')

        return decode_jpeg(response.content)

    def scan(self, name: str) -> Image.Image:
        return self._get_image('scans', name)

    def thumbnail(self, name: str) -> Image.Image:
        """
        A 240x240 thumbnail of the scan. The scanner generates thumbnails some time
        after scanning, so DoxieCliNoThumbnailException is expected shortly after a scan.
        """
        try:
            return self._get_image('thumbnails', name)
        except DoxieCliScanNotFoundException as e:
            raise DoxieCliNoThumbnailException(f'doxie: thumbnail for {name} not yet generated') from e

    def delete(self, *names: str) -> bool:
        """Deletes all the given scans in a single request."""
        paths = [to_internal_path(name) for name in names]
        try:
            self._request('scans/delete.json', [HTTPStatus.NO_CONTENT], method='POST', json_body=paths)
        except DoxieCliRequestFailedException as e:
            raise DoxieCliDeleteFailedException(f'doxie: error deleting scan(s), http {e.status_code}') from e

        return True
