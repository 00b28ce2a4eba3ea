import asyncio
from http import HTTPStatus
from ipaddress import IPv4Address
import logging
from typing import Union
import urllib.parse

from async_upnp_client.search import SsdpSearchListener

from doxie_cli import config
from doxie_cli.config import DiscoveryConfiguration
from doxie_cli.device import Doxie
from doxie_cli.utils import DoxieCliException, DoxieCliRequestFailedException, parse_json, perform_request, \
    run_async_function_synchronously, run_in_daemon_thread


class DoxieCliScannerNotFoundException(DoxieCliException):
    pass


def _get_reply_host(ssdp_headers) -> str:
    host = ssdp_headers.get('_host')
    if host:
        return host

    location = ssdp_headers.get('location')
    if location:
        return urllib.parse.urlparse(location).hostname

    raise DoxieCliScannerNotFoundException(f'doxie: SSDP reply without a host: {dict(ssdp_headers)}')


class Discovery:
    def __init__(self, configuration: DiscoveryConfiguration = DiscoveryConfiguration()):
        self._configuration = configuration

    def _get_base_url(self, ip_address: Union[IPv4Address, str]) -> str:
        if self._configuration.static_ip_address:
            ip_address = self._configuration.static_ip_address
        return f'http://{ip_address}:{self._configuration.port}/'

    def _say_hello(self, ip_address: Union[IPv4Address, str]) -> Doxie:
        url = self._get_base_url(ip_address)
        response = perform_request(url + 'hello.json', timeout_seconds=self._configuration.timeout_seconds)
        if response.status_code != HTTPStatus.OK:
            raise DoxieCliRequestFailedException(response.status_code)

        return Doxie.from_hello(parse_json(response), url)

    async def _say_hello_in_background(self, ip_address: Union[IPv4Address, str]) -> Doxie:
        # A daemon thread, so a losing probe never delays interpreter exit
        return await asyncio.wrap_future(run_in_daemon_thread(self._say_hello, ip_address))

    async def _find_doxie_on_ap_network(self) -> Doxie:
        return await self._say_hello_in_background(self._configuration.ap_mode_ip_address)

    async def _find_doxie_on_client_network(self) -> Doxie:
        first_reply = asyncio.get_running_loop().create_future()

        async def on_ssdp_reply(ssdp_headers):
            logging.debug(f'SSDP reply: {ssdp_headers}')
            if not first_reply.done():
                first_reply.set_result(ssdp_headers)

        listener = SsdpSearchListener(
            async_callback=on_ssdp_reply,
            target=(config.ssdp_multicast_address, config.ssdp_port),
            timeout=config.ssdp_search_timeout_seconds,
            search_target=config.ssdp_search_target,
        )
        try:
            await listener.async_start()
            listener.async_search()
            ssdp_headers = await asyncio.wait_for(first_reply, timeout=self._configuration.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise DoxieCliScannerNotFoundException('doxie: no SSDP reply') from e
        except OSError as e:
            raise DoxieCliScannerNotFoundException(f'doxie: SSDP search failed: {e}') from e
        finally:
            listener.async_stop()

        return await self._say_hello_in_background(_get_reply_host(ssdp_headers))

    async def _race_probes(self) -> Doxie:
        pending = {
            asyncio.ensure_future(self._find_doxie_on_ap_network()),
            asyncio.ensure_future(self._find_doxie_on_client_network()),
        }
        errors = []
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for probe in done:
                    error = probe.exception()
                    if error is None:
                        return probe.result()
                    if not isinstance(error, (DoxieCliException, OSError)):
                        raise error
                    logging.debug(f'Discovery probe failed: {error}')
                    errors.append(error)
        finally:
            for probe in pending:
                probe.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        raise DoxieCliScannerNotFoundException(
            'doxie: scanner not found on Wi-Fi network (' + '; '.join(str(error) for error in errors) + ')')

    def discover(self) -> Doxie:
        return run_async_function_synchronously(self._race_probes())


def discover_doxie(configuration: DiscoveryConfiguration = DiscoveryConfiguration()) -> Doxie:
    return Discovery(configuration).discover()
