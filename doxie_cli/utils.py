import asyncio
import concurrent.futures
from dataclasses import dataclass
import json
import logging
import threading
import urllib.parse
from typing import Any, Optional

import requests

from doxie_cli import config


class DoxieCliException(Exception):
    pass


class DoxieCliScannerUnreachableException(DoxieCliException):
    pass


class DoxieCliRequestFailedException(DoxieCliException):
    def __init__(self, status_code: int):
        super().__init__(f'doxie: request error http {status_code}')
        self.status_code = status_code


class DoxieCliDecodeException(DoxieCliException):
    pass


@dataclass
class Response:
    status_code: int
    content: bytes

    @property
    def is_empty(self) -> bool:
        return len(self.content) == 0


def add_auth_to_url(url: str, password: Optional[str]) -> str:
    """
    The scanner expects its credentials in the authority component of the URL,
    e.g. http://doxie:<password>@192.168.1.100:8080/scans.json
    """
    if not password:
        return url

    split_url = urllib.parse.urlsplit(url)
    quoted_password = urllib.parse.quote(password, safe='')
    netloc = f'{config.auth_username}:{quoted_password}@{split_url.hostname}'
    if split_url.port:
        netloc += f':{split_url.port}'
    return urllib.parse.urlunsplit(split_url._replace(netloc=netloc))


def run_in_daemon_thread(function, *args) -> concurrent.futures.Future:
    """
    Runs function on a daemon thread. Whoever waits on the returned future may give up
    on it at any time; the thread then finishes in the background without holding up
    interpreter exit.
    """
    future = concurrent.futures.Future()

    def run():
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(function(*args))
        except Exception as e:
            future.set_exception(e)

    threading.Thread(target=run, daemon=True).start()
    return future


def _perform_blocking_request(url: str, password: Optional[str], method: str, json_body: Any,
                              timeout_seconds: float) -> Response:
    try:
        with requests.request(method, add_auth_to_url(url, password), json=json_body,
                              timeout=timeout_seconds, stream=True) as response:
            content = b''.join(response.iter_content(chunk_size=config.response_chunk_size))
            return Response(status_code=response.status_code, content=content)
    except requests.exceptions.RequestException as e:
        raise DoxieCliScannerUnreachableException(f'doxie: {method} {url} failed: {e}') from e


def perform_request(url: str, password: Optional[str] = None, method: str = 'GET', json_body: Any = None,
                    timeout_seconds: float = config.request_timeout_seconds) -> Response:
    # The whole exchange, body included, has to finish within timeout_seconds
    future = run_in_daemon_thread(_perform_blocking_request, url, password, method, json_body, timeout_seconds)
    try:
        response = future.result(timeout=timeout_seconds)
    except concurrent.futures.TimeoutError as e:
        future.cancel()
        raise DoxieCliScannerUnreachableException(
            f'doxie: {method} {url} did not complete within {timeout_seconds} seconds') from e

    logging.debug(f'{method} {urllib.parse.unquote(url)} returned {response.status_code}: '
                  f'{len(response.content)} bytes')
    return response


def parse_json(response: Response) -> Any:
    try:
        return json.loads(response.content)
    except ValueError as e:
        raise DoxieCliDecodeException(f'doxie: malformed JSON response: {e}') from e


def run_async_function_synchronously(coroutine):
    return asyncio.run(coroutine)
