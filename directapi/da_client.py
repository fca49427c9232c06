from __future__ import annotations

import contextlib
import logging
import threading
from typing import Dict, Iterator, Optional, Union

import requests
from requests.auth import HTTPBasicAuth

from .decoding import decode_response
from .models import (
    FAILURE,
    ClientConfig,
    Config,
    DictResponse,
    Failure,
    HtmlPage,
    IdentityStack,
    JsonResponse,
    ListResponse,
)
from .utils import encode_parameters, mask_secret

Result = Union[JsonResponse, ListResponse, DictResponse, Failure]

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
DEFAULT_PREFIX = "/CMD_API_"


class DirectApiClient:
    """
    Client for the DirectAdmin API.

    Authentication: basic auth with "user" or "admin|user" as username, the
    second form acting as that user (see login_as). Calls return a decoded
    response or FAILURE; they do not raise for transport errors.
    """

    def __init__(
        self,
        host: str,
        usernames: str,
        password: str,
        protocol: str = "http",
        port: int = 2222,
        verify_ssl: bool = True,
        timeout_sec: Optional[float] = None,
    ) -> None:
        self.config = ClientConfig(
            host=host,
            password=password,
            protocol=protocol,
            port=port,
            verify_ssl=verify_ssl,
            timeout_sec=timeout_sec,
        )
        self._identities = IdentityStack(usernames)
        self._lock = threading.Lock()
        self.session = requests.Session()
        self.session.verify = verify_ssl

    @classmethod
    def from_config(cls, config: Config) -> "DirectApiClient":
        c = config.client
        return cls(
            host=c.host,
            usernames=config.usernames,
            password=c.password,
            protocol=c.protocol,
            port=c.port,
            verify_ssl=c.verify_ssl,
            timeout_sec=c.timeout_sec,
        )

    def __enter__(self) -> "DirectApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    @property
    def username(self) -> str:
        with self._lock:
            return self._identities.joined()

    def login_as(self, username: str) -> None:
        with self._lock:
            self._identities.login_as(username)
        logging.debug("[da] Acting as %s", username)

    def logout(self) -> None:
        with self._lock:
            self._identities.logout()

    @contextlib.contextmanager
    def impersonate(self, username: str) -> Iterator["DirectApiClient"]:
        self.login_as(username)
        try:
            yield self
        finally:
            self.logout()

    def get_api(self, command: str, params: Optional[Dict[str, str]] = None, prefix: str = DEFAULT_PREFIX) -> Result:
        return self.process_request("GET", f"{prefix}{command}", params)

    def post_api(self, command: str, data: Dict[str, str], prefix: str = DEFAULT_PREFIX) -> Result:
        # No query params on POST: callers that need them put them in `command`.
        return self.process_request("POST", f"{prefix}{command}", data)

    def process_request(self, method: str, destination: str, parameters: Optional[Dict[str, str]] = None) -> Result:
        password = self.config.password
        # prefix guarantees the leading "/"
        url = self.config.base_url + destination
        body: Optional[str] = None
        if parameters:
            blob = encode_parameters(parameters, password)
            if method == "POST":
                body = blob
            else:
                url = f"{url}?{blob}"

        username = self.username
        # bytes so requests does not fall back to latin-1
        auth = HTTPBasicAuth(username.encode("utf-8"), password.encode("utf-8"))
        logging.debug("[da] %s %s as %s", method, mask_secret(url, password), username)
        try:
            resp = self.session.request(
                method,
                url,
                data=body,
                headers={"Content-Type": FORM_CONTENT_TYPE},
                auth=auth,
                timeout=self.config.timeout_sec,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            logging.warning("[da] %s %s failed: %s", method, destination, mask_secret(str(exc), password))
            return FAILURE

        try:
            decoded = decode_response(resp.text)
        except ValueError as exc:
            logging.warning("[da] %s %s returned malformed JSON: %s", method, destination, exc)
            return JsonResponse(None)
        if isinstance(decoded, HtmlPage):
            logging.warning("[da] %s %s returned an HTML page instead of API data (check credentials)", method, destination)
            return FAILURE
        return decoded
