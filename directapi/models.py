from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any, Dict, List, Optional


PROTOCOLS = ("http", "https")


@dataclasses.dataclass(frozen=True)
class ClientConfig:
    host: str
    password: str
    protocol: str = "http"
    port: int = 2222
    verify_ssl: bool = True
    timeout_sec: Optional[float] = None

    @property
    def base_url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}"


class IdentityStack:
    """Primary username plus an optional acting-as username.

    Joined with "|" the stack is the Basic-auth username DirectAdmin expects
    for impersonation, e.g. "admin|customer".
    """

    def __init__(self, usernames: str) -> None:
        self._names: List[str] = usernames.split("|")

    @property
    def primary(self) -> str:
        return self._names[0]

    @property
    def acting(self) -> Optional[str]:
        return self._names[1] if len(self._names) > 1 else None

    def login_as(self, username: str) -> None:
        if len(self._names) > 1:
            self._names[1] = username
        else:
            self._names.append(username)

    def logout(self) -> None:
        if len(self._names) < 2:
            return
        del self._names[1]

    def joined(self) -> str:
        return "|".join(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __str__(self) -> str:
        return self.joined()


class Failure:
    """The call did not produce usable API data.

    Covers both transport errors and HTML pages served instead of API output;
    the two are deliberately not told apart.
    """

    _instance: Optional["Failure"] = None

    def __new__(cls) -> "Failure":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "FAILURE"


FAILURE = Failure()


@dataclasses.dataclass
class JsonResponse:
    data: Any


@dataclasses.dataclass
class ListResponse:
    data: List[str]


@dataclasses.dataclass
class DictResponse:
    data: Dict[str, str]


@dataclasses.dataclass(frozen=True)
class HtmlPage:
    pass


@dataclasses.dataclass
class Config:
    client: ClientConfig
    usernames: str

    @staticmethod
    def from_json_file(path: Path) -> "Config":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError("Config root must be an object")

        host = data.get("host")
        if not host or not isinstance(host, str):
            raise ValueError("host must be a non-empty string")
        usernames = data.get("usernames")
        if not usernames or not isinstance(usernames, str):
            raise ValueError("usernames must be a non-empty string, e.g. \"admin\" or \"admin|user\"")
        password = data.get("password")
        if not isinstance(password, str):
            raise ValueError("password must be a string")

        protocol = data.get("protocol", "http")
        if protocol not in PROTOCOLS:
            raise ValueError(f"protocol must be one of {', '.join(PROTOCOLS)}")
        port_raw = data.get("port", 2222)
        if isinstance(port_raw, bool) or not isinstance(port_raw, int) or not 0 < port_raw < 65536:
            raise ValueError("port must be an integer between 1 and 65535")

        verify_ssl = bool(data.get("verify_ssl", True))
        timeout_raw = data.get("timeout_sec")
        timeout_sec: Optional[float] = None
        if timeout_raw is not None:
            if isinstance(timeout_raw, bool) or not isinstance(timeout_raw, (int, float)) or timeout_raw <= 0:
                raise ValueError("timeout_sec must be a positive number")
            timeout_sec = float(timeout_raw)

        client = ClientConfig(
            host=host,
            password=password,
            protocol=protocol,
            port=port_raw,
            verify_ssl=verify_ssl,
            timeout_sec=timeout_sec,
        )
        return Config(client=client, usernames=usernames)
