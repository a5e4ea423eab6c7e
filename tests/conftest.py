"""
Shared fixtures: an in-memory stand-in for requests.Session.

Routes map a URL to a canned response and a delay, so races can be staged
without touching the network.
"""

import json
import os
import sys
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import pytest
import requests

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


BRASIL_API_URL = "https://brasilapi.com.br/api/cep/v1/01153000"
VIACEP_URL = "http://viacep.com.br/ws/01153000/json/"

BRASIL_API_BODY = {
    "cep": "01153000",
    "state": "SP",
    "city": "São Paulo",
    "neighborhood": "Barra Funda",
    "street": "Rua Vitorino Carmilo",
    "service": "open-cep",
}

VIACEP_BODY = {
    "cep": "01153-000",
    "logradouro": "Rua Vitorino Carmilo",
    "complemento": "",
    "bairro": "Barra Funda",
    "localidade": "São Paulo",
    "uf": "SP",
    "ibge": "3550308",
    "ddd": "11",
}


@dataclass
class Route:
    body: Any = None
    status_code: int = 200
    delay: float = 0.0
    error: Optional[Exception] = None
    invalid_json: bool = False
    # Pause before each body chunk, to stage a server trickling its body
    chunk_delay: float = 0.0
    chunk_size: Optional[int] = None


class FakeResponse:
    def __init__(self, route: Route, on_chunk: Optional[Callable[[int], None]] = None):
        self.status_code = route.status_code
        self._route = route
        self._on_chunk = on_chunk
        self.chunks_served = 0
        self.closed = False

    def _payload(self) -> bytes:
        if self._route.invalid_json:
            return b"<html>Service Unavailable</html>"
        return json.dumps(self._route.body).encode("utf-8")

    def iter_content(self, chunk_size=1):
        payload = self._payload()
        size = self._route.chunk_size or chunk_size
        for start in range(0, len(payload), size):
            if self._route.chunk_delay > 0:
                time.sleep(self._route.chunk_delay)
            self.chunks_served += 1
            if self._on_chunk is not None:
                self._on_chunk(self.chunks_served)
            yield payload[start:start + size]

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class FakeSession:
    def __init__(self, http: 'FakeHTTP'):
        self._http = http
        self.closed = False

    def get(self, url, timeout=None, stream=False):
        self._http.record(url, timeout)
        route = self._http.routes[url]
        if timeout is not None and route.delay > timeout:
            time.sleep(timeout)
            raise requests.Timeout(f"Read timed out. (read timeout={timeout})")
        if route.delay > 0:
            time.sleep(route.delay)
        if route.error is not None:
            raise route.error
        response = FakeResponse(route)
        self._http.responses.append(response)
        return response

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class FakeHTTP:
    """Session factory that serves canned routes and records every call."""

    def __init__(self, routes: Optional[Dict[str, Route]] = None):
        self.routes: Dict[str, Route] = routes or {}
        self.calls: List[str] = []
        self.timeouts: List[float] = []
        self.sessions: List[FakeSession] = []
        self.responses: List[FakeResponse] = []
        self._lock = threading.Lock()

    def record(self, url: str, timeout: Optional[float]) -> None:
        with self._lock:
            self.calls.append(url)
            self.timeouts.append(timeout)

    def __call__(self) -> FakeSession:
        session = FakeSession(self)
        with self._lock:
            self.sessions.append(session)
        return session


@pytest.fixture
def fake_http():
    return FakeHTTP()
