from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Optional, Sequence

import requests

from ..common.validators import is_valid_badge_uid, normalize_badge_uid
from ..core.constants import DEFAULT_BRIDGE_TIMEOUT_SECONDS, DEFAULT_SCAN_DEBOUNCE_SECONDS
from .protocol import (
    TOKEN_CONNECTED,
    TOKEN_INVALID_UID,
    TOKEN_PROCESSING,
    TOKEN_SERVER_DOWN,
    LineKind,
    parse_device_line,
)

logger = logging.getLogger(__name__)


class BackendUnavailable(Exception):
    """No configured endpoint answered."""


class EndpointSession:
    """Ordered list of backend scan URLs plus a pointer to the one that answered last.

    Each post starts at that pointer and tries every endpoint at most once.
    """

    def __init__(
        self,
        endpoints: Sequence[str],
        *,
        timeout: float = DEFAULT_BRIDGE_TIMEOUT_SECONDS,
        http: Optional[requests.Session] = None,
    ):
        if not endpoints:
            raise ValueError("At least one backend endpoint is required")
        self._endpoints = list(endpoints)
        self._timeout = timeout
        self._http = http or requests.Session()
        self._current = 0

    @property
    def current_endpoint(self) -> str:
        return self._endpoints[self._current]

    def post_scan(self, uid: str) -> dict:
        count = len(self._endpoints)
        for attempt in range(count):
            index = (self._current + attempt) % count
            url = self._endpoints[index]
            try:
                resp = self._http.post(url, json={"uid": uid}, timeout=self._timeout)
                payload = resp.json()
            except (requests.RequestException, ValueError) as e:
                logger.warning("Backend %s unavailable: %s", url, e)
                continue
            if index != self._current:
                logger.info("Switched backend to %s", url)
            self._current = index
            return payload if isinstance(payload, dict) else {}
        raise BackendUnavailable(f"All {count} backend endpoint(s) failed")

    def ping(self) -> bool:
        """True when the current endpoint's health route answers."""
        url = self.current_endpoint.rsplit("/api/", 1)[0] + "/api/health"
        try:
            return self._http.get(url, timeout=self._timeout).ok
        except requests.RequestException:
            return False

    def close(self) -> None:
        self._http.close()


class ScanBridge:
    """Relays reader lines to the backend and writes one token back per scan.

    Reads of any reader within ``debounce_seconds`` of its previous read are dropped.
    """

    def __init__(
        self,
        session: EndpointSession,
        write: Callable[[str], None],
        *,
        debounce_seconds: float = DEFAULT_SCAN_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._session = session
        self._write = write
        self._debounce = debounce_seconds
        self._clock = clock
        self._last_read: dict[str, float] = {}

    def handle_line(self, line: str, *, reader_id: str = "default") -> Optional[str]:
        message = parse_device_line(line)
        if message.kind == LineKind.READY:
            token = TOKEN_CONNECTED if self._session.ping() else TOKEN_SERVER_DOWN
            self._write(token)
            return token
        if message.kind != LineKind.UID:
            if message.raw:
                logger.debug("[%s] %s", reader_id, message.raw)
            return None

        now = self._clock()
        last = self._last_read.get(reader_id)
        if last is not None and now - last < self._debounce:
            logger.info("[%s] duplicate read of %s ignored", reader_id, message.uid)
            return None
        self._last_read[reader_id] = now

        token = self._forward(message.uid or "")
        self._write(token)
        return token

    def _forward(self, uid: str) -> str:
        clean = normalize_badge_uid(uid)
        if not is_valid_badge_uid(clean):
            return TOKEN_INVALID_UID
        try:
            payload = self._session.post_scan(clean)
        except BackendUnavailable as e:
            logger.error("Scan %s not delivered: %s", clean, e)
            return TOKEN_SERVER_DOWN
        return str(payload.get("token") or TOKEN_PROCESSING)

    def serve(self, lines: Iterable[str], *, reader_id: str = "default") -> None:
        for line in lines:
            self.handle_line(line, reader_id=reader_id)
