"""HTTP client for the NetBox API with retries and rate limiting."""

from __future__ import annotations

import json
import logging
import math
import threading
import time
from typing import Any, Callable, Optional
from urllib.parse import SplitResult, urlsplit

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .metrics import increment_netbox_requests
from .types import UID_CUSTOM_FIELD_NAME, CustomField, IPAddress, Tag

UID_REGEXP = (
    "^[a-fA-F0-9]{8}-[a-fA-F0-9]{4}-[a-fA-F0-9]{4}-[a-fA-F0-9]{4}-[a-fA-F0-9]{12}$"
)

# Largest response body ever read; guards against endless responses.
RESPONSE_BODY_SIZE_LIMIT = 1 << 20

RETRY_MAX = 5
_RETRY_STATUSES = (429, 500, 502, 503, 504)
_NON_IDEMPOTENT = frozenset({"POST", "PATCH"})


class NetBoxAPIError(Exception):
    """NetBox answered with a status outside 2xx."""

    def __init__(self, status: str, body: str = "") -> None:
        self.status = status
        self.body = body
        super().__init__(f"{status}: {body}" if body else status)


class RateLimiter:
    """Token bucket: refills rate tokens per second up to burst tokens."""

    def __init__(
        self,
        rate: float = math.inf,
        burst: int = 1,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.rate = rate
        self.burst = burst
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(burst)
        self._last = clock()
        self._lock = threading.Lock()

    def wait(self) -> None:
        """Block until one token is available, then take it."""
        if math.isinf(self.rate):
            return
        if self.burst < 1:
            raise ValueError(f"rate: Wait(n=1) exceeds limiter's burst {self.burst}")
        with self._lock:
            now = self._clock()
            if self.rate > 0:
                self._tokens = min(
                    float(self.burst), self._tokens + (now - self._last) * self.rate
                )
            self._last = now
            if self._tokens < 1 and self.rate <= 0:
                raise ValueError("rate: Wait(n=1) would never be satisfied")
            self._tokens -= 1
            delay = -self._tokens / self.rate if self._tokens < 0 else 0.0
        if delay > 0:
            self._sleep(delay)


def parse_and_validate_url(api_url: str) -> SplitResult:
    """Parse the NetBox URL, requiring a scheme and a host."""
    try:
        parsed = urlsplit(api_url)
    except ValueError as exc:
        raise ValueError(f"failed to parse NetBox URL: {exc}") from exc
    if not parsed.scheme or not parsed.hostname:
        raise ValueError("NetBox URL must be in scheme://host:port format")
    return parsed


def _load_ca_bundle(path: str) -> str:
    with open(path, "rb") as fh:
        data = fh.read()
    if b"-----BEGIN CERTIFICATE-----" not in data:
        raise ValueError("no certificates were successfully parsed")
    return path


class HTTPNetBoxClient:
    """NetBox client talking to the REST API over HTTP."""

    def __init__(
        self,
        api_url: str,
        api_token: str = "",
        *,
        logger: Optional[logging.Logger] = None,
        rate_limiter: Optional[RateLimiter] = None,
        ca_cert_path: Optional[str] = None,
        timeout: float = 30.0,
        backoff_factor: float = 1.0,
    ) -> None:
        parsed = parse_and_validate_url(api_url)
        self.base_url = parsed.geturl().removesuffix("/")
        self._token = api_token
        self._logger = logger or logging.getLogger("netbox_ip_controller")
        self._rate_limiter = rate_limiter or RateLimiter()
        self._timeout = timeout

        verify: Any = True
        if ca_cert_path is not None:
            try:
                verify = _load_ca_bundle(ca_cert_path)
            except OSError as exc:
                self._logger.error("%s", exc)
                raise

        retry = Retry(
            total=RETRY_MAX,
            backoff_factor=backoff_factor,
            status_forcelist=_RETRY_STATUSES,
            raise_on_status=False,
        )
        self._retrying = requests.Session()
        self._retrying.mount("http://", HTTPAdapter(max_retries=retry))
        self._retrying.mount("https://", HTTPAdapter(max_retries=retry))
        self._retrying.verify = verify

        self._plain = requests.Session()
        self._plain.mount("http://", HTTPAdapter(max_retries=0))
        self._plain.mount("https://", HTTPAdapter(max_retries=0))
        self._plain.verify = verify

    # Trailing "/" is required on single-object endpoints: without it NetBox
    # answers 200 without making any change.

    def upsert_uid_field(self) -> None:
        """Create the UID custom field on IP addresses unless it exists."""
        if self._get_custom_uid_field() is not None:
            self._logger.info("UID field already exists")
            return
        uid_field = CustomField(
            content_types=["ipam.ipaddress"],
            description="UID of the object the IP is assigned to.",
            filter_logic="exact",
            label="UID",
            name=UID_CUSTOM_FIELD_NAME,
            required=False,
            type="text",
            validation_regex=UID_REGEXP,
            weight=100,
        )
        self._execute(f"{self.base_url}/extras/custom-fields/", "POST", uid_field.to_dict())

    def _get_custom_uid_field(self) -> Optional[CustomField]:
        url = f"{self.base_url}/extras/custom-fields/?name={UID_CUSTOM_FIELD_NAME}"
        results = self._results(self._execute(url, "GET"))
        if len(results) > 1:
            raise ValueError(f"more than one custom field {UID_CUSTOM_FIELD_NAME!r} found")
        if not results:
            return None
        return CustomField.from_dict(results[0])

    def get_tag(self, tag: str) -> Optional[Tag]:
        """Return the tag with the given name, or None."""
        results = self._results(self._execute(f"{self.base_url}/extras/tags/?name={tag}", "GET"))
        if len(results) > 1:
            raise ValueError(f"more than one tag with name {tag!r} found")
        if not results:
            return None
        return Tag.from_dict(results[0])

    def create_tag(self, tag: str) -> Tag:
        """Create a tag whose slug equals its name."""
        data = self._execute(
            f"{self.base_url}/extras/tags/", "POST", Tag(name=tag, slug=tag).to_dict()
        )
        return Tag.from_dict(self._decode(data))

    def get_ip(self, uid: str) -> Optional[IPAddress]:
        """Return the IP assigned to the object with the given UID, or None."""
        url = f"{self.base_url}/ipam/ip-addresses/?cf_{UID_CUSTOM_FIELD_NAME}={uid}"
        results = self._results(self._execute(url, "GET"))
        if len(results) > 1:
            # a duplicate, or the UID field is missing and NetBox did not filter
            raise ValueError(f"more than one IP with UID {uid!r} found")
        if not results:
            return None
        return IPAddress.from_dict(results[0])

    def upsert_ip(self, ip: IPAddress) -> Optional[IPAddress]:
        """Create or update the IP with ip's UID; None when nothing changed."""
        existing = self.get_ip(ip.uid)
        if existing is not None and not existing.changed(ip):
            self._logger.info("IP has not changed - not updating")
            return None
        if existing is not None:
            data = self._execute(
                f"{self.base_url}/ipam/ip-addresses/{existing.id}/", "PUT", ip.to_dict()
            )
        else:
            data = self._execute(f"{self.base_url}/ipam/ip-addresses/", "POST", ip.to_dict())
        return IPAddress.from_dict(self._decode(data))

    def delete_ip(self, uid: str) -> None:
        """Delete the IP with the given UID, if there is one."""
        existing = self.get_ip(uid)
        if existing is None:
            return
        self._execute(f"{self.base_url}/ipam/ip-addresses/{existing.id}/", "DELETE")

    @staticmethod
    def _decode(data: bytes) -> Any:
        try:
            return json.loads(data)
        except ValueError as exc:
            raise ValueError(f"unmarshaling response: {exc}") from exc

    def _results(self, data: bytes) -> list[dict[str, Any]]:
        decoded = self._decode(data)
        if not isinstance(decoded, dict):
            raise ValueError("unmarshaling response: not an object")
        return list(decoded.get("results") or [])

    def _execute(self, url: str, method: str, body: Any = None) -> bytes:
        headers = {"Accept": "application/json"}
        payload: Optional[bytes] = None
        if body is not None:
            payload = json.dumps(body).encode()
            headers["Content-Type"] = "application/json"
        if self._token:
            headers["Authorization"] = f"Token {self._token}"

        self._rate_limiter.wait()

        # non-idempotent methods must not be retried
        session = self._plain if method in _NON_IDEMPOTENT else self._retrying
        try:
            res = session.request(
                method, url, data=payload, headers=headers, timeout=self._timeout, stream=True
            )
        except requests.RequestException:
            increment_netbox_requests(False)
            raise

        with res:
            body_bytes = self._read_limited(res)
            if not 200 <= res.status_code <= 299:
                increment_netbox_requests(False)
                raise NetBoxAPIError(
                    f"{res.status_code} {res.reason}".strip(),
                    body_bytes.decode("utf-8", "replace").strip(),
                )
        increment_netbox_requests(True)
        return body_bytes

    @staticmethod
    def _read_limited(res: requests.Response) -> bytes:
        chunks: list[bytes] = []
        size = 0
        for chunk in res.iter_content(chunk_size=65536):
            remaining = RESPONSE_BODY_SIZE_LIMIT - size
            if remaining <= 0:
                break
            piece = chunk[:remaining]
            chunks.append(piece)
            size += len(piece)
        return b"".join(chunks)