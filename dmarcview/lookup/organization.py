"""
Source IP to owning organization lookup.

Two backends are available:

* ``ip-api``: the ip-api.com JSON service over HTTP.
* ``cymru``: the Team Cymru IP-to-ASN mapping, queried over DNS TXT
  records through :func:`dmarcview.lookup.resolver.query_dns`.

Private, reserved and loopback addresses are rejected locally without
any network traffic.  Every failure raises
:class:`OrganizationLookupError`; the report decoder treats any raised
exception as "no annotation".
"""

from __future__ import annotations

import ipaddress
import json
import logging
import threading
import urllib.error
import urllib.request
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable

from dmarcview.lookup.resolver import ResolverSettings, query_dns

logger = logging.getLogger(__name__)

IpAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

# ---------------------------------------------------------------------------
# Backend configuration
# ---------------------------------------------------------------------------

_IP_API_URL: str = "http://ip-api.com/json/{ip}?fields=status,message,org,isp,as"
_DEFAULT_TIMEOUT_SECONDS: float = 5.0

_CYMRU_ORIGIN_V4: str = "{reversed}.origin.asn.cymru.com"
_CYMRU_ORIGIN_V6: str = "{reversed}.origin6.asn.cymru.com"
_CYMRU_ASN: str = "AS{asn}.asn.cymru.com"

LOOKUP_BACKENDS: tuple[str, ...] = ("none", "ip-api", "cymru")


class OrganizationLookupError(Exception):
    """The owning organization of an address could not be determined."""


@dataclass(frozen=True)
class Organization:
    """Owner of an IP address.

    Attributes:
        name: Display name of the organization.
        asn: Autonomous system number, when known.
        country: ISO country code of the registration, when known.
    """

    name: str
    asn: int | None = None
    country: str | None = None


def _ensure_public(address: IpAddress) -> None:
    if address.is_private or address.is_reserved or address.is_loopback:
        raise OrganizationLookupError(f"{address} is a private or reserved address")


# ---------------------------------------------------------------------------
# ip-api.com
# ---------------------------------------------------------------------------


def lookup_ip_api(address: IpAddress, timeout: float = _DEFAULT_TIMEOUT_SECONDS) -> Organization:
    """Query ip-api.com for the organization announcing *address*.

    Raises:
        OrganizationLookupError: Private address, HTTP failure or a
            failure status from the service.
    """
    _ensure_public(address)

    url = _IP_API_URL.format(ip=address)
    req = urllib.request.Request(url, headers={"Accept": "application/json"})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            data = json.loads(resp.read().decode("utf-8"))
    except (urllib.error.URLError, OSError) as exc:
        logger.warning("ip-api.com request failed for %s: %s", address, exc)
        raise OrganizationLookupError(str(exc)) from exc
    except ValueError as exc:
        logger.warning("ip-api.com returned invalid JSON for %s: %s", address, exc)
        raise OrganizationLookupError(f"Invalid response: {exc}") from exc

    if data.get("status") != "success":
        msg = data.get("message", "Unknown error from ip-api.com")
        logger.warning("ip-api.com returned failure for %s: %s", address, msg)
        raise OrganizationLookupError(msg)

    # "as" looks like "AS15169 Google LLC"
    as_field = data.get("as") or ""
    asn: int | None = None
    as_number = as_field.split(" ", 1)[0]
    if as_number.upper().startswith("AS") and as_number[2:].isdigit():
        asn = int(as_number[2:])

    name = data.get("org") or data.get("isp") or as_field
    if not name:
        raise OrganizationLookupError(f"No organization known for {address}")
    return Organization(name=name, asn=asn)


# ---------------------------------------------------------------------------
# Team Cymru IP-to-ASN over DNS
# ---------------------------------------------------------------------------


def _cymru_origin_name(address: IpAddress) -> str:
    if address.version == 4:
        reversed_name = address.reverse_pointer.removesuffix(".in-addr.arpa")
        return _CYMRU_ORIGIN_V4.format(reversed=reversed_name)
    reversed_name = address.reverse_pointer.removesuffix(".ip6.arpa")
    return _CYMRU_ORIGIN_V6.format(reversed=reversed_name)


def _first_txt(name: str, settings: ResolverSettings | None) -> list[str]:
    """Return the ``|``-separated fields of the first TXT record at *name*."""
    result = query_dns(name, "TXT", settings)
    if not result["success"] or not result["records"]:
        raise OrganizationLookupError(result.get("error_message") or f"No TXT record at {name}")
    return [part.strip() for part in result["records"][0].split("|")]


def lookup_cymru(address: IpAddress, settings: ResolverSettings | None = None) -> Organization:
    """Map *address* to its origin AS and the AS holder's name.

    Raises:
        OrganizationLookupError: Private address, DNS failure or an
            unparseable answer.
    """
    _ensure_public(address)

    # "15169 | 8.8.8.0/24 | US | arin | 2023-12-28"
    origin = _first_txt(_cymru_origin_name(address), settings)
    asns = origin[0].split() if origin else []
    if not asns or not asns[0].isdigit():
        raise OrganizationLookupError(f"Unexpected origin answer for {address}: {origin!r}")
    asn = int(asns[0])
    country = origin[2] if len(origin) > 2 and origin[2] else None

    # "15169 | US | arin | 2000-03-30 | GOOGLE, US"
    holder = _first_txt(_CYMRU_ASN.format(asn=asn), settings)
    if len(holder) < 5 or not holder[4]:
        raise OrganizationLookupError(f"Unexpected AS answer for AS{asn}: {holder!r}")
    return Organization(name=holder[4], asn=asn, country=country)


# ---------------------------------------------------------------------------
# Caching and selection
# ---------------------------------------------------------------------------


class CachedOrganizationLookup:
    """Memoize a lookup callable per address, failures included.

    Safe to share between request threads.

    Args:
        lookup: The backend, ``address -> Organization``.
        max_entries: Oldest entries are evicted beyond this size.
    """

    def __init__(self, lookup: Callable[[IpAddress], Organization], max_entries: int = 4096) -> None:
        self._lookup = lookup
        self._max_entries = max_entries
        self._cache: OrderedDict[IpAddress, Organization | OrganizationLookupError] = OrderedDict()
        self._lock = threading.Lock()

    def __call__(self, address: IpAddress) -> Organization:
        with self._lock:
            cached = self._cache.get(address)
        if cached is not None:
            logger.debug("Using cached organization for %s", address)
        else:
            try:
                cached = self._lookup(address)
            except OrganizationLookupError as exc:
                cached = exc
            with self._lock:
                self._cache[address] = cached
                while len(self._cache) > self._max_entries:
                    self._cache.popitem(last=False)
        if isinstance(cached, OrganizationLookupError):
            raise cached
        return cached

    def __len__(self) -> int:
        return len(self._cache)


def build_organization_lookup(config: Any) -> CachedOrganizationLookup | None:
    """Select the lookup backend named by ``ORG_LOOKUP`` in *config*.

    Returns None for ``none``.

    Raises:
        ValueError: The backend name is unknown.
    """
    backend = (config.get("ORG_LOOKUP") or "none").strip().lower()
    timeout = float(config.get("ORG_LOOKUP_TIMEOUT", _DEFAULT_TIMEOUT_SECONDS))

    if backend == "none":
        return None
    if backend == "ip-api":
        return CachedOrganizationLookup(lambda address: lookup_ip_api(address, timeout))
    if backend == "cymru":
        settings = ResolverSettings.from_config(config)
        return CachedOrganizationLookup(lambda address: lookup_cymru(address, settings))
    raise ValueError(f"Unknown ORG_LOOKUP backend {backend!r}; expected one of {LOOKUP_BACKENDS}")
