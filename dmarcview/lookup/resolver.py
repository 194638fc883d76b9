"""
DNS resolver wrapper used by the DNS-based organization lookup.

Provides resolution with configurable nameservers, timeouts and retries,
and maps every dnspython failure onto a uniform result dict.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import dns.exception
import dns.resolver

logger = logging.getLogger(__name__)

_DEFAULT_NAMESERVERS: list[str] = ["8.8.8.8", "1.1.1.1"]


@dataclass
class ResolverSettings:
    """Resolver configuration.

    Attributes:
        nameservers: Resolver IPs; empty means the public defaults.
        timeout_seconds: Per-server timeout.
        retries: Lifetime multiplier over ``timeout_seconds``.
    """

    nameservers: list[str] = field(default_factory=list)
    timeout_seconds: float = 5.0
    retries: int = 2

    @classmethod
    def from_config(cls, config: Any) -> ResolverSettings:
        raw = config.get("DNS_NAMESERVERS") or ""
        if isinstance(raw, str):
            nameservers = [ns.strip() for ns in raw.split(",") if ns.strip()]
        else:
            nameservers = list(raw)
        return cls(
            nameservers=nameservers,
            timeout_seconds=float(config.get("ORG_LOOKUP_TIMEOUT", 5.0)),
            retries=int(config.get("DNS_RETRIES", 2)),
        )


def create_resolver(settings: ResolverSettings) -> dns.resolver.Resolver:
    """Create a fresh dns.resolver.Resolver configured from *settings*.

    A new instance is created every time to ensure thread safety.
    """
    resolver = dns.resolver.Resolver(configure=False)
    resolver.nameservers = settings.nameservers or list(_DEFAULT_NAMESERVERS)
    resolver.timeout = float(settings.timeout_seconds)
    resolver.lifetime = float(settings.timeout_seconds * settings.retries)
    resolver.retry_servfail = True
    return resolver


def _failure(error_type: str, message: str) -> dict[str, Any]:
    return {
        "success": False,
        "records": [],
        "error_type": error_type,
        "error_message": message,
    }


def query_dns(
    name: str,
    rdtype: str,
    settings: ResolverSettings | None = None,
) -> dict[str, Any]:
    """Execute a DNS query with robust error handling.

    Args:
        name: The DNS name to query.
        rdtype: DNS record type string (e.g. "TXT", "A").
        settings: Optional ResolverSettings; defaults apply when omitted.

    Returns:
        A dict with keys:
            success (bool): Whether the query returned records.
            records (list[str]): The resolved record strings.
            error_type (str|None): Category of error if failed.
            error_message (str|None): Human-readable error description.
    """
    resolver = create_resolver(settings or ResolverSettings())

    try:
        answer = resolver.resolve(name, rdtype)
        records: list[str] = []
        for rdata in answer:
            # TXT records come as multiple byte strings that need joining
            if rdtype.upper() == "TXT":
                records.append(b"".join(rdata.strings).decode("utf-8", errors="replace"))
            else:
                records.append(rdata.to_text())

        logger.debug("DNS query %s/%s returned %d records", name, rdtype, len(records))
        return {
            "success": True,
            "records": records,
            "error_type": None,
            "error_message": None,
        }

    except dns.resolver.NXDOMAIN:
        logger.info("NXDOMAIN for %s/%s", name, rdtype)
        return _failure("NXDOMAIN", f"Name {name} does not exist (NXDOMAIN)")

    except dns.resolver.NoAnswer:
        logger.info("NoAnswer for %s/%s", name, rdtype)
        return _failure("NO_ANSWER", f"No {rdtype} records found for {name}")

    except dns.resolver.NoNameservers:
        logger.warning("NoNameservers for %s/%s", name, rdtype)
        return _failure("DNS_ERROR", f"No nameservers available for {name} (SERVFAIL or all failed)")

    except dns.resolver.Timeout:
        logger.warning("Timeout for %s/%s", name, rdtype)
        return _failure("TIMEOUT", f"DNS query timed out for {name}/{rdtype}")

    except dns.exception.DNSException as exc:
        logger.error("DNSException for %s/%s: %s", name, rdtype, exc)
        return _failure("DNS_ERROR", f"DNS error for {name}/{rdtype}: {exc}")
