"""
Unit tests for dmarcview/lookup/resolver.py

All dns.resolver calls are mocked so no real network activity occurs.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import dns.exception
import dns.resolver
import pytest

from dmarcview.lookup.resolver import ResolverSettings, create_resolver, query_dns


# ---------------------------------------------------------------------------
# Helper: build a fake dns.resolver answer object
# ---------------------------------------------------------------------------


def _make_rdata(*chunks: bytes) -> MagicMock:
    """Return a mock rdata object whose .strings attribute returns *chunks*."""
    rdata = MagicMock()
    rdata.strings = list(chunks)
    return rdata


def _make_answer(*txt_values: str) -> list:
    return [_make_rdata(v.encode()) for v in txt_values]


# ---------------------------------------------------------------------------
# Tests - successful resolution
# ---------------------------------------------------------------------------


def test_query_dns_successful_txt_resolution():
    with patch("dns.resolver.Resolver") as MockResolver:
        MockResolver.return_value.resolve.return_value = _make_answer(
            "15169 | 8.8.8.0/24 | US | arin | 2023-12-28"
        )
        result = query_dns("8.8.8.8.origin.asn.cymru.com", "TXT")

    assert result["success"] is True
    assert result["error_type"] is None
    assert result["error_message"] is None
    assert result["records"] == ["15169 | 8.8.8.0/24 | US | arin | 2023-12-28"]


def test_query_dns_joins_txt_chunks():
    with patch("dns.resolver.Resolver") as MockResolver:
        MockResolver.return_value.resolve.return_value = [_make_rdata(b"15169 | US ", b"| arin")]
        result = query_dns("AS15169.asn.cymru.com", "TXT")

    assert result["records"] == ["15169 | US | arin"]


def test_query_dns_non_txt_uses_to_text():
    rdata = MagicMock()
    rdata.to_text.return_value = "192.0.2.1"

    with patch("dns.resolver.Resolver") as MockResolver:
        MockResolver.return_value.resolve.return_value = [rdata]
        result = query_dns("example.com", "A")

    assert result["records"] == ["192.0.2.1"]


# ---------------------------------------------------------------------------
# Tests - failures
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "exc, error_type",
    [
        (dns.resolver.NXDOMAIN(), "NXDOMAIN"),
        (dns.resolver.NoAnswer(), "NO_ANSWER"),
        (dns.resolver.NoNameservers(), "DNS_ERROR"),
        (dns.resolver.Timeout(), "TIMEOUT"),
        (dns.exception.DNSException("boom"), "DNS_ERROR"),
    ],
)
def test_query_dns_maps_failures(exc, error_type):
    with patch("dns.resolver.Resolver") as MockResolver:
        MockResolver.return_value.resolve.side_effect = exc
        result = query_dns("example.com", "TXT")

    assert result["success"] is False
    assert result["records"] == []
    assert result["error_type"] == error_type
    assert result["error_message"]


# ---------------------------------------------------------------------------
# Tests - settings
# ---------------------------------------------------------------------------


def test_create_resolver_applies_settings():
    resolver = create_resolver(ResolverSettings(["9.9.9.9"], timeout_seconds=3, retries=2))

    assert resolver.nameservers == ["9.9.9.9"]
    assert resolver.timeout == 3.0
    assert resolver.lifetime == 6.0


def test_create_resolver_defaults_nameservers():
    resolver = create_resolver(ResolverSettings())

    assert resolver.nameservers == ["8.8.8.8", "1.1.1.1"]


def test_settings_from_config_splits_nameservers():
    settings = ResolverSettings.from_config(
        {"DNS_NAMESERVERS": " 9.9.9.9, 149.112.112.112 ,", "ORG_LOOKUP_TIMEOUT": "2", "DNS_RETRIES": 3}
    )

    assert settings.nameservers == ["9.9.9.9", "149.112.112.112"]
    assert settings.timeout_seconds == 2.0
    assert settings.retries == 3


def test_settings_from_config_defaults():
    settings = ResolverSettings.from_config({})

    assert settings.nameservers == []
    assert settings.timeout_seconds == 5.0
    assert settings.retries == 2
