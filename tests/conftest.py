"""
Shared pytest fixtures for the DMARC report viewer test suite.

No fixture touches the network: organization lookups are disabled or
replaced by stubs, and timestamps are rendered in UTC so expected
strings do not depend on the machine's locale or zone.
"""

from __future__ import annotations

import pytest

from dmarcview import create_app
from dmarcview.report.decoder import DecodeContext


# ---------------------------------------------------------------------------
# Test configuration
# ---------------------------------------------------------------------------


class TestConfig:
    """Minimal Flask config for automated testing."""

    TESTING = True
    WTF_CSRF_ENABLED = False
    SECRET_KEY = "test-secret-key-not-for-production"
    MAX_CONTENT_LENGTH = 4 * 1024 * 1024
    DISPLAY_TIMEZONE = "UTC"
    DATE_FORMAT = "%Y-%m-%d %H:%M"
    WARNING_COLOR = "#ff0000"
    SEPARATOR_COLOR = "#cccccc"
    SEPARATOR_STROKE = 2.0
    SMALL_TEXT_FACTOR = 0.8
    ORG_LOOKUP = "none"
    ORG_LOOKUP_TIMEOUT = 1.0
    DNS_NAMESERVERS = ""
    DNS_RETRIES = 1


# ---------------------------------------------------------------------------
# Sample reports
# ---------------------------------------------------------------------------

SAMPLE_REPORT = b"""\
<?xml version="1.0" encoding="UTF-8"?>
<feedback>
  <report_metadata>
    <org_name>google.com</org_name>
    <report_id>override-test</report_id>
    <date_range>
      <begin>1700000000</begin>
      <end>1700086400</end>
    </date_range>
  </report_metadata>
  <policy_published>
    <domain>example.com</domain>
    <adkim>s</adkim>
    <aspf>r</aspf>
    <p>reject</p>
    <sp>quarantine</sp>
    <pct>100</pct>
  </policy_published>
  <record>
    <row>
      <source_ip>198.51.100.1</source_ip>
      <count>5</count>
      <policy_evaluated>
        <disposition>none</disposition>
        <dkim>pass</dkim>
        <spf>fail</spf>
        <reason>
          <type>forwarded</type>
          <comment>Forwarded via mailing gateway</comment>
        </reason>
      </policy_evaluated>
    </row>
    <identifiers>
      <header_from>example.com</header_from>
      <envelope_from>bounce.example.com</envelope_from>
      <envelope_to>dest.org</envelope_to>
    </identifiers>
    <auth_results>
      <dkim>
        <domain>example.com</domain>
        <selector>sel1</selector>
        <result>pass</result>
      </dkim>
      <dkim>
        <domain>thirdparty.com</domain>
        <selector>s2048</selector>
        <result>fail</result>
      </dkim>
      <spf>
        <domain>bounce.example.com</domain>
        <scope>mfrom</scope>
        <result>softfail</result>
      </spf>
    </auth_results>
  </record>
  <record>
    <row>
      <source_ip>203.0.113.5</source_ip>
      <count>3</count>
      <policy_evaluated>
        <disposition>quarantine</disposition>
        <dkim>fail</dkim>
        <spf>fail</spf>
      </policy_evaluated>
    </row>
    <identifiers>
      <header_from>example.com</header_from>
    </identifiers>
    <auth_results>
      <spf>
        <domain>spoofed.com</domain>
        <result>fail</result>
      </spf>
    </auth_results>
  </record>
</feedback>
"""


# ---------------------------------------------------------------------------
# Core fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="function")
def app():
    """Create a Flask application instance configured for testing."""
    flask_app = create_app(TestConfig)
    with flask_app.app_context():
        yield flask_app


@pytest.fixture(scope="function")
def client(app):
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture
def decode_context() -> DecodeContext:
    """A deterministic decode context: UTC, no organization lookup."""
    return DecodeContext(
        timezone="UTC",
        date_format="%Y-%m-%d %H:%M",
        warning_color="#ff0000",
        separator_color="#cccccc",
        separator_stroke=2.0,
        small_size=0.8,
        org_lookup=None,
    )


@pytest.fixture
def sample_report() -> bytes:
    return SAMPLE_REPORT
