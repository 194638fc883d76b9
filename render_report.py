"""
Command-line renderer for DMARC aggregate reports.

Reads one report (plain XML, or XML inside a .gz or .zip archive) and
prints the rendered summary followed by the pretty-printed XML.

USAGE
=====

  # Plain-text rendering to the terminal
  python render_report.py google.com!example.com!1700000000!1700086400.zip

  # HTML fragment instead of plain text
  python render_report.py report.xml --html > report.html

  # Show begin/end in a local zone and annotate source IPs via DNS
  python render_report.py report.xml.gz --timezone Europe/Amsterdam --lookup cymru

Settings not given on the command line come from the same environment
variables the web application reads (DISPLAY_TIMEZONE, ORG_LOOKUP, ...).

EXIT CODES
==========

  0 - Report rendered
  1 - Report missing, unreadable or not well-formed XML
"""

from __future__ import annotations

import argparse
import logging
import sys

# ---------------------------------------------------------------------------
# Argument parsing (done before package import so --help stays fast)
# ---------------------------------------------------------------------------


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a DMARC aggregate report as readable text.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("report", metavar="FILE", help="Report file (.xml, .gz or .zip).")
    parser.add_argument(
        "--html",
        action="store_true",
        default=False,
        help="Print an HTML fragment instead of plain text.",
    )
    parser.add_argument(
        "--timezone",
        metavar="ZONE",
        default=None,
        help="IANA time zone for the report's begin/end timestamps.",
    )
    parser.add_argument(
        "--lookup",
        choices=("none", "ip-api", "cymru"),
        default=None,
        help="Backend used to name the organization owning each source IP.",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=72,
        help="Width of separator lines in plain-text output.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Enable DEBUG-level logging output.",
    )
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> logging.Logger:
    """Configure root logger; stdout carries the rendering, so log to stderr.

    Args:
        verbose: If True, set level to DEBUG; otherwise WARNING.

    Returns:
        A logger instance named after this module.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    return logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """Render the report named on the command line.

    Returns:
        Integer exit code: 0 for success, 1 for a decode failure.
    """
    args = _parse_args(argv)
    logger = _configure_logging(args.verbose)

    from dmarcview.config import Config
    from dmarcview.lookup.organization import build_organization_lookup
    from dmarcview.report.decoder import DecodeContext, decode_bytes
    from dmarcview.report.errors import DecodeError
    from dmarcview.report.render import to_html, to_plain_text
    from dmarcview.report.source import open_report

    config = {name: getattr(Config, name) for name in dir(Config) if name.isupper()}
    if args.timezone:
        config["DISPLAY_TIMEZONE"] = args.timezone
    if args.lookup:
        config["ORG_LOOKUP"] = args.lookup

    context = DecodeContext.from_config(config, org_lookup=build_organization_lookup(config))

    try:
        document = decode_bytes(open_report(args.report), context)
    except DecodeError as exc:
        logger.warning("Cannot render %s: %s", args.report, exc)
        print(f"error: {args.report}: {exc}", file=sys.stderr)
        return 1

    if args.html:
        print(to_html(document))
    else:
        print(to_plain_text(document, width=args.width))
    return 0


if __name__ == "__main__":
    sys.exit(main())
