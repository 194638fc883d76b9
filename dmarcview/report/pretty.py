"""Indented re-serialisation of report XML for the raw-source appendix."""

from __future__ import annotations

import xml.etree.ElementTree as ET


def format_xml(data: bytes | str, indent: int = 2) -> str:
    """Return *data* re-serialised with *indent* spaces per nesting level.

    Whitespace-only text between elements is replaced by the indentation,
    so formatting already formatted output returns it unchanged.

    Raises:
        xml.etree.ElementTree.ParseError: *data* is not well-formed XML.
    """
    root = ET.fromstring(data)
    ET.indent(root, space=" " * indent)
    return ET.tostring(root, encoding="unicode")
