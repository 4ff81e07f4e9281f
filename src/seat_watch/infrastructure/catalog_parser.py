from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from typing import NamedTuple
from xml.parsers import expat

from seat_watch.domain.entities import RouteDescriptor, StationDescriptor
from seat_watch.domain.exceptions import ParseError

logger = logging.getLogger(__name__)

_BOM = "\ufeff"
_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>", re.IGNORECASE)
_DOCTYPE = re.compile(r"^\s*<!DOCTYPE[^\[>]*(?:\[.*?\])?\s*>", re.IGNORECASE | re.DOTALL)

# The pulldown endpoint sometimes answers with bare sibling elements and no
# root; such fragments are re-parsed inside a synthetic wrapper.
_WRAPPER_TAG = "catalog"
_JUNK_AFTER_ROOT = expat.errors.codes[expat.errors.XML_ERROR_JUNK_AFTER_DOC_ELEMENT]


class CatalogRecord(NamedTuple):
    id: str
    name: str
    flag: str | None


def parse_catalog(xml_text: str) -> list[CatalogRecord]:
    """Stream a pulldown XML document into ordered (id, name, flag) records.

    Each <id> starts a new record and flushes the previous one; the last record
    is flushed at end of document. Records lacking a name are dropped.
    Raises ParseError on malformed XML.
    """
    body = _XML_DECLARATION.sub("", xml_text.lstrip(_BOM), count=1)
    doctype = _DOCTYPE.match(body)
    prolog = doctype.group(0) if doctype else ""
    content = body[len(prolog):]
    if not content.strip():
        return []

    try:
        try:
            elements = _end_elements(prolog + content)
        except ET.ParseError as err:
            if err.code != _JUNK_AFTER_ROOT:
                raise
            elements = _end_elements(f"{prolog}<{_WRAPPER_TAG}>{content}</{_WRAPPER_TAG}>")
    except ET.ParseError as err:
        raise ParseError(f"XML error: {err}") from err

    records: list[CatalogRecord] = []
    current_id: str | None = None
    current_name: str | None = None
    current_flag: str | None = None

    def flush() -> None:
        if current_id is not None and current_name is not None:
            records.append(CatalogRecord(current_id, current_name, current_flag))

    for tag, text in elements:
        if tag == "id":
            flush()
            current_id, current_name, current_flag = text, None, None
        elif tag == "name":
            current_name = text
        elif tag == "switchChangeableFlg":
            current_flag = text

    flush()
    logger.debug("Parsed %d catalog records", len(records))
    return records


def _end_elements(document: str) -> list[tuple[str, str]]:
    """Return (tag, stripped text) for every element, in end-event order."""
    parser = ET.XMLPullParser(events=("end",))
    parser.feed(document)
    parser.close()
    return [(elem.tag, (elem.text or "").strip()) for _, elem in parser.read_events()]


def parse_routes(xml_text: str) -> list[RouteDescriptor]:
    return [
        RouteDescriptor(id=r.id, name=r.name, switch_changeable_flg=r.flag)
        for r in parse_catalog(xml_text)
    ]


def parse_stations(xml_text: str) -> list[StationDescriptor]:
    return [StationDescriptor(id=r.id, name=r.name) for r in parse_catalog(xml_text)]
