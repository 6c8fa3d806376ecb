"""
Source Parser

Splits raw intake text into classified source records, one per non-empty line.
"""

import re
from typing import List

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from ..common.schemas import SourceItem, SourceType


_LINE_BREAK_RE = re.compile(r"\r?\n")
_URL_PREFIX_RE = re.compile(r"^https?://")

TRANSCRIPT_MARKERS = ("transcript", "speaker:")
DOCUMENT_MARKERS = (".pdf", "doc", "report", "memo")
TRANSCRIPT_WORD_THRESHOLD = 22

_http_url_adapter = TypeAdapter(AnyHttpUrl)


def classify(raw: str) -> SourceType:
    """
    Classify one intake line. First match wins:

    1. http(s) URL prefix → url
    2. transcript marker or more than 22 words → transcript
    3. document marker (file extension, report/memo keyword) → document
    4. otherwise → note
    """
    lower = raw.lower()

    if _URL_PREFIX_RE.match(raw):
        return SourceType.URL

    if any(marker in lower for marker in TRANSCRIPT_MARKERS):
        return SourceType.TRANSCRIPT
    if len(lower.split(" ")) > TRANSCRIPT_WORD_THRESHOLD:
        return SourceType.TRANSCRIPT

    if any(marker in lower for marker in DOCUMENT_MARKERS):
        return SourceType.DOCUMENT

    return SourceType.NOTE


def is_valid_url(raw: str) -> bool:
    """
    Check URL syntax with pydantic's WHATWG-style parser: http(s) scheme,
    a well-formed host (IPv4/IPv6 literals included) and a valid port.
    """
    try:
        _http_url_adapter.validate_python(raw)
    except ValidationError:
        return False
    return True


def parse_sources(text: str) -> List[SourceItem]:
    """
    Parse raw multiline intake into SourceItems.

    Lines are trimmed and blank lines dropped; ids are assigned in order of
    appearance (s-1, s-2, ...).
    """
    lines = [line.strip() for line in _LINE_BREAK_RE.split(text)]
    lines = [line for line in lines if line]

    sources = []
    for index, raw in enumerate(lines):
        source_type = classify(raw)
        valid = is_valid_url(raw) if source_type == SourceType.URL else True
        sources.append(SourceItem(id=f"s-{index + 1}", raw=raw, type=source_type, valid=valid))

    return sources


def invalid_urls(sources: List[SourceItem]) -> List[SourceItem]:
    """URL sources that failed syntax validation"""
    return [s for s in sources if s.type == SourceType.URL and not s.valid]
