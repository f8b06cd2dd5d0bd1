"""Search-term highlighting for display layers."""

import re
from typing import Optional


def highlight_spans(text: Optional[str], term: Optional[str]) -> list[tuple[str, bool]]:
    """
    Split text into (segment, is_match) pairs around every case-insensitive
    occurrence of term. The term is matched literally, never as a regex.

    highlight_spans("Domestic assistance", "ASS")
      -> [("Domestic ", False), ("ass", True), ("istance", False)]
    """
    if not text:
        return []
    if not term:
        return [(text, False)]

    pattern = re.compile(re.escape(term), re.IGNORECASE)
    spans: list[tuple[str, bool]] = []
    last = 0
    for match in pattern.finditer(text):
        if match.start() > last:
            spans.append((text[last : match.start()], False))
        spans.append((match.group(0), True))
        last = match.end()
    if last < len(text):
        spans.append((text[last:], False))
    return spans
