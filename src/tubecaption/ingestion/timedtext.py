"""Timed-text XML decoding into plain transcript text.

The decoder is tolerant by construction: it scans for ``<text>`` elements
with a regular expression instead of building a DOM, so truncated or
malformed documents yield whatever cues could be matched and never raise.
"""

import html
import re

from tubecaption.models import TranscriptSegment

_CUE = re.compile(r"<text\b([^>]*)>(.*?)</text\s*>", re.DOTALL | re.IGNORECASE)
_ATTR = re.compile(r"""([\w:-]+)\s*=\s*(?:"([^"]*)"|'([^']*)')""")
# Tags must open with a letter so decoded text like "<3>" is kept.
_TAG = re.compile(r"</?[A-Za-z][^<>]*>")
_WHITESPACE = re.compile(r"\s+")
_NUMERIC_REF = re.compile(r"&#(?:\d+|[xX][0-9a-fA-F]+);")


def parse_timedtext(xml: str) -> list[TranscriptSegment]:
    """Extract every non-empty cue, in document order."""
    segments = []
    for match in _CUE.finditer(xml or ""):
        text = clean_cue(match.group(2))
        if not text:
            continue
        attrs = _parse_attrs(match.group(1))
        segments.append(TranscriptSegment(
            start=_to_seconds(attrs.get("start")),
            duration=_to_seconds(attrs.get("dur")),
            text=text,
        ))
    return segments


def decode_captions(xml: str, separator: str = "\n") -> str:
    """Flatten a timed-text document into one transcript string."""
    return separator.join(seg.text for seg in parse_timedtext(xml))


def clean_cue(raw: str) -> str:
    """Strip markup and entities from one cue's inner content.

    Timed text often double-escapes character references (``&amp;#39;``),
    so numeric references left after the first pass are decoded again.
    Markup revealed by decoding is removed afterwards.
    """
    text = _TAG.sub("", raw)
    text = html.unescape(text)
    text = _NUMERIC_REF.sub(lambda m: html.unescape(m.group(0)), text)
    text = _TAG.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def _parse_attrs(raw: str) -> dict[str, str]:
    return {m.group(1): m.group(2) if m.group(2) is not None else m.group(3) for m in _ATTR.finditer(raw)}


def _to_seconds(value: str | None) -> float:
    try:
        return float(value) if value else 0.0
    except ValueError:
        return 0.0
