"""Best-effort text recovery for legacy binary Word (.doc) files.

There is no container parser here. The file is treated as an opaque byte
stream and scanned for runs that look like human text:

* little-endian UTF-16 runs, tried at both byte alignments, since Word
  stores Unicode text as UTF-16 but the piece table offset is unknown;
* plain ASCII runs, which cover 8-bit text pieces.

The recovered segments are then filtered to drop compiled field codes,
OLE stream names, font tables and similar binary noise. The result is lossy
and may contain garbage, but CJK text in particular survives well because
ideographs are rare in binary noise.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from pathlib import Path
from typing import Iterator, List, Sequence

LOGGER = logging.getLogger(__name__)

MIN_UTF16_RUN = 2
MIN_ASCII_RUN = 4
MIN_MISREAD_RUN = 4
MAX_UPPER_RATIO = 0.5
MAX_LATIN_SEGMENT = 200

NOISE_TOKENS = (
    "Root Entry",
    "DocumentSummaryInformation",
    "SummaryInformation",
    "WordDocument",
    "CompObj",
    "ObjectPool",
    "1Table",
    "0Table",
    "Normal.dot",
    "Normal.dotm",
    "Microsoft Word",
    "Microsoft Office Word",
    "MSWordDoc",
    "Word.Document.8",
    "Times New Roman",
    "Wingdings",
    "Cambria Math",
    "Calibri",
    "Arial",
    "Courier New",
    "SimSun",
    "Default Paragraph Font",
    "Table Normal",
    "宋体",
    "黑体",
    "微软雅黑",
    "bjbj",
)

FIELD_INSTRUCTIONS = (
    "HYPERLINK",
    "PAGEREF",
    "PAGE",
    "NUMPAGES",
    "TOC",
    "REF",
    "STYLEREF",
    "SEQ",
    "DATE",
    "TIME",
    "MERGEFIELD",
    "DOCPROPERTY",
    "FORMTEXT",
    "INCLUDEPICTURE",
    "EMBED",
)

# Tokens may touch CJK text or digits but not Latin letters ("Arial" vs "material").
_NOISE_RE = re.compile(
    r"(?<![A-Za-z])(?:%s)(?![A-Za-z])"
    % "|".join(re.escape(token) for token in sorted(NOISE_TOKENS, key=len, reverse=True)),
    re.IGNORECASE,
)
_MERGEFORMAT_RE = re.compile(r"\\?\*?\s*MERGEFORMAT", re.IGNORECASE)
_FIELD_CODE_RE = re.compile(r"\b(?:%s)(?=[\s\\\"]|$)" % "|".join(FIELD_INSTRUCTIONS))
_ASCII_RUN_RE = re.compile(rb"[\x20-\x7e\r\n\t]{%d,}" % MIN_ASCII_RUN)


def is_cjk(char: str) -> bool:
    return 0x3400 <= ord(char) <= 0x9FFF


def _is_printable(char: str) -> bool:
    code = ord(char)
    if unicodedata.category(char) == "Cc":
        return False
    return (
        code < 0x80
        or is_cjk(char)
        or 0x3000 <= code <= 0x303F
        or 0xFF00 <= code <= 0xFFEF
        or char.isspace()
    )


def _is_ascii_shadow(run: str) -> bool:
    """A run decoded one byte off from ASCII UTF-16 text has all low bytes zero."""
    return all(ord(char) & 0xFF == 0 for char in run)


def _is_ascii_pair(char: str) -> bool:
    code = ord(char)
    return 0x20 <= code & 0xFF <= 0x7E and 0x20 <= code >> 8 <= 0x7E


def _is_misread_ascii(run: str, latin_runs: Sequence[str]) -> bool:
    """Plain ASCII bytes read as UTF-16 turn into pseudo-ideographs.

    Many real ideographs are also made of two printable ASCII bytes, so a run
    only counts as misread when its bytes reappear inside an ASCII run that
    survives filtering. The first and last code unit may straddle the edge of
    the ASCII bytes, so only the interior is compared.
    """
    inner = run[1:-1]
    if len(inner) < MIN_MISREAD_RUN or not all(map(_is_ascii_pair, inner)):
        return False
    raw = inner.encode("utf-16-le").decode("ascii")
    return any(raw in latin for latin in latin_runs)


def scan_utf16(data: bytes, offset: int) -> Iterator[str]:
    """Yield printable UTF-16LE runs starting at the given byte alignment."""
    usable = (len(data) - offset) // 2 * 2
    decoded = data[offset : offset + usable].decode("utf-16-le", errors="surrogatepass")
    run: List[str] = []
    for char in decoded:
        if _is_printable(char):
            run.append(char)
            continue
        if len(run) >= MIN_UTF16_RUN:
            yield "".join(run)
        run = []
    if len(run) >= MIN_UTF16_RUN:
        yield "".join(run)


def scan_ascii(data: bytes) -> Iterator[str]:
    for match in _ASCII_RUN_RE.finditer(data):
        yield match.group().decode("ascii")


def collect_segments(data: bytes) -> List[str]:
    """Raw candidate segments: both UTF-16 alignments, then ASCII runs."""
    ascii_runs = list(scan_ascii(data))
    latin_runs = [run for run in ascii_runs if filter_segment(run)]
    segments: List[str] = []
    for offset in (0, 1):
        segments.extend(
            run
            for run in scan_utf16(data, offset)
            if not (_is_ascii_shadow(run) or _is_misread_ascii(run, latin_runs))
        )
    segments.extend(ascii_runs)
    return segments


def _upper_ratio(segment: str) -> float:
    letters = [char for char in segment if char.isalpha() and not is_cjk(char)]
    if not letters:
        return 0.0
    return sum(1 for char in letters if char.isupper()) / len(letters)


def _strip_field_code(segment: str) -> str:
    """Keep only the text in front of the first field instruction."""
    cut = len(segment)
    for pattern in (_MERGEFORMAT_RE, _FIELD_CODE_RE):
        match = pattern.search(segment)
        if match is not None:
            cut = min(cut, match.start())
    return segment[:cut].strip()


def filter_segment(segment: str) -> str | None:
    """Return the cleaned segment, or ``None`` when it looks like noise."""
    segment = _strip_field_code(segment.strip())
    if not segment:
        return None

    if _NOISE_RE.search(segment):
        if not any(map(is_cjk, segment)):
            return None
        segment = " ".join(_NOISE_RE.sub(" ", segment).split())
        if not segment:
            return None

    if any(map(is_cjk, segment)):
        # Ideographs almost never show up in binary noise.
        return segment
    if _upper_ratio(segment) < MAX_UPPER_RATIO and len(segment) <= MAX_LATIN_SEGMENT:
        return segment
    return None


def extract_legacy_text(data: bytes) -> str:
    """Recover readable text from the raw bytes of a legacy .doc file."""
    segments = collect_segments(data)
    kept = [cleaned for cleaned in map(filter_segment, segments) if cleaned]
    if kept:
        return " ".join(kept)

    # Noisy CJK-bearing text beats an empty document.
    fallback = []
    for segment in segments:
        if any(ord(char) > 0x7F for char in segment):
            scrubbed = " ".join(_NOISE_RE.sub(" ", _MERGEFORMAT_RE.sub(" ", segment)).split())
            if scrubbed:
                fallback.append(scrubbed)
    return " ".join(fallback)


def read_legacy_doc(path: Path) -> str:
    try:
        data = path.read_bytes()
    except OSError as exc:
        LOGGER.warning("Failed to read %s: %s", path, exc)
        return ""
    return extract_legacy_text(data)
