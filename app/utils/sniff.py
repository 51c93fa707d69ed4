"""
Content-type sniffing from the leading bytes of a payload.

Follows the WHATWG MIME Sniffing Standard (https://mimesniff.spec.whatwg.org/):
only the first 512 bytes are considered, signatures are checked in a fixed
order and the fallback is text/plain or application/octet-stream depending on
whether binary bytes are present. Client-declared Content-Type headers play no part.
"""
import struct

SNIFF_LEN = 512

_WHITESPACE = b"\t\n\x0c\r "
_TAG_TERMINATORS = b" >"

# Bytes that never appear in text (WHATWG "binary data byte")
_BINARY_BYTES = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)

_HTML_TAGS = (
    b"<!DOCTYPE HTML", b"<HTML", b"<HEAD", b"<SCRIPT", b"<IFRAME", b"<H1",
    b"<DIV", b"<FONT", b"<TABLE", b"<A", b"<STYLE", b"<TITLE", b"<B",
    b"<BODY", b"<BR", b"<P", b"<!--",
)


def _first_non_ws(data: bytes) -> int:
    i = 0
    while i < len(data) and data[i] in _WHITESPACE:
        i += 1
    return i


def _exact(sig: bytes, ctype: str):
    def match(data: bytes, first_non_ws: int) -> str | None:
        return ctype if data.startswith(sig) else None
    return match


def _masked(mask: bytes, pattern: bytes, ctype: str, skip_ws: bool = False):
    def match(data: bytes, first_non_ws: int) -> str | None:
        if skip_ws:
            data = data[first_non_ws:]
        if len(data) < len(pattern):
            return None
        for i, p in enumerate(pattern):
            if data[i] & mask[i] != p:
                return None
        return ctype
    return match


def _html(tag: bytes):
    def match(data: bytes, first_non_ws: int) -> str | None:
        data = data[first_non_ws:]
        if len(data) < len(tag) + 1:
            return None
        for i, b in enumerate(tag):
            db = data[i]
            if ord("A") <= b <= ord("Z"):
                db &= 0xDF  # upper-case
            if b != db:
                return None
        if data[len(tag)] not in _TAG_TERMINATORS:
            return None
        return "text/html; charset=utf-8"
    return match


def _mp4(data: bytes, first_non_ws: int) -> str | None:
    # https://mimesniff.spec.whatwg.org/#signature-for-mp4
    if len(data) < 12:
        return None
    (box_size,) = struct.unpack(">I", data[:4])
    if len(data) < box_size or box_size % 4 != 0:
        return None
    if data[4:8] != b"ftyp":
        return None
    for st in range(8, box_size, 4):
        if st == 12:
            # minor version number
            continue
        if data[st:st + 3] == b"mp4":
            return "video/mp4"
    return None


def _text(data: bytes, first_non_ws: int) -> str | None:
    for b in data[first_non_ws:]:
        if b in _BINARY_BYTES:
            return None
    return "text/plain; charset=utf-8"


_SIGNATURES = [
    *(_html(tag) for tag in _HTML_TAGS),
    _masked(b"\xff\xff\xff\xff\xff", b"<?xml", "text/xml; charset=utf-8", skip_ws=True),
    _exact(b"%PDF-", "application/pdf"),
    _exact(b"%!PS-Adobe-", "application/postscript"),
    # UTF BOMs
    _masked(b"\xff\xff\x00\x00", b"\xfe\xff\x00\x00", "text/plain; charset=utf-16be"),
    _masked(b"\xff\xff\x00\x00", b"\xff\xfe\x00\x00", "text/plain; charset=utf-16le"),
    _masked(b"\xff\xff\xff\x00", b"\xef\xbb\xbf\x00", "text/plain; charset=utf-8"),
    # Images
    _exact(b"\x00\x00\x01\x00", "image/x-icon"),
    _exact(b"\x00\x00\x02\x00", "image/x-icon"),
    _exact(b"BM", "image/bmp"),
    _exact(b"GIF87a", "image/gif"),
    _exact(b"GIF89a", "image/gif"),
    _masked(
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff\xff\xff",
        b"RIFF\x00\x00\x00\x00WEBPVP",
        "image/webp",
    ),
    _exact(b"\x89PNG\r\n\x1a\n", "image/png"),
    _exact(b"\xff\xd8\xff", "image/jpeg"),
    # Audio and video
    _masked(
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff",
        b"FORM\x00\x00\x00\x00AIFF",
        "audio/aiff",
    ),
    _masked(b"\xff\xff\xff", b"ID3", "audio/mpeg"),
    _masked(b"\xff\xff\xff\xff\xff", b"OggS\x00", "application/ogg"),
    _masked(b"\xff\xff\xff\xff\xff\xff\xff\xff", b"MThd\x00\x00\x00\x06", "audio/midi"),
    _masked(
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff",
        b"RIFF\x00\x00\x00\x00AVI ",
        "video/avi",
    ),
    _masked(
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff",
        b"RIFF\x00\x00\x00\x00WAVE",
        "audio/wave",
    ),
    _mp4,
    _exact(b"\x1a\x45\xdf\xa3", "video/webm"),
    # Fonts
    _exact(b"\x00\x01\x00\x00", "font/ttf"),
    _exact(b"OTTO", "font/otf"),
    _exact(b"ttcf", "font/collection"),
    _exact(b"wOFF", "font/woff"),
    _exact(b"wOF2", "font/woff2"),
    # Archives
    _exact(b"\x1f\x8b\x08", "application/x-gzip"),
    _exact(b"PK\x03\x04", "application/zip"),
    _exact(b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    _exact(b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    _exact(b"\x00asm", "application/wasm"),
    _text,
]


def detect_content_type(data: bytes) -> str:
    """Return the sniffed MIME type of data; always a valid type string."""
    data = data[:SNIFF_LEN]
    first_non_ws = _first_non_ws(data)
    for match in _SIGNATURES:
        ctype = match(data, first_non_ws)
        if ctype:
            return ctype
    return "application/octet-stream"
