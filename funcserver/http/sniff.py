"""Content-Type detection by inspecting leading body bytes.

Implements the MIME sniffing algorithm described at
https://mimesniff.spec.whatwg.org/ in the same signature order that
standard HTTP servers use when a handler writes a body without setting a
Content-Type. At most the first SNIFF_LEN bytes are considered.
"""

from __future__ import annotations

SNIFF_LEN = 512

DEFAULT_TYPE = "application/octet-stream"
TEXT_TYPE = "text/plain; charset=utf-8"

_WHITESPACE = frozenset(b"\t\n\x0c\r ")
_BINARY = frozenset(list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20)))


def _first_non_ws(data: bytes) -> int:
    i = 0
    while i < len(data) and data[i] in _WHITESPACE:
        i += 1
    return i


class _Signature:
    def match(self, data: bytes, first_non_ws: int) -> str:
        raise NotImplementedError


class _ExactSig(_Signature):
    def __init__(self, sig: bytes, content_type: str):
        self.sig = sig
        self.content_type = content_type

    def match(self, data: bytes, first_non_ws: int) -> str:
        if data.startswith(self.sig):
            return self.content_type
        return ""


class _MaskedSig(_Signature):
    def __init__(self, mask: bytes, pattern: bytes, content_type: str, skip_ws: bool = False):
        if len(mask) != len(pattern):
            raise ValueError("mask and pattern lengths differ")
        self.mask = mask
        self.pattern = pattern
        self.content_type = content_type
        self.skip_ws = skip_ws

    def match(self, data: bytes, first_non_ws: int) -> str:
        if self.skip_ws:
            data = data[first_non_ws:]
        if len(data) < len(self.pattern):
            return ""
        for i, pb in enumerate(self.pattern):
            if data[i] & self.mask[i] != pb:
                return ""
        return self.content_type


class _HTMLSig(_Signature):
    """Case-insensitive tag prefix followed by a tag-terminating byte."""

    def __init__(self, tag: bytes):
        self.tag = tag

    def match(self, data: bytes, first_non_ws: int) -> str:
        data = data[first_non_ws:]
        if len(data) < len(self.tag) + 1:
            return ""
        for i, b in enumerate(self.tag):
            db = data[i]
            if ord("A") <= b <= ord("Z"):
                db &= 0xDF
            if b != db:
                return ""
        if data[len(self.tag)] not in (ord(" "), ord(">")):
            return ""
        return "text/html; charset=utf-8"


class _MP4Sig(_Signature):
    def match(self, data: bytes, first_non_ws: int) -> str:
        # https://mimesniff.spec.whatwg.org/#signature-for-mp4
        if len(data) < 12:
            return ""
        box_size = int.from_bytes(data[:4], "big")
        if len(data) < box_size or box_size % 4 != 0:
            return ""
        if data[4:8] != b"ftyp":
            return ""
        for st in range(8, box_size, 4):
            if st == 12:
                # Bytes 12-15 hold the major brand's minor version
                continue
            if data[st:st + 3] == b"mp4":
                return "video/mp4"
        return ""


class _TextSig(_Signature):
    def match(self, data: bytes, first_non_ws: int) -> str:
        for b in data[first_non_ws:]:
            if b in _BINARY:
                return ""
        return TEXT_TYPE


_HTML_TAGS = (
    b"<!DOCTYPE HTML", b"<HTML", b"<HEAD", b"<SCRIPT", b"<IFRAME", b"<H1", b"<DIV",
    b"<FONT", b"<TABLE", b"<A", b"<STYLE", b"<TITLE", b"<B", b"<BODY", b"<BR", b"<P",
    b"<!--",
)

_SIGNATURES: list[_Signature] = [
    *(_HTMLSig(tag) for tag in _HTML_TAGS),
    _MaskedSig(b"\xFF\xFF\xFF\xFF\xFF", b"<?xml", "text/xml; charset=utf-8", skip_ws=True),
    _ExactSig(b"%PDF-", "application/pdf"),
    _ExactSig(b"%!PS-Adobe-", "application/postscript"),

    # UTF BOMs
    _MaskedSig(b"\xFF\xFF\x00\x00", b"\xFE\xFF\x00\x00", "text/plain; charset=utf-16be"),
    _MaskedSig(b"\xFF\xFF\x00\x00", b"\xFF\xFE\x00\x00", "text/plain; charset=utf-16le"),
    _MaskedSig(b"\xFF\xFF\xFF\x00", b"\xEF\xBB\xBF\x00", "text/plain; charset=utf-8"),

    # Images
    _ExactSig(b"\x00\x00\x01\x00", "image/x-icon"),
    _ExactSig(b"\x00\x00\x02\x00", "image/x-icon"),
    _ExactSig(b"BM", "image/bmp"),
    _ExactSig(b"GIF87a", "image/gif"),
    _ExactSig(b"GIF89a", "image/gif"),
    _MaskedSig(
        b"\xFF\xFF\xFF\xFF\x00\x00\x00\x00\xFF\xFF\xFF\xFF\xFF\xFF",
        b"RIFF\x00\x00\x00\x00WEBPVP",
        "image/webp",
    ),
    _ExactSig(b"\x89PNG\x0D\x0A\x1A\x0A", "image/png"),
    _ExactSig(b"\xFF\xD8\xFF", "image/jpeg"),

    # Audio and video
    _MaskedSig(
        b"\xFF\xFF\xFF\xFF\x00\x00\x00\x00\xFF\xFF\xFF\xFF",
        b"FORM\x00\x00\x00\x00AIFF",
        "audio/aiff",
    ),
    _MaskedSig(b"\xFF\xFF\xFF", b"ID3", "audio/mpeg"),
    _MaskedSig(b"\xFF\xFF\xFF\xFF\xFF", b"OggS\x00", "application/ogg"),
    _MaskedSig(b"\xFF\xFF\xFF\xFF\xFF\xFF\xFF\xFF", b"MThd\x00\x00\x00\x06", "audio/midi"),
    _MaskedSig(
        b"\xFF\xFF\xFF\xFF\x00\x00\x00\x00\xFF\xFF\xFF\xFF",
        b"RIFF\x00\x00\x00\x00AVI ",
        "video/avi",
    ),
    _MaskedSig(
        b"\xFF\xFF\xFF\xFF\x00\x00\x00\x00\xFF\xFF\xFF\xFF",
        b"RIFF\x00\x00\x00\x00WAVE",
        "audio/wave",
    ),
    _MP4Sig(),
    _ExactSig(b"\x1A\x45\xDF\xA3", "video/webm"),

    # Fonts
    _MaskedSig(b"\x00" * 34 + b"\xFF\xFF", b"\x00" * 34 + b"LP", "application/vnd.ms-fontobject"),
    _ExactSig(b"\x00\x01\x00\x00", "font/ttf"),
    _ExactSig(b"OTTO", "font/otf"),
    _ExactSig(b"ttcf", "font/collection"),
    _ExactSig(b"wOFF", "font/woff"),
    _ExactSig(b"wOF2", "font/woff2"),

    # Archives
    _ExactSig(b"\x1F\x8B\x08", "application/x-gzip"),
    _ExactSig(b"PK\x03\x04", "application/zip"),
    _ExactSig(b"Rar!\x1A\x07\x00", "application/x-rar-compressed"),
    _ExactSig(b"Rar!\x1A\x07\x01\x00", "application/x-rar-compressed"),
    _ExactSig(b"\x00\x61\x73\x6D", "application/wasm"),

    _TextSig(),  # should be last
]


def detect_content_type(data: bytes) -> str:
    """Return a Content-Type for data, always a valid MIME type.

    Falls back to "application/octet-stream" when nothing more specific
    matches.
    """
    data = bytes(data[:SNIFF_LEN])
    first_non_ws = _first_non_ws(data)
    for sig in _SIGNATURES:
        content_type = sig.match(data, first_non_ws)
        if content_type:
            return content_type
    return DEFAULT_TYPE
