import struct

from app.utils.sniff import detect_content_type
from tests.conftest import JPEG_BYTES, MP4_BYTES, PDF_BYTES, PNG_BYTES


def _ftyp(brands, box_size=None):
    payload = b"ftyp" + b"".join(brands)
    size = box_size if box_size is not None else 4 + len(payload)
    return struct.pack(">I", size) + payload


class TestMp4:
    def test_major_brand(self):
        assert detect_content_type(MP4_BYTES) == "video/mp4"

    def test_compatible_brand(self):
        data = _ftyp([b"isom", b"\x00\x00\x02\x00", b"iso2", b"mp41"]) + b"\x00" * 100
        assert detect_content_type(data) == "video/mp4"

    def test_minor_version_is_not_a_brand(self):
        data = _ftyp([b"isom", b"mp42"]) + b"\x01" * 100
        assert detect_content_type(data) != "video/mp4"

    def test_quicktime_is_not_mp4(self):
        data = _ftyp([b"qt  ", b"\x00\x00\x00\x00", b"qt  "]) + b"\x01" * 100
        assert detect_content_type(data) != "video/mp4"

    def test_box_size_not_multiple_of_four(self):
        data = _ftyp([b"mp42", b"\x00\x00\x00\x00", b"mp42"], box_size=21) + b"\x01" * 100
        assert detect_content_type(data) != "video/mp4"

    def test_box_larger_than_data(self):
        data = _ftyp([b"mp42", b"\x00\x00\x00\x00", b"mp42"], box_size=1024)
        assert detect_content_type(data) != "video/mp4"

    def test_too_short(self):
        assert detect_content_type(b"\x00\x00\x00\x0cftyp") != "video/mp4"


def test_images():
    assert detect_content_type(PNG_BYTES) == "image/png"
    assert detect_content_type(JPEG_BYTES) == "image/jpeg"
    assert detect_content_type(b"GIF89a" + b"\x00" * 10) == "image/gif"
    assert detect_content_type(b"RIFF\x10\x00\x00\x00WEBPVP8 ") == "image/webp"


def test_documents_and_archives():
    assert detect_content_type(PDF_BYTES) == "application/pdf"
    assert detect_content_type(b"PK\x03\x04" + b"\x00" * 20) == "application/zip"
    assert detect_content_type(b"\x1f\x8b\x08\x00") == "application/x-gzip"


def test_other_video_and_audio():
    assert detect_content_type(b"\x1a\x45\xdf\xa3" + b"\x00" * 20) == "video/webm"
    assert detect_content_type(b"RIFF\x00\x00\x00\x00AVI LIST") == "video/avi"
    assert detect_content_type(b"ID3\x03\x00") == "audio/mpeg"
    assert detect_content_type(b"OggS\x00\x02") == "application/ogg"


def test_html_and_xml_after_whitespace():
    assert detect_content_type(b"  \n<!doctype html><html>") == "text/html; charset=utf-8"
    assert detect_content_type(b"<p>hi</p>") == "text/html; charset=utf-8"
    assert detect_content_type(b"\t<?xml version='1.0'?>") == "text/xml; charset=utf-8"


def test_text_and_binary_fallbacks():
    assert detect_content_type(b"") == "text/plain; charset=utf-8"
    assert detect_content_type(b"hello, world\n") == "text/plain; charset=utf-8"
    assert detect_content_type(b"\xef\xbb\xbfhello") == "text/plain; charset=utf-8"
    assert detect_content_type(b"\x01\x02\x03\x04random") == "application/octet-stream"


def test_only_first_512_bytes_are_considered():
    assert detect_content_type(b"a" * 512 + b"\x00") == "text/plain; charset=utf-8"
