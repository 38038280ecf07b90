"""Tests for the two-candidate decoder."""

from __future__ import annotations

import io

import pytest

from sigscrub.core.encoding import DecodeError, EncodingResolver


class TestEncodingResolver:
    def test_ascii_is_read_as_legacy(self) -> None:
        text, enc = EncodingResolver().decode(b"plain ascii")
        assert text == "plain ascii"
        assert enc == "cp932"

    def test_shift_jis_text(self) -> None:
        data = "日本語のテキスト".encode("cp932")
        text, enc = EncodingResolver().decode(data)
        assert text == "日本語のテキスト"
        assert enc == "cp932"

    def test_falls_back_to_utf8(self) -> None:
        # 0x81 0x20 is a cp932 lead byte followed by an invalid trail byte
        data = "ā tail".encode("utf-8")
        assert data.startswith(b"\xc4\x81 ")
        text, enc = EncodingResolver().decode(data)
        assert text == "ā tail"
        assert enc == "utf-8"

    def test_neither_encoding(self) -> None:
        with pytest.raises(DecodeError, match="neither cp932 nor utf-8"):
            EncodingResolver().decode(b"\x81 broken \xff")

    def test_empty_candidates_rejected(self) -> None:
        with pytest.raises(ValueError):
            EncodingResolver(candidates=())

    def test_stream_uses_one_encoding_for_all_chunks(self) -> None:
        # first line is ASCII (cp932-valid), second only UTF-8
        stream = io.BytesIO("SIGNATURE\r\nā\r\n".encode("utf-8"))
        assert EncodingResolver().resolve_stream(stream) == "utf-8"
        assert stream.tell() == 0

    def test_stream_prefers_legacy(self) -> None:
        stream = io.BytesIO("日本\r\nSIGNATURE\r\n".encode("cp932"))
        assert EncodingResolver().resolve_stream(stream) == "cp932"

    def test_stream_with_mixed_encodings(self) -> None:
        stream = io.BytesIO("日本\r".encode("cp932") + "ā tail".encode("utf-8"))
        with pytest.raises(DecodeError, match="neither cp932 nor utf-8"):
            EncodingResolver().resolve_stream(stream)
