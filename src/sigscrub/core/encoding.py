from __future__ import annotations

from typing import BinaryIO, NamedTuple

from sigscrub.core.chunking import iter_chunks

# cp932 is the Windows flavour of Shift_JIS (NEC/IBM extensions included).
LEGACY_ENCODING = "cp932"
FALLBACK_ENCODING = "utf-8"


class DecodeError(ValueError):
    """Raised when a buffer is valid under none of the candidate encodings."""


class DecodedText(NamedTuple):
    text: str
    encoding: str


class EncodingResolver:
    """
    Decode bytes by trying a fixed list of encodings in order.
    No detection heuristics: the first codec that decodes without error wins,
    so a buffer valid under both is always read as the legacy encoding.
    """

    def __init__(self, candidates: tuple[str, ...] = (LEGACY_ENCODING, FALLBACK_ENCODING)):
        if not candidates:
            raise ValueError("at least one candidate encoding is required")
        self.candidates = candidates

    def decode(self, data: bytes) -> DecodedText:
        last_error: UnicodeDecodeError | None = None
        for enc in self.candidates:
            try:
                return DecodedText(data.decode(enc), enc)
            except UnicodeDecodeError as e:
                last_error = e

        names = " nor ".join(self.candidates)
        raise DecodeError(f"neither {names} decodable: {last_error}")

    def resolve_stream(self, stream: BinaryIO) -> str:
        """
        Pick the first candidate that decodes every CR-terminated chunk of
        *stream*, so a whole file is read (and written back) in one encoding.
        The stream is left at its start.
        """
        last_error: UnicodeDecodeError | None = None
        for enc in self.candidates:
            stream.seek(0)
            try:
                for chunk in iter_chunks(stream):
                    chunk.decode(enc)
            except UnicodeDecodeError as e:
                last_error = e
                continue
            stream.seek(0)
            return enc

        names = " nor ".join(self.candidates)
        raise DecodeError(f"neither {names} decodable: {last_error}")
