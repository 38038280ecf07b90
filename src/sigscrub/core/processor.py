"""
Per-file signature replacement.

Two strategies share one interface:

* ``stream`` first picks the one encoding that decodes every CR-terminated
  chunk, then rewrites chunk by chunk into a sibling temp file that is
  renamed over the source only after the whole file went through. The source
  is never modified on failure. A signature containing a CR before its last
  character spans two chunks and is not matched. Symlinks are resolved so
  the rename lands on the target, not the link.
* ``mmap`` maps the file and rewrites it in place when the new content has
  the same byte length; otherwise it commits through the temp-file rename.
"""

from __future__ import annotations

import mmap
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO

from sigscrub.core.chunking import iter_chunks
from sigscrub.core.config import Settings
from sigscrub.core.encoding import DecodeError, EncodingResolver
from sigscrub.core.schemas import ReplacementOutcome

TMP_SUFFIX = ".tmp"


def open_temp_beside(path: Path) -> tuple[Path, BinaryIO]:
    """Create ``<path>.tmp`` exclusively, adding ``.tmp`` until the name is free."""
    candidate = path
    while True:
        candidate = candidate.with_name(candidate.name + TMP_SUFFIX)
        try:
            return candidate, open(candidate, "xb")
        except FileExistsError:
            continue


def commit_temp(tmp_path: Path, path: Path) -> None:
    shutil.copymode(path, tmp_path)
    os.replace(tmp_path, path)


def resolve_link(path: Path) -> Path:
    """Renaming over a symlink would replace the link, so work on its target."""
    return Path(os.path.realpath(path))


def write_via_temp(path: Path, data: bytes) -> None:
    path = resolve_link(path)
    tmp_path, fh = open_temp_beside(path)
    try:
        with fh:
            fh.write(data)
        commit_temp(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


class ContentProcessor(ABC):
    name = ""

    def __init__(self, signature: str, replacement: str, resolver: EncodingResolver | None = None):
        if not signature:
            raise ValueError("signature must not be empty")
        self.signature = signature
        self.replacement = replacement
        self.resolver = resolver or EncodingResolver()

    def process(self, path: Path) -> ReplacementOutcome:
        """Rewrite *path*. Per-file problems come back as a failed outcome, never raised."""
        path = Path(path)
        try:
            return self._rewrite(path)
        except (DecodeError, UnicodeEncodeError) as e:
            return ReplacementOutcome.decode_failure(path, e)
        except OSError as e:
            return ReplacementOutcome.io_failure(path, e)

    @abstractmethod
    def _rewrite(self, path: Path) -> ReplacementOutcome:
        ...


class StreamingProcessor(ContentProcessor):
    name = "stream"

    def _copy_replacing(self, src: BinaryIO, dst: BinaryIO, enc: str) -> bool:
        changed = False
        for chunk in iter_chunks(src):
            text = chunk.decode(enc)
            if self.signature in text:
                dst.write(text.replace(self.signature, self.replacement).encode(enc))
                changed = True
            else:
                # untouched chunks keep their exact bytes
                dst.write(chunk)
        return changed

    def _rewrite(self, path: Path) -> ReplacementOutcome:
        target = resolve_link(path)
        tmp_path = None
        try:
            with open(target, "rb") as src:
                enc = self.resolver.resolve_stream(src)
                tmp_path, dst = open_temp_beside(target)
                with dst:
                    changed = self._copy_replacing(src, dst, enc)
            if changed:
                commit_temp(tmp_path, target)
            else:
                tmp_path.unlink()
        except BaseException:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise

        return ReplacementOutcome.success(path, encoding=enc, changed=changed)


class MappedProcessor(ContentProcessor):
    name = "mmap"

    def _rewrite(self, path: Path) -> ReplacementOutcome:
        with open(path, "r+b") as fh:
            if os.fstat(fh.fileno()).st_size == 0:
                # mmap refuses empty files; nothing to replace anyway
                return ReplacementOutcome.success(path)

            with mmap.mmap(fh.fileno(), 0) as mapped:
                text, enc = self.resolver.decode(bytes(mapped))
                if self.signature not in text:
                    return ReplacementOutcome.success(path, encoding=enc)

                new = text.replace(self.signature, self.replacement).encode(enc)
                if len(new) == len(mapped):
                    mapped[:] = new
                    mapped.flush()
                    return ReplacementOutcome.success(path, encoding=enc, changed=True)

        # length changed: a fixed-size mapping can't hold it
        write_via_temp(path, new)
        return ReplacementOutcome.success(path, encoding=enc, changed=True)


PROCESSORS: dict[str, type[ContentProcessor]] = {
    StreamingProcessor.name: StreamingProcessor,
    MappedProcessor.name: MappedProcessor,
}


def build_processor(settings: Settings, resolver: EncodingResolver | None = None) -> ContentProcessor:
    try:
        cls = PROCESSORS[settings.strategy]
    except KeyError:
        raise ValueError(f"unknown strategy: {settings.strategy!r}") from None
    return cls(settings.signature, settings.replacement, resolver)
