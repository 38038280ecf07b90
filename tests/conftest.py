from __future__ import annotations

from pathlib import Path

import pytest

from sigscrub.core.config import Settings

SIGNATURE = "SIGNATURE"
REPLACEMENT = "REPLACEMENT"


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        signature=SIGNATURE,
        replacement=REPLACEMENT,
        search_extensions=frozenset({"txt", "res"}),
    )


@pytest.fixture()
def tree(tmp_path: Path) -> Path:
    """
    root/
      a.txt          signature
      b.bin          not in the allow-list
      sub/c.res      signature twice
      sub/deep/d.TXT wrong case, skipped
      sub/deep/e.txt no signature
    """
    root = tmp_path / "root"
    deep = root / "sub" / "deep"
    deep.mkdir(parents=True)
    (root / "a.txt").write_bytes(b"prefix SIGNATURE suffix")
    (root / "b.bin").write_bytes(bytes(range(256)) + b"SIGNATURE")
    (root / "sub" / "c.res").write_bytes(b"SIGNATURE\r\nand SIGNATURE\r\n")
    (deep / "d.TXT").write_bytes(b"SIGNATURE")
    (deep / "e.txt").write_bytes(b"nothing to see")
    return root
