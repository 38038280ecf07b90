"""Configuration file model, loading and the immutable run settings."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import tomli_w
from pydantic import BaseModel, Field, ValidationError, field_serializer

from sigscrub.core.schemas import Strategy

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.toml")

# Signature XOR-ed against DEFAULT_KEY so the tool itself never carries it in clear.
DEFAULT_STRING = "'J0^/Z?>/$K#/%'JKW/!VH<<VH\x02[:6<>-R,+>1;>-;R>1+6)6-*,R+:,+R963:^[7T7U"
DEFAULT_KEY = 0x7F
DEFAULT_EXTENSIONS = ("txt", "res", "req")
DEFAULT_REPLACEMENT = "<ここにEICAR-TEST-FILE文字列が入ります>"


class EncodeType(str, Enum):
    NONE = "NONE"
    XOR = "XOR"


class FileConfig(BaseModel):
    """On-disk shape of ``config.toml``."""

    string: str = Field(..., min_length=1)
    enc_type: EncodeType
    enc_key: int = Field(..., ge=0, le=255)
    search_ext: set[str]
    replace_str: str
    strategy: Strategy = "stream"

    @field_serializer("search_ext")
    def _sorted_ext(self, exts: set[str]) -> list[str]:
        return sorted(exts)


def default_config() -> FileConfig:
    return FileConfig(
        string=DEFAULT_STRING,
        enc_type=EncodeType.XOR,
        enc_key=DEFAULT_KEY,
        search_ext=set(DEFAULT_EXTENSIONS),
        replace_str=DEFAULT_REPLACEMENT,
    )


def deobfuscate(data: bytes, key: int) -> str:
    """XOR every byte with *key* and map the result to a code point."""
    return "".join(chr(b ^ key) for b in data)


def save_config(cfg: FileConfig, path: Path) -> None:
    path.write_text(tomli_w.dumps(cfg.model_dump(mode="json")), encoding="utf-8")


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> FileConfig:
    """
    Read *path*; on any failure fall back to the defaults and write them
    to *path* so the next run has a file to edit.
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        return FileConfig.model_validate(data)
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError, ValidationError) as e:
        logger.warning("Could not load %s, using defaults: %s", path, e)

    cfg = default_config()
    try:
        save_config(cfg, path)
    except OSError as e:
        logger.warning("Could not write default config to %s: %s", path, e)
    return cfg


@dataclass(frozen=True)
class Settings:
    """Everything a run needs, resolved once at startup and passed down explicitly."""

    signature: str
    replacement: str
    search_extensions: frozenset[str]
    strategy: Strategy = "stream"

    def __post_init__(self) -> None:
        if not self.signature:
            raise ValueError("signature must not be empty")
        if self.strategy not in ("stream", "mmap"):
            raise ValueError(f"unknown strategy: {self.strategy!r}")

    @classmethod
    def from_config(cls, cfg: FileConfig, *, strategy: Strategy | None = None) -> Settings:
        if cfg.enc_type is EncodeType.XOR:
            signature = deobfuscate(cfg.string.encode("utf-8"), cfg.enc_key)
        else:
            signature = cfg.string
        return cls(
            signature=signature,
            replacement=cfg.replace_str,
            search_extensions=frozenset(cfg.search_ext),
            strategy=strategy or cfg.strategy,
        )
