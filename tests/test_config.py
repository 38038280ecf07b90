"""Tests for config.toml handling (sigscrub.core.config)."""

from __future__ import annotations

import tomllib
from pathlib import Path

import pytest

from sigscrub.core.config import (
    EncodeType,
    FileConfig,
    Settings,
    default_config,
    deobfuscate,
    load_config,
    save_config,
)


def xor(text: str, key: int) -> str:
    return deobfuscate(text.encode("utf-8"), key)


class TestDeobfuscate:
    def test_xor_is_its_own_inverse(self) -> None:
        hidden = xor("SIGNATURE", 0x55)
        assert hidden != "SIGNATURE"
        assert xor(hidden, 0x55) == "SIGNATURE"

    def test_zero_key_is_identity(self) -> None:
        assert deobfuscate(b"abc", 0) == "abc"

    def test_default_signature(self) -> None:
        signature = Settings.from_config(default_config()).signature
        assert "EICAR-STANDARD-ANTIVIRUS-TEST-FILE" in signature
        assert len(signature) == 68


class TestLoadConfig:
    def test_missing_file_writes_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        cfg = load_config(path)

        assert cfg == default_config()
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        assert data["enc_type"] == "XOR"
        assert data["enc_key"] == 0x7F
        assert data["search_ext"] == ["req", "res", "txt"]
        assert load_config(path) == cfg

    def test_malformed_file_is_replaced(self, tmp_path: Path, caplog) -> None:
        path = tmp_path / "config.toml"
        path.write_text("string = [unterminated", encoding="utf-8")
        with caplog.at_level("WARNING", logger="sigscrub"):
            cfg = load_config(path)
        assert cfg == default_config()
        assert "using defaults" in caplog.text
        assert FileConfig.model_validate(tomllib.loads(path.read_text(encoding="utf-8"))) == cfg

    @pytest.mark.parametrize(
        "body",
        [
            'string = ""\nenc_type = "NONE"\nenc_key = 0\nsearch_ext = ["txt"]\nreplace_str = "x"\n',
            'string = "S"\nenc_type = "XOR"\nenc_key = 300\nsearch_ext = ["txt"]\nreplace_str = "x"\n',
            'string = "S"\nenc_type = "ROT13"\nenc_key = 0\nsearch_ext = ["txt"]\nreplace_str = "x"\n',
            'string = "S"\nenc_type = "NONE"\nenc_key = 0\nsearch_ext = ["txt"]\n',
        ],
    )
    def test_invalid_values_fall_back(self, tmp_path: Path, body: str) -> None:
        path = tmp_path / "config.toml"
        path.write_text(body, encoding="utf-8")
        assert load_config(path) == default_config()

    def test_custom_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(
            'string = "SIGNATURE"\n'
            'enc_type = "NONE"\n'
            "enc_key = 0\n"
            'search_ext = ["log", "csv"]\n'
            'replace_str = "CLEAN"\n'
            'strategy = "mmap"\n',
            encoding="utf-8",
        )
        cfg = load_config(path)
        assert cfg.enc_type is EncodeType.NONE
        assert cfg.search_ext == {"log", "csv"}

        settings = Settings.from_config(cfg)
        assert settings == Settings(
            signature="SIGNATURE",
            replacement="CLEAN",
            search_extensions=frozenset({"log", "csv"}),
            strategy="mmap",
        )

    def test_unwritable_default_is_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "no" / "such" / "dir" / "config.toml"
        assert load_config(path) == default_config()
        assert not path.exists()


class TestSettings:
    def test_xor_config(self) -> None:
        cfg = FileConfig(
            string=xor("SIGNATURE", 0x55),
            enc_type=EncodeType.XOR,
            enc_key=0x55,
            search_ext={"txt"},
            replace_str="R",
        )
        assert Settings.from_config(cfg).signature == "SIGNATURE"

    def test_strategy_override(self) -> None:
        assert Settings.from_config(default_config(), strategy="mmap").strategy == "mmap"
        assert Settings.from_config(default_config()).strategy == "stream"

    def test_empty_signature_rejected(self) -> None:
        with pytest.raises(ValueError, match="signature"):
            Settings(signature="", replacement="x", search_extensions=frozenset())

    def test_save_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "c.toml"
        cfg = default_config()
        save_config(cfg, path)
        assert load_config(path) == cfg
