from __future__ import annotations

from textstream.config import ReaderConfig, load_reader_config
from textstream.paths import find_config_file


def test_missing_config_gives_defaults(tmp_path) -> None:
    cfg = load_reader_config(tmp_path / "nope.yaml")

    assert cfg == ReaderConfig()
    assert cfg.encoding == "utf-8"
    assert cfg.trap == "strict"
    assert cfg.chunk_size == 2048


def test_load_reader_config(tmp_path) -> None:
    path = tmp_path / "textstream.yaml"
    path.write_text("encoding: sjis\ntrap: replace\nchunk_size: 4096\n", encoding="utf-8")

    cfg = load_reader_config(path)

    assert cfg == ReaderConfig(encoding="sjis", trap="replace", chunk_size=4096)


def test_bad_values_fall_back(tmp_path) -> None:
    path = tmp_path / "textstream.yaml"
    path.write_text("encoding: ''\ntrap: 3\nchunk_size: 4\n", encoding="utf-8")

    assert load_reader_config(path) == ReaderConfig()

    path.write_text("- not\n- a mapping\n", encoding="utf-8")
    assert load_reader_config(path) == ReaderConfig()

    path.write_text("", encoding="utf-8")
    assert load_reader_config(path) == ReaderConfig()


def test_config_found_from_subdirectory(tmp_path, monkeypatch) -> None:
    (tmp_path / "textstream.yaml").write_text("encoding: euc-jp\n", encoding="utf-8")
    sub = tmp_path / "a" / "b"
    sub.mkdir(parents=True)
    monkeypatch.chdir(sub)

    assert find_config_file() == (tmp_path / "textstream.yaml").resolve()
    assert load_reader_config().encoding == "euc-jp"


def test_find_config_file_without_config(tmp_path) -> None:
    assert find_config_file(tmp_path) is None
