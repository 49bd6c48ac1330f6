from pathlib import Path

import pytest
from PIL import Image

from epd7_converter import cli
from epd7_converter.palette import HEIGHT, WIDTH


def _save(path: Path, size=(WIDTH, HEIGHT), color=(255, 255, 255)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path)
    return path


def test_expand_inputs(tmp_path: Path) -> None:
    for name in ("b.png", "a.png", "c.jpg"):
        (tmp_path / name).write_bytes(b"")

    expanded = cli.expand_inputs([str(tmp_path / "*.png"), str(tmp_path / "c.jpg"), "nope.png"])

    assert expanded == [str(tmp_path / "a.png"), str(tmp_path / "b.png"), str(tmp_path / "c.jpg"), "nope.png"]


def test_expand_inputs_keeps_unmatched_patterns(tmp_path: Path) -> None:
    pattern = str(tmp_path / "*.gif")
    assert cli.expand_inputs([pattern]) == [pattern]


def test_parser_requires_output_and_image() -> None:
    parser = cli.build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["a.png"])
    with pytest.raises(SystemExit):
        parser.parse_args(["-o", "out"])

    args = parser.parse_args(["a.png", "b.png", "-o", "out", "-p", "-r", "-j", "2"])
    assert args.sources == ["a.png", "b.png"]
    assert args.output == Path("out")
    assert args.png and args.random
    assert args.jobs == 2
    assert args.gamma == 2.3


def test_main_skips_bad_files_and_succeeds(tmp_path: Path, capsys) -> None:
    good = _save(tmp_path / "in" / "good.png")
    small = _save(tmp_path / "in" / "small.png", size=(300, 200))
    out = tmp_path / "out"
    out.mkdir()

    status = cli.main(
        [str(small), str(tmp_path / "in" / "missing.png"), str(good), "-o", str(out), "-j", "1", "-p"]
    )

    assert status == 0
    assert sorted(p.name for p in out.iterdir()) == ["0002-good.bin", "0002-good.png"]
    stderr = capsys.readouterr().err
    assert "Warning:" in stderr
    assert "300x200" in stderr
    assert "does not exist" in stderr


def test_main_reuses_existing_slots(tmp_path: Path) -> None:
    source = _save(tmp_path / "in" / "cat.png")
    out = tmp_path / "out"
    out.mkdir()
    (out / "0007-cat.bin").write_bytes(b"old")
    (out / "0012-dog.bin").write_bytes(b"old")

    assert cli.main([str(source), "-o", str(out), "-j", "1"]) == 0

    assert (out / "0007-cat.bin").read_bytes() == bytes([0x11]) * (WIDTH * HEIGHT // 2)
    assert sorted(p.name for p in out.iterdir()) == ["0007-cat.bin", "0012-dog.bin"]


def test_main_fails_without_destination(tmp_path: Path, capsys) -> None:
    source = _save(tmp_path / "cat.png", size=(2, 2))

    status = cli.main([str(source), "-o", str(tmp_path / "missing")])

    assert status == 1
    assert "Failed to open destination directory" in capsys.readouterr().err


def test_main_rejects_bad_gamma(tmp_path: Path, capsys) -> None:
    assert cli.main(["x.png", "-o", str(tmp_path), "--gamma", "0"]) == 1
    assert "Gamma" in capsys.readouterr().err


def test_main_skips_oversized_images(tmp_path: Path, oversized_png: Path, capsys) -> None:
    good = _save(tmp_path / "in" / "good.png")
    out = tmp_path / "out"
    out.mkdir()

    status = cli.main([str(oversized_png), str(good), "-o", str(out), "-j", "1"])

    assert status == 0
    assert (out / "0002-good.bin").read_bytes() == bytes([0x11]) * (WIDTH * HEIGHT // 2)
    assert "huge.png" in capsys.readouterr().err


def test_main_reports_warnings_raised_during_conversion(
    tmp_path: Path, monkeypatch, capsys
) -> None:
    source = _save(tmp_path / "in" / "cat.png")
    out = tmp_path / "out"
    out.mkdir()
    # Between one and two times the limit Pillow only warns.
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", WIDTH * HEIGHT - 1)

    status = cli.main([str(source), "-o", str(out), "-j", "1"])

    assert status == 0
    assert (out / "0001-cat.bin").exists()
    assert "Warning: Image size" in capsys.readouterr().err
