from __future__ import annotations

from pathlib import Path

from sizemic.path_utils import (
    has_image_extension,
    image_format,
    list_image_files,
    output_name,
    resolve_against,
)


def test_list_image_files_filters_by_extension_case_insensitively(tmp_path: Path) -> None:
    for name in ("a.JPG", "b.png", "c.txt", "d.GIF"):
        (tmp_path / name).write_bytes(b"x")
    (tmp_path / "e.jpeg").mkdir()  # directories are never candidates

    assert set(list_image_files(tmp_path)) == {"a.JPG", "b.png", "d.GIF"}


def test_has_image_extension() -> None:
    assert has_image_extension("photo.Jpeg")
    assert not has_image_extension("README")
    assert not has_image_extension("archive.png.zip")


def test_output_name_inserts_suffix_for_current_dir() -> None:
    assert output_name(".", "pics/photo.jpg") == "pics/photo_sizemic.jpg"
    assert output_name(".", "my.holiday.png", suffix="_small") == "my.holiday_small.png"


def test_output_name_keeps_explicit_output() -> None:
    assert output_name("out/thumb.jpg", "photo.jpg") == "out/thumb.jpg"


def test_image_format_normalizes_jpeg() -> None:
    assert image_format("a.JPEG") == "jpg"
    assert image_format("a.jpg") == "jpg"
    assert image_format("b.PNG") == "png"


def test_resolve_against(tmp_path: Path) -> None:
    assert resolve_against(tmp_path, "out") == (tmp_path / "out").resolve()
    assert resolve_against(tmp_path, tmp_path / "abs") == tmp_path / "abs"
