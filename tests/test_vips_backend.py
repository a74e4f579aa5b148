import pytest

pytest.importorskip("pyvips")

from pathlib import Path

import pyvips

from sizemic.batch import BatchRunner
from sizemic.errors import ExternalToolError
from sizemic.image_engine.resize import resize
from sizemic.image_engine.vips_backend import ImageInfo, VipsBackend
from sizemic.manifest import generate_manifest, write_manifest


def _write_image(path: Path, w: int, h: int) -> Path:
    img = (pyvips.Image.black(w, h, bands=3) + [50, 100, 150]).cast("uchar")
    img.write_to_file(str(path))
    return path


def _size(path: Path) -> tuple[int, int]:
    img = pyvips.Image.new_from_file(str(path))
    return img.width, img.height


def test_identify_reads_dimensions(tmp_path: Path):
    src = _write_image(tmp_path / "in.png", 7, 5)
    assert VipsBackend().identify(str(src)) == ImageInfo(7, 5)


def test_identify_rejects_non_images(tmp_path: Path):
    bad = tmp_path / "bad.jpg"
    bad.write_text("this is not a jpeg", encoding="utf-8")
    with pytest.raises(ExternalToolError):
        VipsBackend().identify(str(bad))


def test_width_resize_keeps_source_height(tmp_path: Path):
    src = _write_image(tmp_path / "in.png", 40, 30)
    out = resize(str(src), 1.0, 25, 0, ".", backend=VipsBackend())
    assert out == str(tmp_path / "in_sizemic.png")
    assert _size(Path(out)) == (25, 30)


def test_scale_resize_rounds_up(tmp_path: Path):
    src = _write_image(tmp_path / "in.jpeg", 7, 5)
    dst = tmp_path / "half.jpeg"
    resize(str(src), 0.5, 0, 0, str(dst), backend=VipsBackend())
    assert _size(dst) == (4, 3)
    assert dst.read_bytes().startswith(b"\xff\xd8")


def test_batch_over_real_images(tmp_path: Path):
    source = tmp_path / "pics"
    source.mkdir()
    for name in ("a.png", "b.jpg", "c.png"):
        _write_image(source / name, 9, 6)
    (source / "broken.jpg").write_text("garbage", encoding="utf-8")
    (source / "notes.txt").write_text("skip me", encoding="utf-8")
    stale = source / "out"
    stale.mkdir()
    (stale / "old.png").write_bytes(b"old")

    manifest = generate_manifest(source, 1.0, 0, 4, "out")
    path = write_manifest(manifest, source, "sizemic-manifest")
    report = BatchRunner(manifest, path, backend=VipsBackend()).run()

    assert len(report.resized) == 3
    assert [Path(p).name for p, _ in report.failed] == ["broken.jpg"]
    assert sorted(p.name for p in stale.iterdir()) == ["a.png", "b.jpg", "c.png"]
    for name in ("a.png", "b.jpg", "c.png"):
        assert _size(stale / name) == (9, 4)
