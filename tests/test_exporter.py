import io
import zipfile
from dataclasses import replace

import pytest
from PIL import Image

from conftest import make_entity
from imagemark.errors import EncodeFailure
from imagemark.exporter import (
    encode_png, ensure_output_path, export_entity, export_to_directory, export_zip,
    output_filename, unique_name,
)


def rendered(name):
    entity = make_entity(name=name)
    return replace(entity, output=entity.source.convert("RGBA"))


@pytest.mark.parametrize("name,expected", [
    ("photo.jpg", "watermarked-photo.png"),
    ("holiday.final.jpeg", "watermarked-holiday.png"),
    ("noext", "watermarked-noext.png"),
    (".hidden", "watermarked-image.png"),
])
def test_output_filename(name, expected):
    assert output_filename(name) == expected


def test_encode_png_is_lossless():
    img = Image.new("RGBA", (7, 5), (1, 2, 3, 4))
    data = encode_png(img)
    assert data.startswith(b"\x89PNG")
    assert Image.open(io.BytesIO(data)).tobytes() == img.tobytes()


def test_unrendered_entity_cannot_be_exported():
    with pytest.raises(EncodeFailure):
        export_entity(make_entity())


def test_zip_keeps_successes_when_one_entity_fails():
    good_a = rendered("a.jpg")
    good_b = rendered("a.png")
    missing = make_entity(name="late.png")
    result = export_zip([good_a, missing, good_b], now=1700000000)

    assert result.filename == "imagemark-watermarked-1700000000000.zip"
    assert result.report.succeeded == ["watermarked-a.png", "watermarked-a_1.png"]
    assert [f.entity_id for f in result.report.failures] == [missing.id]
    assert not result.report.ok
    with zipfile.ZipFile(io.BytesIO(result.data)) as zf:
        assert zf.namelist() == ["watermarked-a.png", "watermarked-a_1.png"]


def test_unique_name():
    used = set()
    assert unique_name("x.png", used) == "x.png"
    assert unique_name("x.png", used) == "x_1.png"
    assert unique_name("x.png", used) == "x_2.png"


def test_ensure_output_path_does_not_clobber(tmp_path):
    (tmp_path / "watermarked-a.png").write_bytes(b"old")
    path = ensure_output_path("watermarked-a.png", tmp_path)
    assert path == str(tmp_path / "watermarked-a_1.png")


def test_export_to_directory(tmp_path):
    progress = []
    entities = [rendered("a.jpg"), rendered("a.gif"), make_entity(name="b.png")]
    report = export_to_directory(
        entities, tmp_path / "out", max_workers=2,
        progress_callback=lambda *args: progress.append(args),
    )
    written = sorted(p.name for p in (tmp_path / "out").iterdir())
    assert written == ["watermarked-a.png", "watermarked-a_1.png"]
    assert len(report.succeeded) == 2
    assert [f.name for f in report.failures] == ["b.png"]
    assert sorted(p[0] for p in progress) == [1, 2, 3]
    assert all(p[1] == 3 for p in progress)
    assert sum(1 for p in progress if not p[2]) == 1
