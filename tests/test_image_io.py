import io

import pytest
from PIL import Image

from conftest import png_bytes, solid
from imagemark.errors import DecodeFailure
from imagemark.image_io import decode_image, generate_thumbnail, is_image_file, load_logo, read_file


def test_decode_png():
    img = decode_image(png_bytes(solid((13, 7), (9, 8, 7))), "x.png")
    assert img.size == (13, 7)
    assert img.getpixel((0, 0)) == (9, 8, 7)


def test_decode_applies_exif_orientation():
    img = solid((40, 20), (0, 0, 0))
    exif = Image.Exif()
    exif[0x0112] = 6  # 顺时针旋转 90 度
    buf = io.BytesIO()
    img.save(buf, "JPEG", exif=exif.tobytes())
    assert decode_image(buf.getvalue(), "rot.jpg").size == (20, 40)


@pytest.mark.parametrize("data", [b"", b"hello", b"\x89PNG\r\n\x1a\nxx"])
def test_undecodable_bytes(data):
    with pytest.raises(DecodeFailure) as info:
        decode_image(data, "bad.png")
    assert info.value.name == "bad.png"


def test_is_image_file():
    assert is_image_file("A.JPG")
    assert is_image_file("dir/b.webp")
    assert not is_image_file("movie.mp4")


def test_load_logo_reports_native_size():
    logo = load_logo(png_bytes(solid((30, 12), (1, 2, 3))), "logo.png")
    assert (logo.width, logo.height) == (30, 12)
    assert logo.image.mode == "RGBA"


def test_read_file(tmp_path):
    path = tmp_path / "pic.png"
    path.write_bytes(b"abc")
    assert read_file(str(path)) == ("pic.png", b"abc")


def test_generate_thumbnail_keeps_original():
    img = solid((400, 200), (0, 0, 0))
    thumb = generate_thumbnail(img, 100)
    assert thumb.size == (100, 50)
    assert img.size == (400, 200)
