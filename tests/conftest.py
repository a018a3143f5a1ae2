import io
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PIL import Image

from imagemark.entity import FileInfo, ImageEntity
from imagemark.image_io import LogoImage


def solid(size, color, mode="RGB"):
    return Image.new(mode, size, color)


def png_bytes(img):
    buf = io.BytesIO()
    img.save(buf, "PNG")
    return buf.getvalue()


def make_entity(size=(200, 100), color=(40, 40, 40), name="photo.jpg"):
    return ImageEntity(solid(size, color), FileInfo(name, 1234))


def make_logo(size=(200, 100), color=(255, 0, 0, 255)):
    img = solid(size, color, "RGBA")
    return LogoImage(img, img.width, img.height)


@pytest.fixture
def gradient():
    img = Image.new("RGB", (300, 200))
    img.putdata([(x % 256, y % 256, (x + y) % 256) for y in range(200) for x in range(300)])
    return img
