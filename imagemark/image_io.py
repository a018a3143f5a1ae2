# imagemark/image_io.py
import io
import logging
import os
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError

from imagemark.errors import DecodeFailure

logger = logging.getLogger(__name__)

SUPPORTED_EXTS = {'.jpg', '.jpeg', '.png', '.bmp', '.gif', '.webp', '.tif', '.tiff'}


@dataclass(frozen=True)
class LogoImage:
    image: Image.Image
    width: int
    height: int


def is_image_file(path):
    _, ext = os.path.splitext(path.lower())
    return ext in SUPPORTED_EXTS


def decode_image(data, name="image"):
    """
    把文件字节解码为完整载入的 PIL.Image，并修正 EXIF 方向。
    无法解码时抛出 DecodeFailure。
    """
    try:
        img = Image.open(io.BytesIO(data))
        img = ImageOps.exif_transpose(img)  # 修正 EXIF 方向
        img.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        logger.warning("解码失败 %s: %s", name, e)
        raise DecodeFailure(name, str(e)) from e
    if img.width == 0 or img.height == 0:
        raise DecodeFailure(name, "零尺寸图片")
    return img


def read_file(path):
    """读取本地文件，返回 (文件名, 字节)"""
    with open(path, 'rb') as f:
        return os.path.basename(path), f.read()


def load_logo(data, name="logo"):
    img = decode_image(data, name).convert("RGBA")
    return LogoImage(img, img.width, img.height)


def generate_thumbnail(img, max_size=1024):
    thumb = img.copy()
    thumb.thumbnail((max_size, max_size), Image.LANCZOS)
    return thumb
