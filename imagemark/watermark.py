# imagemark/watermark.py
import functools
import logging
import math
import os

from PIL import Image, ImageColor, ImageDraw, ImageFont

from imagemark.geometry import resolve_geometry
from imagemark.settings import ColorMode, DEFAULT_FONT, FONT_OPTIONS, WatermarkKind

logger = logging.getLogger(__name__)

LIGHT_COLOR = "#D1D5DB"
DARK_COLOR = "#374151"


def text_fill(spec):
    """根据颜色模式返回文字颜色 (R, G, B, 255)"""
    if spec.color_mode is ColorMode.LIGHT:
        color = LIGHT_COLOR
    elif spec.color_mode is ColorMode.DARK:
        color = DARK_COLOR
    else:
        color = spec.custom_color
    return (*ImageColor.getrgb(color)[:3], 255)


@functools.lru_cache(maxsize=64)
def load_font(font_id, size, font_dirs=()):
    """
    载入粗体字体。

    依次尝试 FONT_OPTIONS 中列出的 TrueType 文件（先在 font_dirs 里找，
    再交给 Pillow 搜索系统字体目录）；都没有时使用 Pillow 自带的可缩放字体。

    返回:
        (font, is_bold): is_bold 为 False 时需要模拟粗体
    """
    option = FONT_OPTIONS.get(font_id) or FONT_OPTIONS[DEFAULT_FONT]
    candidates = [os.path.join(d, f) for d in font_dirs for f in option.files]
    candidates += list(option.files)
    for path in candidates:
        try:
            return ImageFont.truetype(path, size), True
        except OSError:
            continue
    logger.debug("未找到字体 %s，使用默认字体", font_id)
    return ImageFont.load_default(size=size), False


def build_text_layer(text, font, fill, stroke_width=0):
    """
    返回一个透明背景的 RGBA Image，文字的视觉中心位于图层正中心。
    stroke_width > 0 时用同色描边模拟粗体。
    """
    dummy = Image.new("RGBA", (1, 1), (0, 0, 0, 0))
    draw = ImageDraw.Draw(dummy)
    left, top, right, bottom = draw.textbbox(
        (0, 0), text, font=font, anchor="mm", stroke_width=stroke_width
    )
    # 画板关于锚点对称，旋转时锚点不动
    half_w = math.ceil(max(abs(left), abs(right))) + 1
    half_h = math.ceil(max(abs(top), abs(bottom))) + 1

    # 整层 RGB 恒为文字颜色，字形只由 alpha 表示
    layer = Image.new("RGBA", (half_w * 2, half_h * 2), (*fill[:3], 0))
    draw = ImageDraw.Draw(layer)
    draw.text(
        (half_w, half_h), text, font=font, fill=fill, anchor="mm",
        stroke_width=stroke_width, stroke_fill=fill,
    )
    return layer


def rotate_layer(layer, rotation_deg):
    """绕图层中心旋转；正角度为顺时针（与 canvas 一致）"""
    angle = -rotation_deg % 360
    if angle == 0:
        return layer
    return layer.rotate(angle, resample=Image.BICUBIC, expand=True)


def rotate_text_layer(layer, rotation_deg, fill):
    """
    只旋转文字图层的 alpha 蒙版，再用纯色重建图层。
    RGBA 直接插值会改变边缘像素的颜色。
    """
    if -rotation_deg % 360 == 0:
        return layer
    mask = rotate_layer(layer.getchannel("A"), rotation_deg)
    rotated = Image.new("RGBA", mask.size, (*fill[:3], 255))
    rotated.putalpha(mask)
    return rotated


def apply_opacity(layer, opacity):
    """把图层的 alpha 通道乘以 opacity (0..1]"""
    if opacity >= 1:
        return layer
    alpha = layer.getchannel("A").point(lambda a: round(a * opacity))
    layer.putalpha(alpha)
    return layer


def paste_centered(base, layer, anchor):
    """
    把 layer 的中心对齐到 anchor，合成到 base 上，返回新图像。
    超出画布的部分被裁掉。
    """
    lw, lh = layer.size
    left = round(anchor[0] - lw / 2)
    top = round(anchor[1] - lh / 2)

    overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
    overlay.paste(layer, (left, top))
    return Image.alpha_composite(base, overlay)


def make_text_layer(spec, geometry, font_dirs=()):
    size = max(1, round(geometry.size_px))
    font, is_bold = load_font(spec.font_family, size, tuple(font_dirs))
    stroke = 0 if is_bold else max(1, size // 24)
    return build_text_layer(spec.text, font, text_fill(spec), stroke_width=stroke)


def make_logo_layer(logo, geometry):
    width = max(1, round(geometry.logo_width))
    height = max(1, round(geometry.logo_height))
    return logo.image.convert("RGBA").resize((width, height), Image.LANCZOS)


def render(source, spec, logo=None, font_dirs=()):
    """
    把水印合成到源图的副本上。

    参数:
        source: PIL.Image，不会被修改
        spec: WatermarkSpec
        logo: LogoImage 或 None（logo 尚未载入）
        font_dirs: 额外的字体搜索目录

    返回:
        与 source 等大的 RGBA Image。参数不绘制任何内容时返回源图副本；
        绘制失败时记录日志并同样返回源图副本。
    """
    base = source.convert("RGBA")
    if spec.is_empty(logo):
        return base

    logo_size = (logo.width, logo.height) if logo is not None else None
    geometry = resolve_geometry(base.width, base.height, spec, logo_size)
    try:
        if spec.kind is WatermarkKind.TEXT:
            layer = make_text_layer(spec, geometry, font_dirs)
            layer = rotate_text_layer(layer, spec.rotation_deg, text_fill(spec))
        else:
            layer = make_logo_layer(logo, geometry)
            layer = rotate_layer(layer, spec.rotation_deg)
        layer = apply_opacity(layer, spec.opacity_pct / 100)
        return paste_centered(base, layer, geometry.anchor)
    except (OSError, ValueError) as e:
        logger.warning("水印绘制失败，保留原图: %s", e)
        return base
