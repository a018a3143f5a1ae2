# imagemark/geometry.py
"""
把百分比形式的位置、大小、旋转换算为具体像素。

同一组参数作用于不同尺寸的图片时，位置与大小按比例一致。
"""
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from imagemark.settings import WatermarkKind


@dataclass(frozen=True)
class Geometry:
    anchor_x: float
    anchor_y: float
    size_px: float                  # 文字: 字号; logo: 宽度
    rotation_rad: float
    logo_width: Optional[float] = None
    logo_height: Optional[float] = None

    @property
    def anchor(self) -> Tuple[float, float]:
        return self.anchor_x, self.anchor_y

    @property
    def rotation_deg(self) -> float:
        return math.degrees(self.rotation_rad)

    @property
    def top_left(self) -> Tuple[float, float]:
        """logo 左上角坐标，使 logo 的几何中心落在锚点上"""
        if self.logo_width is None:
            raise ValueError("top_left 只对 logo 有意义")
        return (self.anchor_x - self.logo_width / 2,
                self.anchor_y - self.logo_height / 2)


def logo_extent(width, spec, logo_size):
    """
    logo 的绘制尺寸：宽度为图片宽度的 logo_size_pct%，高度按原始宽高比。
    """
    native_w, native_h = logo_size
    logo_w = spec.logo_size_pct / 100 * width
    logo_h = logo_w * (native_h / native_w) if native_w else 0.0
    return logo_w, logo_h


def resolve_geometry(width, height, spec, logo_size=None) -> Geometry:
    """
    参数:
        width, height: 源图像素尺寸
        spec: WatermarkSpec
        logo_size: logo 原始 (宽, 高)，仅 logo 模式需要

    返回:
        Geometry
    """
    anchor_x = spec.position_x_pct / 100 * width
    anchor_y = spec.position_y_pct / 100 * height
    rotation = spec.rotation_deg * math.pi / 180

    if spec.kind is WatermarkKind.LOGO and logo_size is not None:
        logo_w, logo_h = logo_extent(width, spec, logo_size)
        return Geometry(anchor_x, anchor_y, logo_w, rotation, logo_w, logo_h)

    font_size = spec.font_size_pct / 100 * width
    return Geometry(anchor_x, anchor_y, font_size, rotation)
