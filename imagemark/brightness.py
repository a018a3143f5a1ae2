# imagemark/brightness.py
import logging

from PIL import Image, ImageStat

from imagemark.settings import ColorMode

logger = logging.getLogger(__name__)

# 分析画板边长（像素）；与原图分辨率无关
ANALYSIS_SIZE = 100
LIGHT_THRESHOLD = 50


def average_luma_pct(image):
    """
    返回图片的平均亮度（0..100）。

    图片被拉伸绘制到 ANALYSIS_SIZE x ANALYSIS_SIZE 的透明黑色画板上，
    再按 L = 0.299R + 0.587G + 0.114B 取平均（Pillow 的 "L" 模式即此权重）。
    """
    surface = Image.new("RGBA", (ANALYSIS_SIZE, ANALYSIS_SIZE), (0, 0, 0, 0))
    sample = image.convert("RGBA").resize((ANALYSIS_SIZE, ANALYSIS_SIZE), Image.BILINEAR)
    surface.alpha_composite(sample)
    luma = surface.convert("RGB").convert("L")
    mean = ImageStat.Stat(luma).mean[0]
    return mean / 255 * 100


def analyze_brightness(image):
    """
    根据平均亮度选择默认文字颜色：偏暗的图返回 LIGHT，偏亮的图返回 DARK。
    零面积或无法读取的图片返回 LIGHT。
    """
    if image is None or image.width == 0 or image.height == 0:
        return ColorMode.LIGHT
    try:
        luma = average_luma_pct(image)
    except (OSError, ValueError) as e:
        logger.warning("亮度分析失败，使用默认浅色: %s", e)
        return ColorMode.LIGHT
    logger.debug("平均亮度 %.1f%%", luma)
    return ColorMode.LIGHT if luma < LIGHT_THRESHOLD else ColorMode.DARK
