# imagemark/settings.py
"""
水印参数（WatermarkSpec）及其取值范围、位置预设、字体选项。

所有数值在构造时被夹到合法区间内，渲染器永远看不到非法值。
"""
import math
import re
from dataclasses import dataclass, fields, replace
from enum import Enum


class WatermarkKind(Enum):
    TEXT = "text"
    LOGO = "image"


class ColorMode(Enum):
    LIGHT = "light"
    DARK = "dark"
    CUSTOM = "custom"


# 取值范围 (最小, 最大)
FONT_SIZE_RANGE = (5, 30)
LOGO_SIZE_RANGE = (5, 50)
OPACITY_RANGE = (1, 100)
ROTATION_RANGE = (-180, 180)
POSITION_RANGE = (0, 100)

DEFAULT_CUSTOM_COLOR = "#FFFFFF"
CUSTOM_PRESET_ID = "custom"

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


@dataclass(frozen=True)
class FontOption:
    name: str
    family: str
    category: str
    files: tuple = ()


# 字体 id -> 字体选项；files 是按顺序尝试的粗体 TrueType 文件
FONT_OPTIONS = {
    "inter": FontOption("Inter", "Inter, sans-serif", "sans-serif",
                        ("Inter-Bold.ttf", "DejaVuSans-Bold.ttf", "arialbd.ttf")),
    "roboto": FontOption("Roboto", "Roboto, sans-serif", "sans-serif",
                         ("Roboto-Bold.ttf", "DejaVuSans-Bold.ttf", "arialbd.ttf")),
    "open-sans": FontOption("Open Sans", "'Open Sans', sans-serif", "sans-serif",
                            ("OpenSans-Bold.ttf", "DejaVuSans-Bold.ttf", "arialbd.ttf")),
    "montserrat": FontOption("Montserrat", "Montserrat, sans-serif", "sans-serif",
                             ("Montserrat-Bold.ttf", "DejaVuSans-Bold.ttf", "arialbd.ttf")),
    "arial": FontOption("Arial", "Arial, sans-serif", "sans-serif",
                        ("arialbd.ttf", "Arial Bold.ttf", "LiberationSans-Bold.ttf")),
    "georgia": FontOption("Georgia", "Georgia, serif", "serif",
                          ("georgiab.ttf", "Georgia Bold.ttf", "DejaVuSerif-Bold.ttf")),
    "playfair": FontOption("Playfair Display", "'Playfair Display', serif", "serif",
                           ("PlayfairDisplay-Bold.ttf", "DejaVuSerif-Bold.ttf")),
    "courier": FontOption("Courier New", "'Courier New', monospace", "monospace",
                          ("courbd.ttf", "Courier New Bold.ttf", "DejaVuSansMono-Bold.ttf")),
}
DEFAULT_FONT = "inter"


@dataclass(frozen=True)
class PositionPreset:
    id: str
    name: str
    x: float
    y: float


# 九宫格位置
POSITION_PRESETS = {
    p.id: p for p in (
        PositionPreset("top-left", "Top Left", 10, 10),
        PositionPreset("top-center", "Top Center", 50, 10),
        PositionPreset("top-right", "Top Right", 90, 10),
        PositionPreset("center-left", "Center Left", 10, 50),
        PositionPreset("center", "Center", 50, 50),
        PositionPreset("center-right", "Center Right", 90, 50),
        PositionPreset("bottom-left", "Bottom Left", 10, 90),
        PositionPreset("bottom-center", "Bottom Center", 50, 90),
        PositionPreset("bottom-right", "Bottom Right", 90, 90),
    )
}


def clamp(value, low, high, fallback):
    """把任意输入夹到 [low, high]；非数字输入返回 fallback"""
    if isinstance(value, bool):
        return fallback
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if math.isnan(number):
        return fallback
    return max(low, min(high, number))


def _enum(enum_cls, value, fallback):
    try:
        return enum_cls(value)
    except ValueError:
        return fallback


def normalize_color(value, fallback=DEFAULT_CUSTOM_COLOR):
    if isinstance(value, str) and _HEX_COLOR.match(value.strip()):
        return value.strip().upper()
    return fallback


def resolve_font_family(font_id):
    option = FONT_OPTIONS.get(font_id) or FONT_OPTIONS[DEFAULT_FONT]
    return option.family


@dataclass(frozen=True)
class WatermarkSpec:
    kind: WatermarkKind = WatermarkKind.TEXT
    text: str = "Sample"
    font_family: str = DEFAULT_FONT
    font_size_pct: float = 14
    color_mode: ColorMode = ColorMode.LIGHT
    custom_color: str = DEFAULT_CUSTOM_COLOR
    opacity_pct: float = 10
    rotation_deg: float = -45
    position_x_pct: float = 50
    position_y_pct: float = 50
    position_preset_id: str = "center"
    logo_size_pct: float = 25

    def __post_init__(self):
        # 冻结的 dataclass 只能用 object.__setattr__ 写回夹取后的值
        put = object.__setattr__
        put(self, "kind", _enum(WatermarkKind, self.kind, WatermarkKind.TEXT))
        put(self, "color_mode", _enum(ColorMode, self.color_mode, ColorMode.LIGHT))
        put(self, "text", "" if self.text is None else str(self.text))
        if self.font_family not in FONT_OPTIONS:
            put(self, "font_family", DEFAULT_FONT)
        put(self, "font_size_pct", clamp(self.font_size_pct, *FONT_SIZE_RANGE, FONT_SIZE_RANGE[0]))
        put(self, "logo_size_pct", clamp(self.logo_size_pct, *LOGO_SIZE_RANGE, LOGO_SIZE_RANGE[0]))
        put(self, "opacity_pct", clamp(self.opacity_pct, *OPACITY_RANGE, OPACITY_RANGE[0]))
        put(self, "rotation_deg", clamp(self.rotation_deg, *ROTATION_RANGE, 0))
        put(self, "position_x_pct", clamp(self.position_x_pct, *POSITION_RANGE, 0))
        put(self, "position_y_pct", clamp(self.position_y_pct, *POSITION_RANGE, 0))
        put(self, "custom_color", normalize_color(self.custom_color))
        put(self, "position_preset_id", str(self.position_preset_id or CUSTOM_PRESET_ID))

    @property
    def has_text(self):
        return bool(self.text.strip())

    def is_empty(self, logo=None):
        """该参数是否什么都不画（空文字，或 logo 模式下还没有 logo）"""
        if self.kind is WatermarkKind.TEXT:
            return not self.has_text
        return logo is None

    def to_dict(self):
        return {key: _export(getattr(self, name)) for name, key in _DICT_KEYS.items()}

    @classmethod
    def from_dict(cls, data, base=None):
        """
        从字典构造；缺失的键取 base（默认 DEFAULT_SPEC）的值，未知键被忽略。
        """
        base = base or DEFAULT_SPEC
        values = {}
        for name, key in _DICT_KEYS.items():
            if key in data:
                values[name] = data[key]
            elif name in data:
                values[name] = data[name]
        return replace(base, **values)


_DICT_KEYS = {
    "kind": "type",
    "text": "text",
    "font_family": "font",
    "font_size_pct": "fontSize",
    "color_mode": "fontMode",
    "custom_color": "customColor",
    "opacity_pct": "opacity",
    "rotation_deg": "rotation",
    "position_x_pct": "positionX",
    "position_y_pct": "positionY",
    "position_preset_id": "positionPreset",
    "logo_size_pct": "imageSize",
}


def _export(value):
    return value.value if isinstance(value, Enum) else value


DEFAULT_SPEC = WatermarkSpec()

SPEC_FIELDS = tuple(f.name for f in fields(WatermarkSpec))


def update_setting(spec, name, value):
    """
    修改单个字段并返回新的参数。

    手动修改 X/Y 位置时，预设会被标记为 "custom"。
    """
    if name not in SPEC_FIELDS:
        raise KeyError(name)
    changes = {name: value}
    if name in ("position_x_pct", "position_y_pct"):
        changes["position_preset_id"] = CUSTOM_PRESET_ID
    return replace(spec, **changes)


def apply_preset(spec, preset_id):
    preset = POSITION_PRESETS[preset_id]
    return replace(
        spec,
        position_x_pct=preset.x,
        position_y_pct=preset.y,
        position_preset_id=preset.id,
    )
