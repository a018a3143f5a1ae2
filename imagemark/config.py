# imagemark/config.py
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from imagemark.errors import ImagemarkError
from imagemark.settings import DEFAULT_SPEC, WatermarkSpec

logger = logging.getLogger(__name__)

APP_DIR = Path.home() / '.imagemark'
CONFIG_FILE = APP_DIR / 'config.json'
CONFIG_ENV = 'IMAGEMARK_CONFIG'


@dataclass(frozen=True)
class AppConfig:
    debounce_ms: int = 300
    export_workers: int = 2
    font_dirs: tuple = ()
    defaults: WatermarkSpec = field(default=DEFAULT_SPEC)


def config_path():
    env = os.environ.get(CONFIG_ENV)
    return Path(env) if env else CONFIG_FILE


def load_config(path=None):
    """
    读取 JSON 配置；文件不存在时返回默认配置。

    示例:
        {"debounce_ms": 200, "font_dirs": ["/usr/share/fonts"],
         "defaults": {"text": "© me", "opacity": 30}}
    """
    path = Path(path) if path else config_path()
    if not path.exists():
        return AppConfig()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ImagemarkError(f"无法读取配置 {path}: {e}") from e
    if not isinstance(data, dict):
        raise ImagemarkError(f"配置 {path} 必须是 JSON 对象")

    logger.debug("载入配置 %s", path)
    try:
        debounce_ms = max(0, int(data.get('debounce_ms', 300)))
        export_workers = max(1, int(data.get('export_workers', 2)))
    except (TypeError, ValueError) as e:
        raise ImagemarkError(f"配置 {path} 中的数值无效: {e}") from e
    return AppConfig(
        debounce_ms=debounce_ms,
        export_workers=export_workers,
        font_dirs=tuple(data.get('font_dirs', ())),
        defaults=WatermarkSpec.from_dict(data.get('defaults', {})),
    )
