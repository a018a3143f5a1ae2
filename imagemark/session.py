# imagemark/session.py
"""
一次批量加水印的工作区：图片列表、全局参数、logo，以及刷新调度。

设置面板只通过这里修改参数：拖动滑块等连续修改走防抖刷新，
导入图片、保存单张设置、重置等离散操作立即刷新。
"""
import logging
from dataclasses import dataclass, field
from typing import List

from PySide6.QtCore import QObject, Signal

from imagemark import overrides
from imagemark.batch_worker import RefreshScheduler, refresh, refresh_entity
from imagemark.brightness import analyze_brightness
from imagemark.config import AppConfig
from imagemark.entity import FileInfo, ImageEntity
from imagemark.errors import DecodeFailure
from imagemark.exporter import export_entity, export_to_directory, export_zip
from imagemark.image_io import decode_image, generate_thumbnail, load_logo
from imagemark.overrides import GlobalWatermarkState
from imagemark.settings import ColorMode, apply_preset, update_setting

logger = logging.getLogger(__name__)


@dataclass
class IngestReport:
    added: List[ImageEntity] = field(default_factory=list)
    failures: List[DecodeFailure] = field(default_factory=list)


class WatermarkSession(QObject):
    """
    信号:
        changed: 每次刷新完成后发送
        error: 解码失败等需要提示用户的错误 (消息)
    """
    changed = Signal()
    error = Signal(str)

    def __init__(self, config=None, parent=None):
        super().__init__(parent)
        self.config = config or AppConfig()
        self.global_state = GlobalWatermarkState(self.config.defaults)
        self.entities = []
        self.logo = None
        self.scheduler = RefreshScheduler(self.config.debounce_ms, self)

    # ---------- 查询 ----------

    def get(self, entity_id):
        for entity in self.entities:
            if entity.id == entity_id:
                return entity
        raise KeyError(entity_id)

    def effective_spec(self, entity_id):
        return overrides.effective_spec(self.get(entity_id), self.global_state)

    def thumbnail(self, entity_id, max_size=256):
        return generate_thumbnail(self.get(entity_id).display_image, max_size)

    # ---------- 刷新 ----------

    def _refresh_all(self):
        self.entities = refresh(self.entities, self.global_state, self.logo, self.config.font_dirs)
        self.changed.emit()

    def refresh_now(self):
        self.scheduler.run_now(self._refresh_all)

    def schedule_refresh(self):
        self.scheduler.schedule(self._refresh_all)

    # ---------- 图片 ----------

    def ingest(self, files):
        """
        导入 (文件名, 字节) 列表。解码失败的文件不会生成实体。
        第一张新图的亮度决定默认文字颜色（已选自定义颜色时不变）。
        """
        report = IngestReport()
        for name, data in files:
            try:
                img = decode_image(data, name)
            except DecodeFailure as e:
                report.failures.append(e)
                self.error.emit(str(e))
                continue
            report.added.append(ImageEntity(img, FileInfo(name, len(data))))

        if report.added:
            spec = self.global_state.spec
            if spec.color_mode is not ColorMode.CUSTOM:
                mode = analyze_brightness(report.added[0].source)
                self.global_state = self.global_state.with_spec(
                    update_setting(spec, "color_mode", mode)
                )
            self.entities = self.entities + report.added
            self.refresh_now()
        return report

    def remove(self, entity_id):
        self.entities = [e for e in self.entities if e.id != entity_id]
        self.changed.emit()

    def clear(self):
        self.scheduler.cancel()
        self.entities = []
        self.logo = None
        self.changed.emit()

    # ---------- 全局参数 ----------

    def update_global(self, name, value):
        self.replace_global(update_setting(self.global_state.spec, name, value))

    def apply_preset(self, preset_id):
        self.replace_global(apply_preset(self.global_state.spec, preset_id))

    def replace_global(self, spec):
        state = self.global_state.with_spec(spec)
        if state is self.global_state:
            return
        self.global_state = state
        self.schedule_refresh()

    def reset_settings(self):
        self.global_state = self.global_state.with_spec(self.config.defaults)
        self.refresh_now()

    # ---------- 单张覆盖 ----------

    def set_override(self, entity_id, spec):
        """保存单张图片的设置；与全局参数相同时恢复为使用全局参数"""
        self.entities = [
            refresh_entity(
                overrides.set_override(e, spec, self.global_state),
                self.global_state, self.logo, self.config.font_dirs,
            ) if e.id == entity_id else e
            for e in self.entities
        ]
        self.changed.emit()

    def clear_override(self, entity_id):
        self.set_override(entity_id, self.global_state.spec)

    # ---------- logo ----------

    def load_logo(self, name, data):
        try:
            self.logo = load_logo(data, name)
        except DecodeFailure as e:
            self.error.emit(str(e))
            return False
        self.refresh_now()
        return True

    def clear_logo(self):
        self.logo = None
        self.refresh_now()

    # ---------- 导出 ----------

    def export_one(self, entity_id):
        self.scheduler.flush()
        return export_entity(self.get(entity_id))

    def export_zip(self, now=None):
        self.scheduler.flush()
        return export_zip(self.entities, now)

    def export_to_directory(self, out_dir, progress_callback=None):
        self.scheduler.flush()
        return export_to_directory(
            self.entities, out_dir, self.config.export_workers, progress_callback
        )
