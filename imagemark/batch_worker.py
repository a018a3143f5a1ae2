# imagemark/batch_worker.py
import logging
from dataclasses import replace

from PySide6.QtCore import QObject, QTimer, Signal

from imagemark.overrides import effective_spec
from imagemark.watermark import render

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 300


def refresh_entity(entity, global_state, logo=None, font_dirs=()):
    """用实体的有效参数重新合成，返回带新 output 的实体"""
    spec = effective_spec(entity, global_state)
    try:
        output = render(entity.source, spec, logo, font_dirs)
    except Exception as e:
        # 单张失败只影响这一张：显示未加水印的原图
        logger.exception("渲染 %s 失败: %s", entity.file.name, e)
        output = entity.source.convert("RGBA")
    return replace(entity, output=output)


def refresh(entities, global_state, logo=None, font_dirs=()):
    """
    逐张重新合成整批图片。

    参数:
        entities: ImageEntity 序列
        global_state: GlobalWatermarkState
        logo: LogoImage 或 None

    返回:
        新的实体列表，顺序与输入一致
    """
    logger.debug("刷新 %d 张图片 (revision %d)", len(entities), global_state.revision)
    return [refresh_entity(e, global_state, logo, font_dirs) for e in entities]


class RefreshScheduler(QObject):
    """
    只有一个待执行槽位的防抖队列。

    schedule() 会替换尚未执行的任务并重新计时，只有最后一次安排的任务
    在静默 delay_ms 毫秒后执行；run_now() 丢弃待执行任务并立即执行。

    信号:
        fired: 任务执行完毕后发送
    """
    fired = Signal()

    def __init__(self, delay_ms=DEFAULT_DEBOUNCE_MS, parent=None):
        super().__init__(parent)
        self._pending = None
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(delay_ms)
        self._timer.timeout.connect(self.flush)

    @property
    def delay_ms(self):
        return self._timer.interval()

    @delay_ms.setter
    def delay_ms(self, value):
        self._timer.setInterval(max(0, int(value)))

    @property
    def pending(self):
        return self._pending is not None

    def schedule(self, task):
        self._pending = task
        self._timer.start()  # 重新计时

    def cancel(self):
        self._timer.stop()
        self._pending = None

    def flush(self):
        """立即执行待执行的任务（如果有）"""
        task = self._pending
        self.cancel()
        if task is not None:
            self._run(task)

    def run_now(self, task):
        self.cancel()
        self._run(task)

    def _run(self, task):
        task()
        self.fired.emit()
