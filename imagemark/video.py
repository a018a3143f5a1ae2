# imagemark/video.py
"""
视频水印的占位接口。

这里不做真正的转码：process() 只把上传的文件复制一份并返回下载地址，
用于保持与前端约定的接口形状。
"""
import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from imagemark.errors import VideoError, VideoNotFound

logger = logging.getLogger(__name__)

SIMULATED_PROCESSING_MS = 2000


@dataclass(frozen=True)
class VideoResult:
    output_filename: str
    download_path: str
    processing_time_ms: int = SIMULATED_PROCESSING_MS


@dataclass(frozen=True)
class VideoJob:
    status: str            # processing / completed / error
    progress: int
    output_url: Optional[str] = None
    error: Optional[str] = None


class VideoPipeline:
    def __init__(self, uploads_dir):
        self.uploads_dir = Path(uploads_dir)
        self.jobs = {}

    def _path(self, filename):
        # 只接受 uploads 目录下的文件名
        name = Path(filename).name
        if not name or name != filename:
            raise VideoError(f"非法文件名: {filename!r}")
        return self.uploads_dir / name

    def process(self, filename, settings=None):
        if not filename:
            raise VideoError("No filename provided")
        src = self._path(filename)
        if not src.exists():
            raise VideoNotFound(f"Video file not found: {filename}")

        logger.debug("水印参数(未使用): %s", settings)
        output = f"processed-{int(time.time() * 1000)}-{filename}"
        try:
            shutil.copyfile(src, self.uploads_dir / output)
        except OSError as e:
            raise VideoError(f"Failed to process video: {e}") from e
        logger.info("视频占位处理完成 %s -> %s", filename, output)
        return VideoResult(output, f"/api/video/download/{output}")

    def update_job(self, job_id, progress, status, output_url=None, error=None):
        self.jobs[job_id] = VideoJob(status, progress, output_url, error)

    def progress(self, job_id):
        try:
            return self.jobs[job_id]
        except KeyError:
            raise VideoNotFound(f"Job not found: {job_id}") from None

    def download(self, filename):
        path = self._path(filename)
        if not path.exists():
            raise VideoNotFound(f"File not found: {filename}")
        return path.read_bytes()
