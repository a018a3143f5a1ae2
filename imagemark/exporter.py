# imagemark/exporter.py
import concurrent.futures
import io
import logging
import os
import pathlib
import time
import zipfile
from dataclasses import dataclass, field
from typing import List

from imagemark.errors import EncodeFailure

logger = logging.getLogger(__name__)

OUTPUT_PREFIX = "watermarked-"
ZIP_PREFIX = "imagemark-watermarked-"


@dataclass(frozen=True)
class ExportedFile:
    filename: str
    data: bytes


@dataclass(frozen=True)
class ExportFailure:
    entity_id: str
    name: str
    message: str


@dataclass
class ExportReport:
    """批量导出结果：部分失败不影响其它图片"""
    succeeded: List[str] = field(default_factory=list)
    failures: List[ExportFailure] = field(default_factory=list)

    @property
    def ok(self):
        return not self.failures


@dataclass(frozen=True)
class ZipExport:
    filename: str
    data: bytes
    report: ExportReport


def output_filename(name):
    """photo.final.jpg -> watermarked-photo.png"""
    stem = name.split(".")[0] or "image"
    return f"{OUTPUT_PREFIX}{stem}.png"


def encode_png(img):
    buf = io.BytesIO()
    try:
        img.save(buf, 'PNG', compress_level=6)
    except (OSError, ValueError) as e:
        raise EncodeFailure(f"PNG 编码失败: {e}") from e
    return buf.getvalue()


def export_entity(entity):
    if entity.output is None:
        raise EncodeFailure(f"{entity.file.name} 尚未生成水印结果")
    return ExportedFile(output_filename(entity.file.name), encode_png(entity.output))


def unique_name(name, used):
    """在 used 中不重名时原样返回，否则追加 _1, _2 ..."""
    stem, ext = os.path.splitext(name)
    candidate = name
    i = 1
    while candidate in used:
        candidate = f"{stem}_{i}{ext}"
        i += 1
    used.add(candidate)
    return candidate


def export_zip(entities, now=None):
    """
    把所有实体的结果打包为 zip。

    某张图编码失败时记入 report.failures，其它图片照常打包。
    """
    report = ExportReport()
    used = set()
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, mode='w', compression=zipfile.ZIP_DEFLATED) as zf:
        for entity in entities:
            try:
                exported = export_entity(entity)
            except EncodeFailure as e:
                logger.warning("导出失败 %s: %s", entity.file.name, e)
                report.failures.append(ExportFailure(entity.id, entity.file.name, str(e)))
                continue
            name = unique_name(exported.filename, used)
            zf.writestr(name, exported.data)
            report.succeeded.append(name)

    stamp = int((time.time() if now is None else now) * 1000)
    return ZipExport(f"{ZIP_PREFIX}{stamp}.zip", buf.getvalue(), report)


def ensure_output_path(name, out_dir, used=None):
    """
    返回 out_dir 下不会覆盖已有文件的输出路径。
    used: 本批次已分配的文件名集合
    """
    used = set() if used is None else used
    src = pathlib.Path(name)
    dst = pathlib.Path(out_dir) / src.name
    # 如果文件存在，追加序号
    i = 1
    while dst.exists() or dst.name in used:
        dst = pathlib.Path(out_dir) / f"{src.stem}_{i}{src.suffix}"
        i += 1
    used.add(dst.name)
    return str(dst)


def export_to_directory(entities, out_dir, max_workers=2, progress_callback=None):
    """
    把结果写入目录。
    progress_callback(idx, total, success, message)
    """
    pathlib.Path(out_dir).mkdir(parents=True, exist_ok=True)
    report = ExportReport()
    used = set()
    tasks = [
        (entity, ensure_output_path(output_filename(entity.file.name), out_dir, used))
        for entity in entities
    ]
    total = len(tasks)

    def worker(entity, dst):
        try:
            data = export_entity(entity).data
            with open(dst, 'wb') as f:
                f.write(data)
            return True, dst
        except (EncodeFailure, OSError) as e:
            return False, str(e)

    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as ex:
        futures = {ex.submit(worker, entity, dst): entity for entity, dst in tasks}
        for i, f in enumerate(concurrent.futures.as_completed(futures), start=1):
            entity = futures[f]
            success, msg = f.result()
            if success:
                report.succeeded.append(msg)
            else:
                logger.warning("导出失败 %s: %s", entity.file.name, msg)
                report.failures.append(ExportFailure(entity.id, entity.file.name, msg))
            if progress_callback:
                progress_callback(i, total, success, msg)
    return report
