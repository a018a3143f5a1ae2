# -*- coding: utf-8 -*-
"""
图片批量加水印命令行工具
功能:为一批图片添加文字或 logo 水印,导出为 PNG 或打包为 zip
"""

# 标准库导入
import argparse
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path

# 第三方库导入
from PySide6.QtCore import QCoreApplication

# 本地模块导入
from imagemark.config import load_config
from imagemark.errors import ImagemarkError
from imagemark.image_io import is_image_file, read_file
from imagemark.session import WatermarkSession
from imagemark.settings import ColorMode, POSITION_PRESETS, WatermarkKind

APP_NAME = "imagemark"


def collect_inputs(paths):
    """展开目录,只保留支持的图片文件"""
    result = []
    for p in paths:
        if os.path.isdir(p):
            for name in sorted(os.listdir(p)):
                full = os.path.join(p, name)
                if os.path.isfile(full) and is_image_file(full):
                    result.append(full)
        elif is_image_file(p):
            result.append(p)
    return result


def build_parser():
    parser = argparse.ArgumentParser(prog=APP_NAME, description="为图片批量添加水印")
    parser.add_argument("inputs", nargs="+", help="图片文件或目录")
    parser.add_argument("-o", "--output", required=True, help="输出目录")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--text", help="文字水印内容")
    group.add_argument("--logo", help="logo 图片路径")
    parser.add_argument("--font", help="字体 id")
    parser.add_argument("--size", type=float, help="字号 / logo 宽度 (图片宽度的百分比)")
    parser.add_argument("--opacity", type=float, help="不透明度 1-100")
    parser.add_argument("--rotation", type=float, help="旋转角度 -180..180")
    parser.add_argument("--position", choices=sorted(POSITION_PRESETS), help="位置预设")
    parser.add_argument("--color", help="light / dark / #RRGGBB")
    parser.add_argument("--zip", action="store_true", help="打包为一个 zip 文件")
    parser.add_argument("--config", help="配置文件路径")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def spec_from_args(spec, args):
    changes = {}
    if args.text is not None:
        changes.update(kind=WatermarkKind.TEXT, text=args.text)
    if args.logo is not None:
        changes["kind"] = WatermarkKind.LOGO
    if args.font is not None:
        changes["font_family"] = args.font
    if args.size is not None:
        key = "logo_size_pct" if args.logo else "font_size_pct"
        changes[key] = args.size
    if args.opacity is not None:
        changes["opacity_pct"] = args.opacity
    if args.rotation is not None:
        changes["rotation_deg"] = args.rotation
    if args.color:
        if args.color.startswith("#"):
            changes.update(color_mode=ColorMode.CUSTOM, custom_color=args.color)
        else:
            changes["color_mode"] = ColorMode(args.color)
    return replace(spec, **changes)


def on_export_progress(done, total, success, message):
    status = "已保存" if success else "错误"
    print(f"[{done}/{total}] {status}: {message}")


def run(args):
    config = load_config(args.config)
    session = WatermarkSession(config)
    session.error.connect(lambda msg: print(f"警告: {msg}", file=sys.stderr))

    files = collect_inputs(args.inputs)
    if not files:
        print("没有找到可处理的图片", file=sys.stderr)
        return 1

    if args.logo and not session.load_logo(*read_file(args.logo)):
        return 1

    report = session.ingest(read_file(path) for path in files)
    spec = spec_from_args(session.global_state.spec, args)
    session.replace_global(spec)
    if args.position:
        session.apply_preset(args.position)
    session.refresh_now()

    if args.zip:
        result = session.export_zip()
        Path(args.output).mkdir(parents=True, exist_ok=True)
        dst = Path(args.output) / result.filename
        dst.write_bytes(result.data)
        print(f"已保存: {dst} ({len(result.report.succeeded)} 张)")
        export_report = result.report
    else:
        export_report = session.export_to_directory(args.output, on_export_progress)

    for failure in export_report.failures:
        print(f"导出失败 {failure.name}: {failure.message}", file=sys.stderr)
    return 0 if export_report.ok and not report.failures else 1


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    # 防抖刷新依赖 Qt 事件循环对象
    app = QCoreApplication.instance() or QCoreApplication([APP_NAME])  # noqa: F841
    try:
        return run(args)
    except (ImagemarkError, OSError) as e:
        print(f"错误: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"参数错误: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
