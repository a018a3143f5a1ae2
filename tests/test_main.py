import zipfile

import pytest

from conftest import png_bytes, solid
from main import build_parser, collect_inputs, main, spec_from_args
from imagemark.settings import DEFAULT_SPEC, ColorMode, WatermarkKind


@pytest.fixture
def inputs(tmp_path):
    src = tmp_path / "in"
    src.mkdir()
    (src / "one.png").write_bytes(png_bytes(solid((80, 60), (200, 200, 200))))
    (src / "two.png").write_bytes(png_bytes(solid((60, 80), (20, 20, 20))))
    (src / "notes.txt").write_text("skip me")
    return src


def test_collect_inputs_filters_extensions(inputs):
    names = [p.rsplit("/", 1)[-1] for p in collect_inputs([str(inputs)])]
    assert names == ["one.png", "two.png"]


def test_spec_from_args():
    args = build_parser().parse_args(
        ["x.png", "-o", "out", "--text", "Hi", "--size", "20", "--opacity", "500", "--color", "#00ff00"]
    )
    spec = spec_from_args(DEFAULT_SPEC, args)
    assert spec.kind is WatermarkKind.TEXT
    assert spec.text == "Hi"
    assert spec.font_size_pct == 20
    assert spec.opacity_pct == 100
    assert spec.color_mode is ColorMode.CUSTOM
    assert spec.custom_color == "#00FF00"


def test_cli_writes_pngs(qapp, inputs, tmp_path, capsys):
    out = tmp_path / "out"
    code = main([str(inputs), "-o", str(out), "--text", "Hi", "--position", "bottom-right"])
    assert code == 0
    assert sorted(p.name for p in out.iterdir()) == ["watermarked-one.png", "watermarked-two.png"]
    assert "[2/2]" in capsys.readouterr().out


def test_cli_zip(qapp, inputs, tmp_path):
    out = tmp_path / "out"
    assert main([str(inputs), "-o", str(out), "--zip"]) == 0
    (archive,) = list(out.iterdir())
    with zipfile.ZipFile(archive) as zf:
        assert sorted(zf.namelist()) == ["watermarked-one.png", "watermarked-two.png"]


def test_cli_bad_logo(qapp, inputs, tmp_path):
    logo = tmp_path / "logo.png"
    logo.write_bytes(b"nope")
    assert main([str(inputs), "-o", str(tmp_path / "out"), "--logo", str(logo)]) == 1


def test_cli_without_images(qapp, tmp_path):
    assert main([str(tmp_path), "-o", str(tmp_path / "out")]) == 1
