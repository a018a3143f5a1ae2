import pytest

from imagemark.errors import VideoError, VideoNotFound
from imagemark.settings import DEFAULT_SPEC
from imagemark.video import VideoPipeline


@pytest.fixture
def pipeline(tmp_path):
    (tmp_path / "clip.mp4").write_bytes(b"\x00\x01video")
    return VideoPipeline(tmp_path)


def test_process_copies_bytes(pipeline, tmp_path):
    result = pipeline.process("clip.mp4", DEFAULT_SPEC.to_dict())
    assert result.output_filename.startswith("processed-")
    assert result.output_filename.endswith("-clip.mp4")
    assert result.download_path == f"/api/video/download/{result.output_filename}"
    assert (tmp_path / result.output_filename).read_bytes() == b"\x00\x01video"
    assert pipeline.download(result.output_filename) == b"\x00\x01video"


def test_missing_and_invalid_files(pipeline):
    with pytest.raises(VideoError):
        pipeline.process("")
    with pytest.raises(VideoNotFound):
        pipeline.process("nope.mp4")
    with pytest.raises(VideoError):
        pipeline.process("../clip.mp4")
    with pytest.raises(VideoNotFound):
        pipeline.download("nope.mp4")


def test_job_progress(pipeline):
    with pytest.raises(VideoNotFound):
        pipeline.progress("job-1")
    pipeline.update_job("job-1", 40, "processing")
    assert pipeline.progress("job-1").progress == 40
    pipeline.update_job("job-1", 100, "completed", output_url="/x")
    assert pipeline.progress("job-1").status == "completed"
