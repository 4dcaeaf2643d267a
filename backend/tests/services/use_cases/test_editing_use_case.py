"""
Tests for shortreel.services.use_cases.editing_use_case
"""

import asyncio
import json

import pytest

from shortreel.core.exceptions import (
    AssemblyFailed,
    ConflictError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from shortreel.models.status import JobMode, JobStatus
from shortreel.services.infrastructure.orchestration import JobManager
from shortreel.services.use_cases import (
    Regeneration,
    RegenerateVideoUseCase,
    ReplaceVoiceUseCase,
    VoiceReplacement,
)
from shortreel.services.use_cases.editing_use_case import parse_captions


class StubAssembler:
    def __init__(self, fail=None, delay=0):
        self.fail = set(fail or ())
        self.delay = delay
        self.calls = []

    async def _run(self, operation, request):
        self.calls.append((operation, request))
        if self.delay:
            await asyncio.sleep(self.delay)
        if operation in self.fail:
            raise AssemblyFailed(operation, "stubbed failure")
        request.output.parent.mkdir(parents=True, exist_ok=True)
        request.output.write_bytes(b"video")
        return request.output

    async def assemble_slideshow(self, request):
        return await self._run("slideshow", request)

    async def mux_audio_video(self, request):
        return await self._run("mux", request)

    async def burn_captions(self, request):
        return await self._run("captions", request)

    async def replace_voice(self, request):
        return await self._run("replace_voice", request)

    def operations(self):
        return [operation for operation, _ in self.calls]


@pytest.fixture
def dirs(tmp_path):
    artifact_dirs = {name: tmp_path / name for name in ("videos", "draft", "no_voice", "scripts")}
    for directory in artifact_dirs.values():
        directory.mkdir()
    temp_dir = tmp_path / "temp"
    temp_dir.mkdir()
    return artifact_dirs, temp_dir


@pytest.fixture
def upload(tmp_path):
    audio = tmp_path / "voice.mp3"
    audio.write_bytes(b"mp3")
    return audio


def _completed_job(manager, artifact_dirs, mode=JobMode.FINAL):
    job_id = manager.create_job("Volcanoes", 30, mode)
    video = artifact_dirs["videos"] / f"video_{job_id}.mp4"
    video.write_bytes(b"mp4")
    result = {
        "mode": mode.value,
        "artifacts": {"video": {"path": str(video), "filename": video.name, "category": "videos"}},
        "script": {"captions": [{"text": "Lava!", "start_time": 0.0, "duration": 30.0}]},
        "warnings": [],
    }
    manager.update_job(job_id, status=JobStatus.COMPLETED, result=result)
    return job_id, video


class TestParseCaptions:

    def test_absent(self):
        assert parse_captions(None) is None
        assert parse_captions("  ") is None

    def test_camel_case_fields(self):
        captions = parse_captions(json.dumps([{"text": "Hi", "startTime": 1, "duration": 2}]))
        assert captions[0].start_time == 1.0
        assert captions[0].end_time == 3.0

    @pytest.mark.parametrize("raw", ["not json", '{"text": "Hi"}', '[{"text": "Hi", "startTime": "0s"}]'])
    def test_invalid(self, raw):
        with pytest.raises(ValidationError):
            parse_captions(raw)


@pytest.mark.asyncio
class TestReplaceVoice:

    async def test_writes_new_video(self, dirs, upload):
        artifact_dirs, _ = dirs
        source = artifact_dirs["no_voice"] / "video_a_no_voice.mp4"
        source.write_bytes(b"mp4")
        assembler = StubAssembler()
        use_case = ReplaceVoiceUseCase(assembler, artifact_dirs=artifact_dirs, output_dir=artifact_dirs["videos"])

        response = await use_case.execute(VoiceReplacement(filename=source.name, audio=upload, category="no_voice"))

        _, request = assembler.calls[0]
        assert request.video == source
        assert request.audio == upload
        assert response["video"]["filename"].startswith("video_replaced_voice_")
        assert response["video"]["url"] == f"/api/video/download/{response['video']['filename']}"

    async def test_unknown_video(self, dirs, upload):
        artifact_dirs, _ = dirs
        use_case = ReplaceVoiceUseCase(StubAssembler(), artifact_dirs=artifact_dirs)
        with pytest.raises(NotFoundError):
            await use_case.execute(VoiceReplacement(filename="missing.mp4", audio=upload))

    async def test_path_traversal_is_not_found(self, dirs, upload):
        artifact_dirs, _ = dirs
        use_case = ReplaceVoiceUseCase(StubAssembler(), artifact_dirs=artifact_dirs)
        with pytest.raises(NotFoundError):
            await use_case.execute(VoiceReplacement(filename="../../etc/passwd", audio=upload))

    async def test_transcripts_are_rejected(self, dirs, upload):
        artifact_dirs, _ = dirs
        use_case = ReplaceVoiceUseCase(StubAssembler(), artifact_dirs=artifact_dirs)
        with pytest.raises(ValidationError):
            await use_case.execute(VoiceReplacement(filename="x.txt", audio=upload, category="scripts"))

    async def test_failure_leaves_no_output(self, dirs, upload):
        artifact_dirs, _ = dirs
        source = artifact_dirs["videos"] / "video_a.mp4"
        source.write_bytes(b"mp4")
        output_dir = artifact_dirs["draft"]
        use_case = ReplaceVoiceUseCase(
            StubAssembler(fail={"replace_voice"}), artifact_dirs=artifact_dirs, output_dir=output_dir
        )

        with pytest.raises(AssemblyFailed):
            await use_case.execute(VoiceReplacement(filename=source.name, audio=upload))
        assert list(output_dir.iterdir()) == []

    async def test_timeout(self, dirs, upload):
        artifact_dirs, _ = dirs
        (artifact_dirs["videos"] / "video_a.mp4").write_bytes(b"mp4")
        use_case = ReplaceVoiceUseCase(StubAssembler(delay=5), artifact_dirs=artifact_dirs, timeout=0.01)
        with pytest.raises(ServiceUnavailableError, match="timed out"):
            await use_case.execute(VoiceReplacement(filename="video_a.mp4", audio=upload))


@pytest.mark.asyncio
class TestRegenerateVideo:

    def _use_case(self, manager, dirs, assembler):
        artifact_dirs, temp_dir = dirs
        return RegenerateVideoUseCase(
            manager, assembler, output_dir=artifact_dirs["videos"], temp_dir=temp_dir
        )

    async def test_new_voice_is_muxed_onto_existing_video(self, dirs, upload):
        manager = JobManager()
        job_id, video = _completed_job(manager, dirs[0])
        assembler = StubAssembler()

        response = await self._use_case(manager, dirs, assembler).execute(Regeneration(job_id=job_id, audio=upload))

        assert assembler.operations() == ["replace_voice"]
        assert assembler.calls[0][1].video == video
        assert response["video"]["filename"].startswith(f"video_{job_id}_regenerated_")
        assert manager.get_job(job_id).logs[-1].message.startswith("Regenerated video:")

    async def test_new_images_rebuild_slideshow_with_job_captions(self, dirs, upload, tmp_path):
        manager = JobManager()
        job_id, _ = _completed_job(manager, dirs[0])
        image = tmp_path / "new.jpg"
        image.write_bytes(b"jpg")
        assembler = StubAssembler()

        await self._use_case(manager, dirs, assembler).execute(
            Regeneration(job_id=job_id, images=[image], audio=upload)
        )

        assert assembler.operations() == ["slideshow", "mux"]
        slideshow_request = assembler.calls[0][1]
        assert slideshow_request.total_duration == 30.0
        mux_request = assembler.calls[1][1]
        assert [c.text for c in mux_request.captions] == ["Lava!"]
        assert list(dirs[1].iterdir()) == []

    async def test_edited_captions_without_audio_are_burned_in(self, dirs, tmp_path):
        manager = JobManager()
        job_id, _ = _completed_job(manager, dirs[0])
        image = tmp_path / "new.jpg"
        image.write_bytes(b"jpg")
        assembler = StubAssembler()
        captions = json.dumps([{"text": "Magma rising", "startTime": 0, "duration": 30}])

        await self._use_case(manager, dirs, assembler).execute(
            Regeneration(job_id=job_id, images=[image], captions=captions)
        )

        assert assembler.operations() == ["slideshow", "captions"]
        assert assembler.calls[1][1].captions[0].text == "Magma rising"

    async def test_result_of_finished_job_is_unchanged(self, dirs, upload):
        manager = JobManager()
        job_id, _ = _completed_job(manager, dirs[0])
        before = manager.get_job(job_id).result

        await self._use_case(manager, dirs, StubAssembler()).execute(Regeneration(job_id=job_id, audio=upload))

        job = manager.get_job(job_id)
        assert job.status is JobStatus.COMPLETED
        assert job.result == before

    async def test_unknown_job(self, dirs, upload):
        with pytest.raises(NotFoundError):
            await self._use_case(JobManager(), dirs, StubAssembler()).execute(
                Regeneration(job_id="0" * 32, audio=upload)
            )

    async def test_unfinished_job_conflicts(self, dirs, upload):
        manager = JobManager()
        job_id = manager.create_job("Volcanoes", 30, JobMode.FINAL)
        with pytest.raises(ConflictError):
            await self._use_case(manager, dirs, StubAssembler()).execute(Regeneration(job_id=job_id, audio=upload))

    async def test_nothing_to_change(self, dirs):
        manager = JobManager()
        job_id, _ = _completed_job(manager, dirs[0])
        with pytest.raises(ValidationError):
            await self._use_case(manager, dirs, StubAssembler()).execute(Regeneration(job_id=job_id))

    async def test_caption_edit_needs_images(self, dirs, upload):
        manager = JobManager()
        job_id, _ = _completed_job(manager, dirs[0])
        with pytest.raises(ValidationError, match="requires new images"):
            await self._use_case(manager, dirs, StubAssembler()).execute(
                Regeneration(job_id=job_id, audio=upload, captions='[{"text": "Hi", "startTime": 0, "duration": 2}]')
            )

    async def test_missing_source_video(self, dirs, upload):
        manager = JobManager()
        job_id, video = _completed_job(manager, dirs[0])
        video.unlink()
        with pytest.raises(NotFoundError, match="no longer available"):
            await self._use_case(manager, dirs, StubAssembler()).execute(Regeneration(job_id=job_id, audio=upload))

    async def test_failed_render_cleans_up(self, dirs, upload, tmp_path):
        manager = JobManager()
        job_id, _ = _completed_job(manager, dirs[0])
        image = tmp_path / "new.jpg"
        image.write_bytes(b"jpg")
        artifact_dirs, temp_dir = dirs

        with pytest.raises(AssemblyFailed):
            await self._use_case(manager, dirs, StubAssembler(fail={"mux"})).execute(
                Regeneration(job_id=job_id, images=[image], audio=upload)
            )

        assert list(temp_dir.iterdir()) == []
        assert [p.name for p in artifact_dirs["videos"].iterdir()] == [f"video_{job_id}.mp4"]
