"""
Tests for the pipeline job orchestrator.
"""

import asyncio
from pathlib import Path

import httpx
import pytest

from conftest import FakeSearchClient, OAuthServer
from shortsbot.core.config import Settings
from shortsbot.integrations.elevenlabs_client import ElevenLabsClient
from shortsbot.integrations.openai_client import OpenAIImageClient
from shortsbot.models.enums import JobStatus, can_transition
from shortsbot.schemas.job import Job, RunOptions
from shortsbot.schemas.media import SceneAudio, SceneImage, VideoArtifact
from shortsbot.schemas.script import Script
from shortsbot.services.account import VIDEO_NOT_FOUND, AccountConnector
from shortsbot.services.orchestrator import (
    DEFAULT_KEYWORDS,
    STUB_VIDEO_ID,
    STUB_VIDEO_URL,
    JobOrchestrator,
    build_video_meta,
)
from shortsbot.services.topics import STUB_TOPIC, TopicCollector
from shortsbot.stores.jobs import InMemoryJobStore


class RecordingJobStore(InMemoryJobStore):
    """Job store that remembers every status it was asked to save."""

    def __init__(self) -> None:
        super().__init__()
        self.saved_statuses: list[JobStatus] = []

    async def save(self, job: Job) -> None:
        self.saved_statuses.append(job.status)
        await super().save(job)


class FailingAssembler:
    async def assemble(self, script, scene_images, scene_audios) -> VideoArtifact:
        raise RuntimeError("encoder crashed")


class WrongDurationAssembler:
    async def assemble(self, script, scene_images, scene_audios) -> VideoArtifact:
        return VideoArtifact(
            video_path="/tmp/x.mp4",
            thumbnail_path="/tmp/x.jpg",
            duration_seconds=script.total_duration_seconds + 1,
        )


class FileAssembler:
    """Writes a real, upload-sized file."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self.calls: list[tuple[list[SceneImage], list[SceneAudio]]] = []

    async def assemble(self, script: Script, scene_images, scene_audios) -> VideoArtifact:
        self.calls.append((scene_images, scene_audios))
        path = self.directory / "video.mp4"
        path.write_bytes(b"\x00" * 4096)
        return VideoArtifact(
            video_path=str(path),
            thumbnail_path=str(self.directory / "thumb.jpg"),
            duration_seconds=script.total_duration_seconds,
        )


class FakeNarration:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls = 0

    async def synthesize(self, scenes) -> list[SceneAudio]:
        self.calls += 1
        if self.error:
            raise self.error
        return [SceneAudio(scene_index=s.scene_index, audio_path=f"/tmp/{s.scene_index}.mp3") for s in scenes]


class BlockingCollector:
    """Topic collector that waits until released."""

    def __init__(self, inner: TopicCollector) -> None:
        self.inner = inner
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def collect(self, keywords, max_per_keyword: int = 5):
        self.started.set()
        await self.release.wait()
        return await self.inner.collect(keywords, max_per_keyword)


class BlockingAssembler:
    """Video assembler that waits until released."""

    def __init__(self, inner) -> None:
        self.inner = inner
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def assemble(self, script, scene_images, scene_audios) -> VideoArtifact:
        self.started.set()
        await self.release.wait()
        return await self.inner.assemble(script, scene_images, scene_audios)


class BlockingStatusConnector:
    """Account connector whose status check waits until released."""

    def __init__(self, inner: AccountConnector) -> None:
        self.inner = inner
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def get_connection_status(self, key: str = "default"):
        self.started.set()
        await self.release.wait()
        return await self.inner.get_connection_status(key)

    async def upload_video(self, *args, **kwargs):
        return await self.inner.upload_video(*args, **kwargs)


class ExplodingCollector:
    async def collect(self, keywords, max_per_keyword: int = 5):
        raise ValueError("collector bug")


async def connect(connector: AccountConnector, oauth_server: OAuthServer) -> None:
    oauth_server.token_responses.append(
        httpx.Response(200, json={"access_token": "at", "refresh_token": "rt", "expires_in": 3600})
    )
    assert (await connector.exchange_code_and_store("code")).ok


def build(orchestrator: JobOrchestrator, **overrides) -> JobOrchestrator:
    """Copy an orchestrator's collaborators, replacing some."""
    kwargs = {
        "job_store": orchestrator.job_store,
        "topic_collector": orchestrator.topic_collector,
        "script_composer": orchestrator.script_composer,
        "scene_renderer": orchestrator.scene_renderer,
        "narration_synthesizer": orchestrator.narration_synthesizer,
        "video_assembler": orchestrator.video_assembler,
        "account_connector": orchestrator.account_connector,
    }
    kwargs.update(overrides)
    return JobOrchestrator(**kwargs)


class TestRun:
    """Tests for JobOrchestrator.run."""

    @pytest.mark.asyncio
    async def test_unconnected_account_records_stub_upload(self, orchestrator: JobOrchestrator) -> None:
        job = await orchestrator.run(["ai"])

        assert job.status == JobStatus.DONE
        assert job.video_id == STUB_VIDEO_ID
        assert job.video_url == STUB_VIDEO_URL
        assert job.published is False
        assert job.error is None
        assert job.topic is not None
        assert job.topic.keyword == "ai"
        assert job.script is not None
        assert job.script.topic_id == job.topic.id

    @pytest.mark.asyncio
    async def test_stages_persisted_in_order(self, orchestrator: JobOrchestrator) -> None:
        store = RecordingJobStore()
        job = await build(orchestrator, job_store=store).run(["ai"])

        assert store.saved_statuses == [
            JobStatus.PENDING,
            JobStatus.COLLECTING,
            JobStatus.SCRIPT,
            JobStatus.IMAGES,
            JobStatus.VIDEO,
            JobStatus.UPLOAD,
            JobStatus.DONE,
        ]
        stored = await store.get(job.job_id)
        assert stored == job
        assert stored.updated_at >= stored.created_at

    @pytest.mark.asyncio
    async def test_highest_scored_topic_is_used(self, orchestrator: JobOrchestrator) -> None:
        topics = await orchestrator.topic_collector.collect(["ai", "space"])
        job = await orchestrator.run(["ai", "space"])

        assert job.topic == topics[0]

    @pytest.mark.asyncio
    async def test_empty_keywords_use_defaults(
        self,
        orchestrator: JobOrchestrator,
        search_client: FakeSearchClient,
    ) -> None:
        job = await orchestrator.run([])

        assert job.status == JobStatus.DONE
        assert [c["query"] for c in search_client.calls] == DEFAULT_KEYWORDS

    @pytest.mark.asyncio
    async def test_failing_assembler_fails_job(self, orchestrator: JobOrchestrator) -> None:
        other = await orchestrator.run(["ai"])
        failing = build(orchestrator, video_assembler=FailingAssembler())

        job = await failing.run(["ai"])

        assert job.status == JobStatus.FAILED
        assert job.error == "encoder crashed"
        assert job.script is not None
        jobs = await failing.list_jobs()
        assert [j.job_id for j in jobs] == [job.job_id, other.job_id]

    @pytest.mark.asyncio
    async def test_duration_mismatch_fails_job(self, orchestrator: JobOrchestrator) -> None:
        job = await build(orchestrator, video_assembler=WrongDurationAssembler()).run(["ai"])

        assert job.status == JobStatus.FAILED
        assert "10s" in (job.error or "")

    @pytest.mark.asyncio
    async def test_collector_exception_fails_job(self, orchestrator: JobOrchestrator) -> None:
        job = await build(orchestrator, topic_collector=ExplodingCollector()).run(["ai"])

        assert job.status == JobStatus.FAILED
        assert job.error == "collector bug"
        assert job.topic is None

    @pytest.mark.asyncio
    async def test_connected_account_with_stub_video_fails(
        self,
        orchestrator: JobOrchestrator,
        oauth_server: OAuthServer,
    ) -> None:
        await connect(orchestrator.account_connector, oauth_server)

        job = await orchestrator.run(["ai"])

        assert job.status == JobStatus.FAILED
        assert job.error == VIDEO_NOT_FOUND
        assert job.published is False

    @pytest.mark.asyncio
    async def test_connected_account_publishes(
        self,
        orchestrator: JobOrchestrator,
        oauth_server: OAuthServer,
        tmp_path: Path,
    ) -> None:
        await connect(orchestrator.account_connector, oauth_server)
        oauth_server.upload_responses.append(httpx.Response(200, json={"id": "real-id"}))

        job = await build(orchestrator, video_assembler=FileAssembler(tmp_path)).run(["ai"])

        assert job.status == JobStatus.DONE
        assert job.video_id == "real-id"
        assert job.video_url == "https://www.youtube.com/shorts/real-id"
        assert job.published is True
        body = oauth_server.upload_requests[0].content
        assert job.script is not None
        assert job.script.hook.encode() in body

    @pytest.mark.asyncio
    async def test_narration_disabled_is_not_called(
        self,
        orchestrator: JobOrchestrator,
        tmp_path: Path,
    ) -> None:
        narration = FakeNarration()
        assembler = FileAssembler(tmp_path)
        runner = build(orchestrator, narration_synthesizer=narration, video_assembler=assembler)

        job = await runner.run(["ai"], RunOptions(enable_narration=False))

        assert job.status == JobStatus.DONE
        assert narration.calls == 0
        _, audios = assembler.calls[0]
        assert all(a.audio_path is None for a in audios)

    @pytest.mark.asyncio
    async def test_narration_failure_does_not_fail_job(
        self,
        orchestrator: JobOrchestrator,
        tmp_path: Path,
    ) -> None:
        narration = FakeNarration(error=RuntimeError("tts down"))
        runner = build(
            orchestrator,
            narration_synthesizer=narration,
            video_assembler=FileAssembler(tmp_path),
        )

        job = await runner.run(["ai"])

        assert job.status == JobStatus.DONE
        assert narration.calls == 1

    @pytest.mark.asyncio
    async def test_character_hint_reaches_script(self, orchestrator: JobOrchestrator) -> None:
        job = await orchestrator.run(["ai"], RunOptions(character_hint="vtuber"))

        assert job.script is not None
        assert job.script.character.image_prompt_hint.startswith("anime style")


class TestSubmitAndCancel:
    """Tests for background jobs and cooperative cancellation."""

    @pytest.mark.asyncio
    async def test_submit_returns_pending_then_completes(self, orchestrator: JobOrchestrator) -> None:
        job = await orchestrator.submit(["ai"])
        assert job.status == JobStatus.PENDING

        for _ in range(100):
            current = await orchestrator.get_job(job.job_id)
            if current and current.is_terminal:
                break
            await asyncio.sleep(0.01)

        current = await orchestrator.get_job(job.job_id)
        assert current is not None
        assert current.status == JobStatus.DONE

    @pytest.mark.asyncio
    async def test_cancel_running_job(self, orchestrator: JobOrchestrator) -> None:
        collector = BlockingCollector(orchestrator.topic_collector)
        runner = build(orchestrator, topic_collector=collector)

        job = await runner.submit(["ai"])
        await collector.started.wait()

        assert await runner.cancel(job.job_id) is True
        collector.release.set()
        await asyncio.gather(*runner._tasks)

        current = await runner.get_job(job.job_id)
        assert current is not None
        assert current.status == JobStatus.CANCELLED
        assert current.error == "Job cancelled"
        # Cancellation is observed before the next stage starts
        assert current.script is None

    @pytest.mark.asyncio
    async def test_cancel_during_video_stops_before_upload(self, orchestrator: JobOrchestrator) -> None:
        assembler = BlockingAssembler(orchestrator.video_assembler)
        runner = build(orchestrator, video_assembler=assembler)

        job = await runner.submit(["ai"])
        await assembler.started.wait()

        assert await runner.cancel(job.job_id) is True
        assembler.release.set()
        await asyncio.gather(*runner._tasks)

        current = await runner.get_job(job.job_id)
        assert current is not None
        assert current.status == JobStatus.CANCELLED
        assert current.video_id is None

    @pytest.mark.asyncio
    async def test_cancel_refused_once_uploading(self, orchestrator: JobOrchestrator) -> None:
        connector = BlockingStatusConnector(orchestrator.account_connector)
        runner = build(orchestrator, account_connector=connector)

        job = await runner.submit(["ai"])
        await connector.started.wait()

        assert await runner.cancel(job.job_id) is False
        connector.release.set()
        await asyncio.gather(*runner._tasks)

        current = await runner.get_job(job.job_id)
        assert current is not None
        assert current.status == JobStatus.DONE
        assert current.video_id == STUB_VIDEO_ID

    @pytest.mark.asyncio
    async def test_cancel_unknown_or_finished_job(self, orchestrator: JobOrchestrator) -> None:
        job = await orchestrator.run(["ai"])

        assert await orchestrator.cancel(job.job_id) is False
        assert await orchestrator.cancel("job-missing") is False

    @pytest.mark.asyncio
    async def test_shutdown_cancels_background_tasks(self, orchestrator: JobOrchestrator) -> None:
        collector = BlockingCollector(orchestrator.topic_collector)
        runner = build(orchestrator, topic_collector=collector)

        job = await runner.submit(["ai"])
        await collector.started.wait()
        await runner.shutdown()

        assert not runner._tasks
        current = await runner.get_job(job.job_id)
        assert current is not None
        assert current.status == JobStatus.CANCELLED
        assert current.error == "Job cancelled"

    @pytest.mark.asyncio
    async def test_shutdown_before_job_starts(self, orchestrator: JobOrchestrator) -> None:
        job = await orchestrator.submit(["ai"])
        await orchestrator.shutdown()

        current = await orchestrator.get_job(job.job_id)
        assert current is not None
        assert current.status == JobStatus.CANCELLED
        assert await orchestrator.cancel(job.job_id) is False


class TestQueries:
    @pytest.mark.asyncio
    async def test_list_jobs_most_recent_first_and_bounded(self, orchestrator: JobOrchestrator) -> None:
        ids = [(await orchestrator.run(["ai"])).job_id for _ in range(3)]

        jobs = await orchestrator.list_jobs(limit=2)

        assert [j.job_id for j in jobs] == [ids[2], ids[1]]

    @pytest.mark.asyncio
    async def test_get_unknown_job(self, orchestrator: JobOrchestrator) -> None:
        assert await orchestrator.get_job("nope") is None

    @pytest.mark.asyncio
    async def test_returned_job_is_a_copy(self, orchestrator: JobOrchestrator) -> None:
        job = await orchestrator.run(["ai"])
        fetched = await orchestrator.get_job(job.job_id)
        assert fetched is not None
        fetched.error = "mutated"

        again = await orchestrator.get_job(job.job_id)
        assert again is not None
        assert again.error is None


@pytest.mark.asyncio
async def test_default_services_follow_configured_keys(settings: Settings) -> None:
    configured = settings.model_copy(
        update={"openai_api_key": "sk-test", "elevenlabs_api_key": "el-test"}
    )

    wired = JobOrchestrator(settings=configured)
    bare = JobOrchestrator(settings=settings)

    assert isinstance(wired.scene_renderer.image_client, OpenAIImageClient)
    assert isinstance(wired.narration_synthesizer.tts_client, ElevenLabsClient)
    assert bare.scene_renderer.image_client is None
    assert bare.narration_synthesizer.tts_client is None
    await wired.aclose()
    await bare.aclose()


def test_video_meta_from_script(orchestrator: JobOrchestrator) -> None:
    topic = STUB_TOPIC.model_copy(update={"title": "x" * 150})
    script = orchestrator.script_composer.compose(topic)

    meta = build_video_meta(script)

    assert meta.title == "x" * 100
    assert meta.description == script.hook + "\n\n" + "\n".join(s.text for s in script.scenes)


class TestStateMachine:
    @pytest.mark.parametrize(
        ("current", "target", "allowed"),
        [
            (JobStatus.PENDING, JobStatus.COLLECTING, True),
            (JobStatus.PENDING, JobStatus.SCRIPT, False),
            (JobStatus.UPLOAD, JobStatus.DONE, True),
            (JobStatus.IMAGES, JobStatus.FAILED, True),
            (JobStatus.VIDEO, JobStatus.CANCELLED, True),
            (JobStatus.DONE, JobStatus.FAILED, False),
            (JobStatus.FAILED, JobStatus.COLLECTING, False),
            (JobStatus.CANCELLED, JobStatus.DONE, False),
        ],
    )
    def test_transitions(self, current: JobStatus, target: JobStatus, allowed: bool) -> None:
        assert can_transition(current, target) is allowed
