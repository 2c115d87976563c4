"""
Pipeline job orchestrator.

Runs one Shorts job through its stages:

    pending -> collecting -> script -> images -> video -> upload -> done

Each transition is persisted before the stage starts so pollers see the
stage in flight. Degradable stages (topics, images, narration) absorb their
own provider failures; anything that escapes a mandatory stage marks the job
``failed`` with the exception message. Cancellation is cooperative and is
checked between stages; once the upload starts a job can no longer be
cancelled.
"""

import asyncio
import logging
import secrets
import time

from shortsbot.core.config import Settings, get_settings
from shortsbot.core.exceptions import JobCancelledError, PipelineError
from shortsbot.integrations.elevenlabs_client import get_elevenlabs_client
from shortsbot.integrations.openai_client import get_openai_image_client
from shortsbot.models.enums import JobStatus, can_transition
from shortsbot.schemas.account import UploadError, VideoMeta
from shortsbot.schemas.job import Job, RunOptions, utcnow
from shortsbot.schemas.media import SceneAudio
from shortsbot.schemas.script import Script
from shortsbot.services.account import AccountConnector
from shortsbot.services.assembly import StubVideoAssembler, VideoAssembler
from shortsbot.services.narration import NarrationSynthesizer
from shortsbot.services.rendering import SceneRenderer
from shortsbot.services.scripting import ScriptComposer
from shortsbot.services.topics import TopicCollector
from shortsbot.stores.jobs import InMemoryJobStore, JobStore

logger = logging.getLogger(__name__)

DEFAULT_KEYWORDS = ["YouTube Shorts", "trends"]
STUB_VIDEO_ID = "stub-video-id"
STUB_VIDEO_URL = f"https://www.youtube.com/shorts/{STUB_VIDEO_ID}"
UPLOAD_TITLE_MAX_LENGTH = 100


def generate_job_id() -> str:
    """Unique, roughly time-ordered job id."""
    return f"job-{int(time.time() * 1000)}-{secrets.token_hex(3)}"


def build_video_meta(script: Script) -> VideoMeta:
    """Upload title and description derived from a script."""
    lines = "\n".join(scene.text for scene in script.scenes)
    return VideoMeta(
        title=script.topic_title[:UPLOAD_TITLE_MAX_LENGTH],
        description=f"{script.hook}\n\n{lines}",
    )


class CancellationToken:
    """Cooperative cancellation flag shared between a job and its canceller."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        self._cancelled = False
        self._sealed = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def sealed(self) -> bool:
        return self._sealed

    def cancel(self) -> bool:
        """Flag the job; refused when already flagged or sealed."""
        if self._cancelled or self._sealed:
            return False
        self._cancelled = True
        return True

    def seal(self) -> None:
        """
        Pass the last checkpoint.

        Raises JobCancelledError if cancellation was already requested;
        afterwards every cancel request is refused.
        """
        self.raise_if_cancelled()
        self._sealed = True

    def raise_if_cancelled(self) -> None:
        """Raise JobCancelledError once cancellation was requested."""
        if self._cancelled:
            raise JobCancelledError(self.job_id)


class JobOrchestrator:
    """
    Sequences pipeline stages and owns job state.

    Collaborators are injected so tests can substitute fakes; defaults wire
    the real services from settings, enabling image and narration providers
    when their API keys are configured.

    Example:
        ```python
        orchestrator = JobOrchestrator()
        job = await orchestrator.run(["ai news"])
        print(job.status, job.video_url)
        ```
    """

    def __init__(
        self,
        job_store: JobStore | None = None,
        topic_collector: TopicCollector | None = None,
        script_composer: ScriptComposer | None = None,
        scene_renderer: SceneRenderer | None = None,
        narration_synthesizer: NarrationSynthesizer | None = None,
        video_assembler: VideoAssembler | None = None,
        account_connector: AccountConnector | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self.job_store = job_store or InMemoryJobStore()
        self.topic_collector = topic_collector or TopicCollector(settings=self._settings)
        self.script_composer = script_composer or ScriptComposer()
        self.scene_renderer = scene_renderer or SceneRenderer(
            image_client=get_openai_image_client(self._settings)
        )
        self.narration_synthesizer = narration_synthesizer or NarrationSynthesizer(
            tts_client=get_elevenlabs_client(self._settings),
            settings=self._settings,
        )
        self.video_assembler = video_assembler or StubVideoAssembler(settings=self._settings)
        self.account_connector = account_connector or AccountConnector(settings=self._settings)
        self._tokens: dict[str, CancellationToken] = {}
        self._tasks: set[asyncio.Task] = set()

    # =========================================================================
    # Public API
    # =========================================================================

    async def run(self, keywords: list[str], options: RunOptions | None = None) -> Job:
        """
        Run a job to completion.

        Args:
            keywords: Trend keywords; empty uses the default keywords
            options: Character, connector key and narration options

        Returns:
            The job in a terminal state. Never raises for stage failures.
        """
        job, token = await self._create_job()
        return await self._execute(job, keywords, options or RunOptions(), token)

    async def submit(self, keywords: list[str], options: RunOptions | None = None) -> Job:
        """
        Start a job in the background.

        Returns:
            The pending job; poll :meth:`get_job` for progress
        """
        job, token = await self._create_job()
        task = asyncio.create_task(
            self._execute(job.model_copy(deep=True), keywords, options or RunOptions(), token),
            name=job.job_id,
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return job

    async def cancel(self, job_id: str) -> bool:
        """
        Request cancellation of a running job.

        Returns:
            True when the job was running and is now flagged. False for
            unknown or finished jobs and for jobs already uploading.
        """
        token = self._tokens.get(job_id)
        if token is None or not token.cancel():
            return False
        logger.info(f"Cancellation requested for job {job_id}", extra={"job_id": job_id})
        return True

    async def list_jobs(self, limit: int = 20) -> list[Job]:
        """Most recently updated jobs first, at most ``limit``."""
        return await self.job_store.list(limit=limit)

    async def get_job(self, job_id: str) -> Job | None:
        return await self.job_store.get(job_id)

    async def shutdown(self) -> None:
        """Cancel background jobs still in flight and record them as cancelled."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        for task in tasks:
            # A task cancelled before its first step never reaches _execute
            job_id = task.get_name()
            self._tokens.pop(job_id, None)
            job = await self.job_store.get(job_id)
            if job is not None and not job.is_terminal:
                await self._finish(job, JobStatus.CANCELLED, str(JobCancelledError(job_id)))

    async def aclose(self) -> None:
        """Release the provider clients held by the collaborators."""
        for service in (
            self.topic_collector,
            self.scene_renderer,
            self.narration_synthesizer,
            self.account_connector,
        ):
            await service.aclose()

    # =========================================================================
    # Execution
    # =========================================================================

    async def _create_job(self) -> tuple[Job, CancellationToken]:
        job = Job(job_id=generate_job_id())
        token = CancellationToken(job.job_id)
        self._tokens[job.job_id] = token
        await self.job_store.save(job)
        return job, token

    async def _transition(self, job: Job, status: JobStatus) -> None:
        if not can_transition(job.status, status):
            raise PipelineError(
                message=f"Invalid job transition {job.status.value} -> {status.value}",
                stage=job.status.value,
                job_id=job.job_id,
            )
        job.status = status
        job.updated_at = utcnow()
        await self.job_store.save(job)

    async def _execute(
        self,
        job: Job,
        keywords: list[str],
        options: RunOptions,
        token: CancellationToken,
    ) -> Job:
        keywords = [k for k in keywords if k and k.strip()] or list(DEFAULT_KEYWORDS)
        logger.info(
            f"Starting job {job.job_id}",
            extra={"job_id": job.job_id, "keywords": keywords},
        )

        try:
            await self._run_stages(job, keywords, options, token)
        except JobCancelledError as e:
            await self._finish(job, JobStatus.CANCELLED, str(e))
            logger.info(f"Job {job.job_id} cancelled", extra={"job_id": job.job_id})
        except asyncio.CancelledError:
            # Task cancelled by shutdown
            await self._finish(job, JobStatus.CANCELLED, str(JobCancelledError(job.job_id)))
            logger.info(f"Job {job.job_id} interrupted", extra={"job_id": job.job_id})
            raise
        except Exception as e:
            stage = job.status.value
            await self._finish(job, JobStatus.FAILED, str(e) or type(e).__name__)
            logger.error(
                f"Job {job.job_id} failed during {stage}",
                extra={"job_id": job.job_id, "stage": stage, "error": job.error},
                exc_info=not isinstance(e, PipelineError),
            )
        finally:
            self._tokens.pop(job.job_id, None)

        return job

    async def _finish(self, job: Job, status: JobStatus, error: str) -> None:
        if job.status.is_terminal:
            return
        job.error = error
        await self._transition(job, status)

    async def _run_stages(
        self,
        job: Job,
        keywords: list[str],
        options: RunOptions,
        token: CancellationToken,
    ) -> None:
        # Topics
        token.raise_if_cancelled()
        await self._transition(job, JobStatus.COLLECTING)
        topics = await self.topic_collector.collect(keywords)
        if not topics:
            raise PipelineError("No topics collected", stage="collecting", job_id=job.job_id)
        job.topic = topics[0]

        # Script
        token.raise_if_cancelled()
        await self._transition(job, JobStatus.SCRIPT)
        script = self.script_composer.compose(job.topic, options.character_hint)
        job.script = script

        # Images and narration
        token.raise_if_cancelled()
        await self._transition(job, JobStatus.IMAGES)
        scene_images = await self.scene_renderer.render(script, options.character_hint)
        scene_audios = await self._narrate(job, script, options)

        # Video
        token.raise_if_cancelled()
        await self._transition(job, JobStatus.VIDEO)
        artifact = await self.video_assembler.assemble(script, scene_images, scene_audios)
        if artifact.duration_seconds != script.total_duration_seconds:
            raise PipelineError(
                message=(
                    f"Assembled video is {artifact.duration_seconds}s, "
                    f"script is {script.total_duration_seconds}s"
                ),
                stage="video",
                job_id=job.job_id,
            )

        # Upload
        token.seal()
        await self._transition(job, JobStatus.UPLOAD)
        connector = self.account_connector
        status = await connector.get_connection_status(options.connector_key)
        if not status.connected:
            logger.info(
                "No connected account, recording stub upload",
                extra={"job_id": job.job_id, "connector_key": options.connector_key},
            )
            job.video_id = STUB_VIDEO_ID
            job.video_url = STUB_VIDEO_URL
            job.published = False
        else:
            result = await connector.upload_video(
                artifact.video_path,
                build_video_meta(script),
                key=options.connector_key,
            )
            if isinstance(result, UploadError):
                raise PipelineError(result.error, stage="upload", job_id=job.job_id)
            job.video_id = result.video_id
            job.video_url = result.url
            job.published = True

        await self._transition(job, JobStatus.DONE)
        logger.info(
            f"Job {job.job_id} done",
            extra={"job_id": job.job_id, "video_url": job.video_url, "published": job.published},
        )

    async def _narrate(self, job: Job, script: Script, options: RunOptions) -> list[SceneAudio]:
        skipped = [SceneAudio(scene_index=s.scene_index) for s in script.scenes]
        if not options.enable_narration:
            return skipped
        try:
            return await self.narration_synthesizer.synthesize(script.scenes)
        except Exception as e:
            logger.warning(
                "Narration stage failed, continuing without audio",
                extra={"job_id": job.job_id, "error": str(e)},
            )
            return skipped
