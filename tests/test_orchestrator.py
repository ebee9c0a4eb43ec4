from __future__ import annotations

import asyncio
import os

import pytest

from shock_style.exceptions import (
    ConfigurationError,
    EncodingError,
    GenerationError,
    NoImageGeneratedError,
    ProviderError,
    RequestInFlightError,
    ValidationError,
)
from shock_style.orchestrator import build_notice, create_orchestrator, RequestOrchestrator
from shock_style.schema import AcquiredImage, AcquisitionResult, GenerationResponse, Idle
from shock_style.settings import Settings
from shock_style.shard.enums import AcquisitionStatus, ImageSource, RequestStatus


class FakeClient:
    """Records requests; answers with a URL, an error, or waits on a gate."""

    def __init__(self, url="https://cdn.example.com/out.png", error=None, gate: asyncio.Event | None = None):
        self.url = url
        self.error = error
        self.gate = gate
        self.requests = []

    async def generate(self, request):
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return GenerationResponse(image_url=self.url)


class FakeEncoder:
    def __init__(self, error=None):
        self.error = error
        self.encoded = []

    def encode(self, image):
        self.encoded.append(image)
        if self.error is not None:
            raise self.error
        return "data:image/jpeg;base64,QUJD"


class FakePipeline:
    def __init__(self, *results):
        self.results = list(results)

    async def capture_from_camera(self):
        return self.results.pop(0)

    async def pick_from_library(self):
        return self.results.pop(0)


class Recorder:
    def __init__(self):
        self.successes = []
        self.errors = []
        self.notices = []

    def on_success(self, url):
        self.successes.append(url)

    async def on_error(self, error):
        self.errors.append(error)

    def notify(self, notice):
        self.notices.append(notice)


def make(client=None, *, encoder=None, pipeline=None, recorder=None, **kwargs):
    recorder = recorder or Recorder()
    orch = RequestOrchestrator(
        client or FakeClient(),
        encoder=encoder or FakeEncoder(),
        pipeline=pipeline,
        on_success=recorder.on_success,
        on_error=recorder.on_error,
        notifier=recorder.notify,
        **kwargs,
    )
    return orch, recorder


def acquired(ref="/nonexistent/normalized.jpg", source=ImageSource.LIBRARY):
    return AcquisitionResult(status=AcquisitionStatus.ACQUIRED, source=source, image=AcquiredImage(local_reference=ref, source=source))


@pytest.mark.asyncio
async def test_initial_state_is_idle():
    orch, _ = make()
    assert isinstance(orch.state, Idle)
    assert not orch.is_generating
    assert orch.selected_image is None
    assert orch.generated_image_url is None
    assert orch.error is None


@pytest.mark.asyncio
async def test_successful_submit_without_image():
    client = FakeClient()
    orch, rec = make(client)

    state = await orch.submit("a cat on a skateboard", "anime")

    assert state.status == RequestStatus.SUCCEEDED
    assert orch.generated_image_url == "https://cdn.example.com/out.png"
    assert rec.successes == ["https://cdn.example.com/out.png"]
    assert rec.errors == []
    [request] = client.requests
    assert request.style_id == "anime"
    assert request.input_image is None
    assert request.prompt.startswith("a cat on a skateboard, in anime style")
    assert request.prompt.endswith(", high quality, detailed, 4K")


@pytest.mark.asyncio
async def test_additional_instructions_are_appended():
    client = FakeClient()
    orch, _ = make(client)
    await orch.submit("a cat", "unknown-style", "wearing a hat")
    assert client.requests[0].prompt == "a cat, high quality, detailed, 4K, wearing a hat"


@pytest.mark.asyncio
async def test_success_consumes_selected_image():
    client = FakeClient()
    encoder = FakeEncoder()
    orch, _ = make(client, encoder=encoder, pipeline=FakePipeline(acquired()))

    await orch.pick_from_library()
    assert orch.selected_image.local_reference == "/nonexistent/normalized.jpg"

    await orch.submit("a cat", "meme")
    assert client.requests[0].input_image == "data:image/jpeg;base64,QUJD"
    assert encoder.encoded[0].local_reference == "/nonexistent/normalized.jpg"
    assert orch.selected_image is None


@pytest.mark.asyncio
async def test_failure_preserves_selected_image_and_notifies():
    error = ProviderError("model overloaded", status_code=503)
    orch, rec = make(FakeClient(error=error), pipeline=FakePipeline(acquired()))
    await orch.pick_from_library()

    state = await orch.submit("a cat", "a24")

    assert state.status == RequestStatus.FAILED
    assert orch.error is error
    assert orch.selected_image is not None
    assert rec.errors == [error]
    assert rec.successes == []
    assert rec.notices[-1].title == "Generation Failed"
    assert rec.notices[-1].message == "model overloaded"


@pytest.mark.asyncio
async def test_unexpected_client_exception_is_wrapped():
    orch, rec = make(FakeClient(error=RuntimeError("socket closed")))
    await orch.submit("a cat", "anime")
    assert isinstance(orch.error, GenerationError)
    assert isinstance(orch.error.__cause__, RuntimeError)
    assert rec.errors == [orch.error]


@pytest.mark.asyncio
async def test_mapping_response_without_url_fails():
    class DictClient:
        async def generate(self, request):
            return {"status": "ok"}

    orch, _ = make(DictClient())
    await orch.submit("a cat", "anime")
    assert isinstance(orch.error, NoImageGeneratedError)


@pytest.mark.asyncio
async def test_sync_client_mapping_response():
    class SyncClient:
        def generate(self, request):
            return {"imageUrl": "https://cdn.example.com/sync.png"}

    orch, _ = make(SyncClient())
    await orch.submit("a cat", "anime")
    assert orch.generated_image_url == "https://cdn.example.com/sync.png"


@pytest.mark.asyncio
async def test_second_submit_rejected_while_pending():
    gate = asyncio.Event()
    client = FakeClient(gate=gate)
    orch, rec = make(client)

    first = asyncio.create_task(orch.submit("a cat", "anime"))
    await asyncio.sleep(0)
    assert orch.is_generating
    assert orch.state.request.style_id == "anime"

    with pytest.raises(RequestInFlightError):
        await orch.submit("a dog", "meme")
    with pytest.raises(RequestInFlightError):
        orch.reset()

    gate.set()
    state = await first
    assert state.status == RequestStatus.SUCCEEDED
    assert len(client.requests) == 1
    assert rec.successes == ["https://cdn.example.com/out.png"]


@pytest.mark.asyncio
async def test_concurrent_submits_send_one_request():
    gate = asyncio.Event()
    client = FakeClient(gate=gate)
    orch, _ = make(client)

    tasks = [asyncio.create_task(orch.submit("a cat", "anime")) for _ in range(3)]
    await asyncio.sleep(0)
    gate.set()
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert len(client.requests) == 1
    assert sum(isinstance(r, RequestInFlightError) for r in results) == 2


@pytest.mark.asyncio
async def test_cancelled_request_moves_to_failed():
    gate = asyncio.Event()
    orch, rec = make(FakeClient(gate=gate))

    task = asyncio.create_task(orch.submit("a cat", "anime"))
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert orch.state.status == RequestStatus.FAILED
    assert rec.successes == [] and rec.errors == []
    orch.reset()
    assert isinstance(orch.state, Idle)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "prompt,style,title",
    [
        ("", "anime", "Missing Prompt"),
        ("   \n", "anime", "Missing Prompt"),
        ("a cat", "", "Missing Style"),
        ("a cat", "  ", "Missing Style"),
    ],
)
async def test_validation_rejects_before_any_request(prompt, style, title):
    client = FakeClient()
    orch, rec = make(client)

    with pytest.raises(ValidationError):
        await orch.submit(prompt, style)

    assert client.requests == []
    assert isinstance(orch.state, Idle)
    assert rec.notices[-1].title == title
    assert rec.errors == []


@pytest.mark.asyncio
async def test_prompt_length_limit():
    client = FakeClient()
    orch, rec = make(client, max_prompt_length=10)
    with pytest.raises(ValidationError) as exc:
        await orch.submit("x" * 11, "anime")
    assert exc.value.field == "prompt"
    assert "10" in rec.notices[-1].message
    assert client.requests == []

    await orch.submit("x" * 10, "anime")
    assert len(client.requests) == 1


@pytest.mark.asyncio
async def test_punctuation_only_prompt_is_accepted():
    client = FakeClient()
    orch, _ = make(client)
    await orch.submit("...", "unknown")
    assert client.requests[0].prompt == ", high quality, detailed, 4K"


@pytest.mark.asyncio
async def test_encoding_failure_aborts_submission():
    client = FakeClient()
    orch, rec = make(client, encoder=FakeEncoder(EncodingError("unreadable")), pipeline=FakePipeline(acquired()))
    await orch.pick_from_library()

    with pytest.raises(EncodingError):
        await orch.submit("a cat", "anime")

    assert client.requests == []
    assert isinstance(orch.state, Idle)
    assert orch.selected_image is not None
    assert rec.notices[-1] == build_notice("encoding_failed")


@pytest.mark.asyncio
async def test_reset_is_idempotent():
    orch, _ = make(FakeClient(error=ProviderError("nope")), pipeline=FakePipeline(acquired()))
    await orch.pick_from_library()
    await orch.submit("a cat", "anime")

    orch.reset()
    assert isinstance(orch.state, Idle)
    assert orch.selected_image is None
    orch.reset()
    assert isinstance(orch.state, Idle)


@pytest.mark.asyncio
async def test_resubmit_from_terminal_states():
    client = FakeClient(error=ProviderError("temporary"))
    orch, rec = make(client)
    await orch.submit("a cat", "anime")
    assert orch.state.status == RequestStatus.FAILED

    client.error = None
    await orch.submit("a cat", "anime")
    assert orch.state.status == RequestStatus.SUCCEEDED
    await orch.submit("a dog", "meme")
    assert len(client.requests) == 3
    assert len(rec.errors) == 1
    assert len(rec.successes) == 2


@pytest.mark.asyncio
async def test_new_acquisition_replaces_selected_image():
    orch, _ = make(pipeline=FakePipeline(acquired("/nonexistent/a.jpg"), acquired("/nonexistent/b.jpg", ImageSource.CAMERA)))
    await orch.pick_from_library()
    await orch.capture_from_camera()
    assert orch.selected_image.local_reference == "/nonexistent/b.jpg"
    orch.clear_selected_image()
    assert orch.selected_image is None


@pytest.mark.asyncio
async def test_cancelled_acquisition_keeps_previous_image():
    cancelled = AcquisitionResult(status=AcquisitionStatus.CANCELLED, source=ImageSource.LIBRARY)
    orch, rec = make(pipeline=FakePipeline(acquired("/nonexistent/a.jpg"), cancelled))
    await orch.pick_from_library()
    result = await orch.pick_from_library()
    assert result.status == AcquisitionStatus.CANCELLED
    assert orch.selected_image.local_reference == "/nonexistent/a.jpg"
    assert rec.notices == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status,source,title",
    [
        (AcquisitionStatus.PERMISSION_DENIED, ImageSource.CAMERA, "Permission Required"),
        (AcquisitionStatus.PERMISSION_DENIED, ImageSource.LIBRARY, "Permission Required"),
        (AcquisitionStatus.FAILED, ImageSource.CAMERA, "Error"),
        (AcquisitionStatus.FAILED, ImageSource.LIBRARY, "Error"),
    ],
)
async def test_acquisition_problems_notify(status, source, title):
    result = AcquisitionResult(status=status, source=source)
    orch, rec = make(pipeline=FakePipeline(result))
    if source == ImageSource.CAMERA:
        await orch.capture_from_camera()
    else:
        await orch.pick_from_library()
    assert orch.selected_image is None
    assert rec.notices == [build_notice(f"{source.value}_{'permission' if status == AcquisitionStatus.PERMISSION_DENIED else 'failed'}")]
    assert rec.notices[0].title == title


@pytest.mark.asyncio
async def test_acquisition_without_pipeline():
    orch, _ = make()
    with pytest.raises(ConfigurationError):
        await orch.pick_from_library()


@pytest.mark.asyncio
async def test_create_orchestrator_from_settings(tmp_path):
    client = FakeClient()
    orch = create_orchestrator(settings=Settings(max_prompt_length=5), client=client, catalog={"x": "x-style"})
    with pytest.raises(ValidationError):
        await orch.submit("toolong", "x")
    await orch.submit("ok", "x")
    assert client.requests[0].prompt == "ok, x-style, high quality, detailed, 4K"


@pytest.mark.asyncio
async def test_failing_notifier_does_not_skip_error_callback():
    errors = []

    def broken_notifier(notice):
        raise RuntimeError("display unavailable")

    orch = RequestOrchestrator(
        FakeClient(error=ProviderError("down")),
        encoder=FakeEncoder(),
        on_error=errors.append,
        notifier=broken_notifier,
    )
    state = await orch.submit("a cat", "anime")

    assert state.status == RequestStatus.FAILED
    assert len(errors) == 1
    assert errors[0].message == "down"


@pytest.mark.asyncio
async def test_failing_notifier_keeps_validation_error():
    async def broken_notifier(notice):
        raise RuntimeError("display unavailable")

    orch = RequestOrchestrator(FakeClient(), encoder=FakeEncoder(), notifier=broken_notifier)
    with pytest.raises(ValidationError):
        await orch.submit("", "anime")


@pytest.mark.asyncio
async def test_released_images_are_deleted(make_image):
    first, second, third = make_image("a.jpg", fmt="JPEG"), make_image("b.jpg", fmt="JPEG"), make_image("c.jpg", fmt="JPEG")
    orch, _ = make(pipeline=FakePipeline(acquired(first), acquired(second), acquired(third)))

    await orch.pick_from_library()
    await orch.pick_from_library()
    assert not os.path.exists(first)
    assert os.path.exists(second)

    orch.clear_selected_image()
    assert not os.path.exists(second)

    await orch.pick_from_library()
    await orch.submit("a cat", "anime")
    assert orch.selected_image is None
    assert not os.path.exists(third)


@pytest.mark.asyncio
async def test_failed_generation_keeps_image_file_until_reset(make_image):
    path = make_image("keep.jpg", fmt="JPEG")
    orch, _ = make(FakeClient(error=ProviderError("down")), pipeline=FakePipeline(acquired(path)))

    await orch.pick_from_library()
    await orch.submit("a cat", "anime")
    assert os.path.exists(path)

    orch.reset()
    assert not os.path.exists(path)
