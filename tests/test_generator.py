"""Tests for the StrategyGenerator input surface (update / generate)."""
import asyncio
from pathlib import Path
from unittest.mock import patch

import pytest

from models.input_record import ErrorSet
from pipeline.delivery import DirectoryDelivery
from pipeline.generator import StrategyGenerator
from pipeline.interfaces import GenerationInProgressError, ImageDecodeError, SinkError


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeSink:
    instances: list["FakeSink"] = []

    def __init__(self, design):
        self.design = design
        self.calls: list[str] = []
        self.renders = 0
        FakeSink.instances.append(self)

    def set_heading(self, text, position, style_ref="heading"):
        self.calls.append(f"heading:{text}")

    def set_body_line(self, text, position):
        self.calls.append(f"body:{text}")

    def place_image(self, data, format, position, width, height):
        self.calls.append(f"image:{format}")

    def render(self) -> bytes:
        self.renders += 1
        return b"%PDF-fake"


class FakeDelivery:
    def __init__(self):
        self.saved: list[tuple[bytes, str]] = []

    def save(self, artifact: bytes, file_name: str) -> Path:
        self.saved.append((artifact, file_name))
        return Path("/downloads") / file_name


@pytest.fixture(autouse=True)
def _reset_sinks():
    FakeSink.instances = []
    yield


def _generator(settings, delivery=None) -> StrategyGenerator:
    return StrategyGenerator(settings, sink_factory=FakeSink, delivery=delivery or FakeDelivery())


def _fill(gen: StrategyGenerator, answers: dict[str, str], **overrides) -> None:
    for name, value in {**answers, **overrides}.items():
        gen.update(name, value)


# ---------------------------------------------------------------------------
# Validation gate
# ---------------------------------------------------------------------------

class TestValidationFailure:
    def test_empty_form_returns_all_errors_and_renders_nothing(self, tmp_settings):
        delivery = FakeDelivery()
        gen = _generator(tmp_settings, delivery)
        errors = asyncio.run(gen.generate())
        assert len(errors) == 9
        assert gen.errors == errors
        assert FakeSink.instances == []
        assert delivery.saved == []

    def test_exactly_missing_fields_reported(self, tmp_settings, fitco_answers):
        gen = _generator(tmp_settings)
        _fill(gen, fitco_answers, problem="", niche="")
        assert asyncio.run(gen.generate()).fields == ["problem", "niche"]

    def test_update_clears_flag_without_regenerating(self, tmp_settings, fitco_answers):
        gen = _generator(tmp_settings)
        _fill(gen, fitco_answers, business="")
        asyncio.run(gen.generate())
        assert "business" in gen.errors
        gen.update("business", "FitCo")
        assert "business" not in gen.errors
        assert FakeSink.instances == []

    def test_update_with_empty_value_keeps_flag(self, tmp_settings):
        gen = _generator(tmp_settings)
        asyncio.run(gen.generate())
        gen.update("goal", "")
        assert "goal" in gen.errors


# ---------------------------------------------------------------------------
# Successful generation
# ---------------------------------------------------------------------------

class TestSuccess:
    def test_renders_once_and_delivers_once(self, tmp_settings, fitco_answers):
        delivery = FakeDelivery()
        gen = _generator(tmp_settings, delivery)
        _fill(gen, fitco_answers)
        errors = asyncio.run(gen.generate())
        assert errors == ErrorSet()
        assert len(FakeSink.instances) == 1
        assert FakeSink.instances[0].renders == 1
        assert delivery.saved == [(b"%PDF-fake", "social-strategy.pdf")]
        assert gen.last_delivery == Path("/downloads/social-strategy.pdf")

    def test_success_clears_previous_errors(self, tmp_settings, fitco_answers):
        gen = _generator(tmp_settings)
        asyncio.run(gen.generate())
        _fill(gen, fitco_answers)
        asyncio.run(gen.generate())
        assert not gen.errors

    def test_title_from_settings(self, tmp_settings, fitco_answers):
        tmp_settings.sheet_title = "FitCo Plan"
        gen = _generator(tmp_settings)
        _fill(gen, fitco_answers)
        asyncio.run(gen.generate())
        assert FakeSink.instances[0].calls[0] == "heading:FitCo Plan"

    def test_logo_placed_before_text(self, tmp_settings, fitco_answers, png_bytes):
        gen = _generator(tmp_settings)
        _fill(gen, fitco_answers)
        gen.update("logo", png_bytes)
        asyncio.run(gen.generate())
        calls = FakeSink.instances[0].calls
        assert calls[1] == "image:PNG"
        assert calls[2] == "heading:Instagram Bio:"

    def test_repeated_generate_is_independent(self, tmp_settings, fitco_answers):
        delivery = FakeDelivery()
        gen = _generator(tmp_settings, delivery)
        _fill(gen, fitco_answers)
        asyncio.run(gen.generate())
        asyncio.run(gen.generate())
        assert len(FakeSink.instances) == 2
        assert len(delivery.saved) == 2

    def test_default_delivery_writes_to_output_dir(self, tmp_settings, fitco_answers):
        gen = StrategyGenerator(tmp_settings, sink_factory=FakeSink)
        assert isinstance(gen.delivery, DirectoryDelivery)
        _fill(gen, fitco_answers)
        asyncio.run(gen.generate())
        written = tmp_settings.output_dir / "social-strategy.pdf"
        assert written.read_bytes() == b"%PDF-fake"
        assert gen.last_delivery == written


# ---------------------------------------------------------------------------
# Failures abort the whole attempt
# ---------------------------------------------------------------------------

class TestAbort:
    def test_corrupt_logo_aborts_without_delivery(self, tmp_settings, fitco_answers):
        delivery = FakeDelivery()
        gen = _generator(tmp_settings, delivery)
        _fill(gen, fitco_answers)
        gen.update("logo", b"not an image")
        with pytest.raises(ImageDecodeError):
            asyncio.run(gen.generate())
        assert FakeSink.instances == []
        assert delivery.saved == []

    def test_sink_failure_propagates(self, tmp_settings, fitco_answers):
        class BrokenSink(FakeSink):
            def render(self) -> bytes:
                raise SinkError("disk on fire")

        delivery = FakeDelivery()
        gen = StrategyGenerator(tmp_settings, sink_factory=BrokenSink, delivery=delivery)
        _fill(gen, fitco_answers)
        with pytest.raises(SinkError):
            asyncio.run(gen.generate())
        assert delivery.saved == []

    def test_generator_usable_after_failure(self, tmp_settings, fitco_answers):
        gen = _generator(tmp_settings)
        _fill(gen, fitco_answers)
        gen.update("logo", b"broken")
        with pytest.raises(ImageDecodeError):
            asyncio.run(gen.generate())
        gen.update("logo", None)
        assert asyncio.run(gen.generate()) == ErrorSet()


# ---------------------------------------------------------------------------
# Re-entrancy
# ---------------------------------------------------------------------------

class TestReentrancy:
    def test_concurrent_generate_is_rejected(self, tmp_settings, fitco_answers, png_bytes):
        delivery = FakeDelivery()
        gen = _generator(tmp_settings, delivery)
        _fill(gen, fitco_answers)
        gen.update("logo", png_bytes)

        async def run():
            first = asyncio.ensure_future(gen.generate())
            await asyncio.sleep(0)  # first call is now suspended on the logo decode
            with pytest.raises(GenerationInProgressError):
                await gen.generate()
            return await first

        assert asyncio.run(run()) == ErrorSet()
        assert len(delivery.saved) == 1


def test_design_loaded_from_project(tmp_settings):
    tmp_settings.design_yaml_path.write_text("layout:\n  line_height_mm: 8\n", encoding="utf-8")
    gen = StrategyGenerator(tmp_settings, sink_factory=FakeSink, delivery=FakeDelivery())
    assert gen.design.layout.line_height_mm == 8.0


def test_delivery_error_wrapped(tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("a file, not a directory")
    with pytest.raises(SinkError):
        DirectoryDelivery(blocker / "out").save(b"%PDF", "social-strategy.pdf")


def test_weasyprint_sink_is_default(tmp_settings):
    with patch("pipeline.generator.WeasyPrintSink") as mock_sink_cls:
        mock_sink_cls.return_value.render.return_value = b"%PDF"
        gen = StrategyGenerator(tmp_settings, sink_factory=None, delivery=FakeDelivery())
    assert gen.sink_factory is mock_sink_cls
