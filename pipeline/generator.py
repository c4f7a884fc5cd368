"""The input surface: accumulate answers, then generate and deliver the sheet.

    gen = StrategyGenerator(settings)
    gen.update("business", "FitCo")
    ...
    errors = await gen.generate()

``generate()`` returns the ErrorSet of the attempt. An empty ErrorSet means
the sheet was rendered once and handed to the delivery once; a non-empty one
means nothing was rendered. Every other failure (logo, overflow, sink)
raises and leaves no delivered file behind.
"""
import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from models.design import DesignSystem
from models.input_record import ErrorSet, InputRecord
from pipeline.delivery import DirectoryDelivery
from pipeline.interfaces import Delivery, DocumentSink, GenerationInProgressError
from pipeline.stage1_validate import revalidate_field, validate
from pipeline.stage2_derive import build_sheet
from pipeline.stage3_image import load_image
from pipeline.stage4_layout import compose, render_layout
from pipeline.stage5_render import WeasyPrintSink
from settings import Settings

logger = logging.getLogger(__name__)


class StrategyGenerator:
    def __init__(
        self,
        settings: Settings,
        design: DesignSystem | None = None,
        sink_factory: Callable[[DesignSystem], DocumentSink] | None = None,
        delivery: Delivery | None = None,
        record: InputRecord | None = None,
    ):
        self.settings = settings
        self.design = design or DesignSystem.load_or_default(settings.design_yaml_path)
        self.sink_factory = sink_factory or WeasyPrintSink
        self.delivery = delivery or DirectoryDelivery(settings.output_dir)
        self.record = record or InputRecord()
        self.errors = ErrorSet()
        self.last_delivery: Path | None = None
        self._in_flight = False

    def update(self, field: str, value: str | bytes | None) -> InputRecord:
        """Set one answer and clear its error flag if it is now filled in."""
        self.record = self.record.update(field, value)
        self.errors = revalidate_field(self.record, self.errors, field)
        return self.record

    async def generate(self) -> ErrorSet:
        """Validate the current record and, if complete, render and deliver the sheet.

        Raises GenerationInProgressError if called again before finishing.
        """
        if self._in_flight:
            raise GenerationInProgressError("A strategy sheet is already being generated")
        self._in_flight = True
        try:
            return await self._generate(self.record)
        finally:
            self._in_flight = False

    async def _generate(self, record: InputRecord) -> ErrorSet:
        errors = validate(record)
        self.errors = errors
        if errors:
            return errors

        sheet = build_sheet(record, self.settings.sheet_title)

        image_task = None
        if record.logo is not None:
            image_task = asyncio.ensure_future(
                load_image(record.logo, timeout=self.settings.logo_timeout_sec)
            )
        try:
            layout = await compose(sheet, image_task, self.design)
        except Exception as exc:
            logger.error("Composition failed, no sheet delivered: %s", exc)
            raise
        finally:
            if image_task is not None and not image_task.done():
                image_task.cancel()

        artifact = render_layout(layout, self.sink_factory(self.design))
        self.last_delivery = self.delivery.save(artifact, self.settings.output_filename)
        return errors
