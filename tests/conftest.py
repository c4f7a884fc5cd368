import io
from pathlib import Path

import pytest
from PIL import Image

from models.input_record import InputRecord
from settings import Settings


FITCO_ANSWERS = {
    "business": "FitCo",
    "goal": "Boost Engagement",
    "audience": "25-35yo women",
    "problem": "lack of time",
    "unique": "10-min workouts",
    "contentType": "Short form video",
    "platforms": "Instagram, TikTok",
    "products": "coaching",
    "niche": "fitness",
}


@pytest.fixture
def fitco_answers() -> dict[str, str]:
    return dict(FITCO_ANSWERS)


@pytest.fixture
def fitco_record(fitco_answers) -> InputRecord:
    """A complete record without a logo."""
    return InputRecord(**fitco_answers)


@pytest.fixture
def png_bytes() -> bytes:
    """A small real PNG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (40, 20), color=(225, 25, 100)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def tmp_settings(tmp_path: Path) -> Settings:
    """Settings instance pointing at a fresh temp directory for tests that write output.

    Directory layout mirrors the real project:
        data/template/  optional design.yaml
        data/output/    delivered sheets
    """
    (tmp_path / "template").mkdir()
    return Settings(project_dir=tmp_path)
