"""Stage 2: Text Derivation — turn a complete InputRecord into sheet text.

Block order is fixed:
  Instagram Bio, Hashtags, Messaging, Content Type to Post,
  Content Schedule (5Cs), Marketing Strategy

The hashtag rules are deliberately naive and must stay that way:
  - goal: lowercased, then only the FIRST space removed
    ("Going Viral & Brand Awareness" → "goingviral & brand awareness")
  - audience: the text before the first single space
    (" women" → "", a leading space yields an empty tag)
"""
import logging

from models.input_record import InputRecord
from models.strategy import StrategySheet, TextBlock
from pipeline.interfaces import IncompleteRecordError
from pipeline.stage1_validate import validate

logger = logging.getLogger(__name__)

SCHEDULE_BLOCK = TextBlock(
    label="Content Schedule (5Cs):",
    lines=(
        "Create: Mon - New post",
        "Curate: Wed - Share relevant content",
        "Connect: Fri - Engage followers",
    ),
)


def derive(record: InputRecord) -> tuple[TextBlock, ...]:
    """Return the ordered text blocks for ``record``.

    Raises IncompleteRecordError if the record does not pass validation.
    """
    errors = validate(record)
    if errors:
        raise IncompleteRecordError(errors.fields)

    goal_lower = record.goal.lower()
    return (
        TextBlock(label="Instagram Bio:", lines=(f"{record.business} | {record.unique}",)),
        TextBlock(label="Hashtags:", lines=(" ".join(hashtags(record)),)),
        TextBlock(label="Messaging:", lines=(f"We solve {record.problem} for {record.audience}.",)),
        TextBlock(label="Content Type to Post:", lines=(record.contentType,)),
        SCHEDULE_BLOCK,
        TextBlock(label="Marketing Strategy:", lines=(f"Focus on {record.platforms} to {goal_lower}.",)),
    )


def hashtags(record: InputRecord) -> list[str]:
    return [
        f"#{record.niche}",
        f"#{record.goal.lower().replace(' ', '', 1)}",
        f"#{record.audience.split(' ')[0]}",
    ]


def build_sheet(record: InputRecord, title: str) -> StrategySheet:
    blocks = derive(record)
    logger.info("Derived %d text blocks for '%s'", len(blocks), record.business)
    return StrategySheet(title=title, blocks=blocks)
