#!/usr/bin/env python3
"""Generate a social media strategy sheet from an answers file.

Usage:
    python run_pipeline.py --print-template > answers.yaml   # blank questionnaire
    python run_pipeline.py --answers answers.yaml             # render the sheet
    python run_pipeline.py --answers answers.yaml --logo logo.png
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

import yaml

sys.path.insert(0, str(Path(__file__).resolve().parent))

from models.fieldset import FIELDS, field_spec
from pipeline.delivery import DirectoryDelivery
from pipeline.generator import StrategyGenerator
from pipeline.interfaces import StrategyGeneratorError
from settings import Settings

logger = logging.getLogger("run_pipeline")


def answer_template() -> str:
    """YAML skeleton with every question (and its options) as a comment."""
    lines = []
    for spec in FIELDS:
        if spec.name == "logo":
            continue
        lines.append(f"# {spec.label}")
        if spec.options:
            lines.append(f"#   options: {' | '.join(spec.options)}")
        elif spec.placeholder:
            lines.append(f"#   {spec.placeholder}")
        lines.append(f'{spec.name}: ""')
    return "\n".join(lines) + "\n"


def load_answers(path: Path) -> dict[str, str]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping of field name to answer")
    answers = {}
    for name, value in data.items():
        field_spec(name)  # KeyError for unknown questions
        if name == "logo":
            raise ValueError("Pass the logo with --logo, not in the answers file")
        answers[name] = "" if value is None else str(value)
    return answers


async def _run(generator: StrategyGenerator, answers: dict[str, str], logo: Path | None) -> int:
    for name, value in answers.items():
        generator.update(name, value)
    if logo is not None:
        generator.update("logo", logo.read_bytes())

    errors = await generator.generate()
    if errors:
        for name in errors.fields:
            print(f"{field_spec(name).label} This field is required", file=sys.stderr)
        return 1
    print(generator.last_delivery)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--answers", type=Path, help="YAML file with one answer per field")
    parser.add_argument("--logo", type=Path, help="Optional logo image to embed")
    parser.add_argument("--output-dir", type=Path, dest="output_dir",
                        help="Write the PDF here instead of <project_dir>/output")
    parser.add_argument("--print-template", action="store_true", dest="print_template",
                        help="Print a blank answers file and exit")
    args = parser.parse_args()

    if args.print_template:
        sys.stdout.write(answer_template())
        return
    if args.answers is None:
        parser.error("--answers is required")

    settings = Settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )

    delivery = DirectoryDelivery(args.output_dir or settings.output_dir)
    generator = StrategyGenerator(settings, delivery=delivery)

    try:
        answers = load_answers(args.answers)
        exit_code = asyncio.run(_run(generator, answers, args.logo))
    except (StrategyGeneratorError, ValueError, KeyError, OSError) as exc:
        logger.error("Generation failed: %s", exc)
        sys.exit(2)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
