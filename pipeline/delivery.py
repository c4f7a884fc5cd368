"""Delivery — hand the rendered sheet to the user by writing it to a directory."""
import logging
from pathlib import Path

from pipeline.interfaces import SinkError

logger = logging.getLogger(__name__)


class DirectoryDelivery:
    def __init__(self, output_dir: Path):
        self.output_dir = output_dir

    def save(self, artifact: bytes, file_name: str) -> Path:
        """Write ``artifact`` to ``output_dir/file_name``, replacing any previous sheet.

        Raises SinkError if the file cannot be written.
        """
        path = self.output_dir / file_name
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(artifact)
        except OSError as exc:
            raise SinkError(f"Could not save {file_name} to {self.output_dir}: {exc}") from exc
        logger.info("Delivered → %s (%d bytes)", path, len(artifact))
        return path
