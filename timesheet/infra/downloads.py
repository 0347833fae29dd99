"""
Download sink that persists export artifacts as files.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class FileDownloadSink:
    """
    Writes each artifact into a directory, replacing a file of the same name.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.last_path: Path | None = None

    def trigger_download(self, content: bytes, filename: str) -> None:
        # Keep only the final path component
        target = self.directory / Path(filename).name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        self.last_path = target
        logger.info(f"Export saved to {target}")
