"""
Result Writer
Persists a MessageRecord as a directory: index page, HTML body, attachments

SECURITY STORY: Attachment names come straight from the message. With
sanitize_filenames on, each name is reduced to a safe basename before it
touches the filesystem; with it off, names are used verbatim but a name
that resolves outside the output directory is still refused.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import List, Union

from .index_renderer import render_index
from .message_record import MessageRecord
from ..utils.config import OutputConfig
from ..utils.sanitization import sanitize_for_logging
from ..utils.security_validators import sanitize_filename


INDEX_FILENAME = "email.html"


class ResultWriter:
    """Writes one converted message into an output directory"""

    def __init__(self, config: OutputConfig):
        self.config = config
        self.logger = logging.getLogger("ResultWriter")

    def write(self, record: MessageRecord, output_dir: Union[str, Path]) -> Path:
        """
        Replace ``output_dir`` with the rendered message

        Args:
            record: The converted message
            output_dir: Directory to (re)create

        Returns:
            Path of the written index page

        Raises:
            OSError: On any filesystem failure, or an attachment name that
                escapes the output directory
        """
        output_path = Path(output_dir)
        self._reset_directory(output_path)

        attachment_names = self.stored_names(record)

        index_path = self._write_file(
            output_path, INDEX_FILENAME,
            render_index(record, attachment_names).encode("utf-8")
        )

        if record.html is not None:
            self._write_file(output_path, record.html.filename, record.html.data)

        # Colliding names are not deduplicated; the last write wins, so an
        # attachment stored as email.html replaces the index page
        for attachment, name in zip(record.attachments, attachment_names):
            self._write_file(output_path, name, attachment.data)

        self.logger.info(
            "Wrote %s with %d attachment(s)",
            sanitize_for_logging(str(output_path)), len(record.attachments)
        )
        return index_path

    def _reset_directory(self, output_path: Path) -> None:
        if output_path.is_symlink() or output_path.is_file():
            output_path.unlink()
        elif output_path.exists():
            shutil.rmtree(output_path)

        output_path.mkdir(mode=self.config.dir_mode)
        # mkdir honours the umask; chmod does not
        os.chmod(output_path, self.config.dir_mode)

    def _storage_name(self, filename: str) -> str:
        if self.config.sanitize_filenames:
            return sanitize_filename(filename)
        return filename

    def _write_file(self, output_path: Path, name: str, data: bytes) -> Path:
        target = output_path / name
        root = output_path.resolve()
        if root not in target.resolve().parents:
            raise OSError(f"refusing to write outside {output_path}: {name!r}")

        target.write_bytes(data)
        os.chmod(target, self.config.file_mode)
        return target

    def stored_names(self, record: MessageRecord) -> List[str]:
        """Names the attachments of ``record`` would be written under."""
        return [self._storage_name(a.filename) for a in record.attachments]
