#!/usr/bin/env python3
"""
eml2html
Reads one email from stdin and renders it into an output directory
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from eml2html.modules.email_assembler import EmailAssembler
from eml2html.modules.errors import ConversionError
from eml2html.modules.result_writer import ResultWriter
from eml2html.utils.config import Config
from eml2html.utils.logging_utils import ColoredFormatter
from eml2html.utils.structured_logging import JSONFormatter


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class EmailRenderPipeline:
    """Wires configuration, logging, decoding and output together"""

    def __init__(self, config_file: str = ".env"):
        """
        Initialize pipeline

        Args:
            config_file: Path to configuration file
        """
        self.config = Config(config_file)
        self.config.validate()

        self._setup_logging()
        self.logger = logging.getLogger("EmailRenderPipeline")

        self.assembler = EmailAssembler.from_config(self.config.decoder)
        self.writer = ResultWriter(self.config.output)

    def _setup_logging(self):
        """Setup logging configuration"""
        level_name = str(self.config.system.log_level).upper()
        level = logging._nameToLevel.get(level_name, logging.WARNING)

        if self.config.system.log_format == "json":
            formatter = JSONFormatter()
        elif self.config.system.log_format == "color" and sys.stderr.isatty():
            formatter = ColoredFormatter(LOG_FORMAT)
        else:
            formatter = logging.Formatter(LOG_FORMAT)

        handlers = [logging.StreamHandler(sys.stderr)]
        if self.config.system.log_file:
            log_path = Path(self.config.system.log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path)
            file_handler.setFormatter(
                JSONFormatter() if self.config.system.log_format == "json"
                else logging.Formatter(LOG_FORMAT)
            )
            handlers.append(file_handler)
        handlers[0].setFormatter(formatter)

        logging.basicConfig(level=level, handlers=handlers, force=True)

        if level_name not in logging._nameToLevel:
            logging.getLogger("EmailRenderPipeline").warning(
                "Invalid log level '%s'; defaulting to WARNING",
                self.config.system.log_level
            )

    def run(self, stream: BinaryIO, output_dir: Union[str, Path]) -> Path:
        """
        Convert the message on ``stream`` and write it to ``output_dir``

        Returns:
            Path of the written index page

        Raises:
            ConversionError: The message could not be converted
            OSError: The result could not be written
        """
        record = self.assembler.parse_stream(stream)
        index_path = self.writer.write(record, output_dir)
        self.logger.info(
            "Rendered message into %s (html=%s, text=%s, attachments=%d)",
            index_path,
            record.html is not None,
            bool(record.text),
            len(record.attachments),
        )
        return index_path


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eml2html",
        description="Render a raw email read from stdin into a browsable directory."
    )
    parser.add_argument("-dir", "--dir", dest="dir", default="", help="output directory")
    parser.add_argument("--env", default=".env", help="configuration file (default: .env)")
    return parser


def main(argv: Optional[List[str]] = None, stdin: Optional[BinaryIO] = None) -> int:
    """Main entry point; returns the process exit code"""
    args = build_arg_parser().parse_args(argv)

    if not args.dir:
        print("dir not set")
        return 1

    try:
        pipeline = EmailRenderPipeline(args.env)
        pipeline.run(stdin if stdin is not None else sys.stdin.buffer, args.dir)
    except ConversionError as e:
        logging.getLogger("EmailRenderPipeline").error(
            "Conversion failed (%s): %s", e.kind.name, e
        )
        print(f"Fatal error: {e}")
        return 1
    except (OSError, ValueError) as e:
        logging.getLogger("EmailRenderPipeline").error("Fatal error: %s", e, exc_info=True)
        print(f"Fatal error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
