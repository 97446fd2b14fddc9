import logging
import copy
from .colors import Colors


class ColoredFormatter(logging.Formatter):
    """
    Custom formatter to add colors to log levels and specific messages.
    Highlights finished conversions and dims per-part tracing.
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.GREY,
        logging.INFO: Colors.BLUE,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED
    }

    def format(self, record):
        # Work on a copy so a file handler sharing the record gets no ANSI codes
        record = copy.copy(record)

        color = self.LEVEL_COLORS.get(record.levelno, Colors.RESET)
        record.levelname = f"{color}{record.levelname}{Colors.RESET}"

        if isinstance(record.msg, str):
            if record.msg.startswith("Rendered message"):
                record.msg = f"{Colors.GREEN}{record.msg}{Colors.RESET}"
            elif record.levelno == logging.DEBUG and record.name == "MultipartWalker":
                record.msg = f"{Colors.GREY}{record.msg}{Colors.RESET}"

        return super().format(record)
