"""
ANSI color codes for console log output
"""

class Colors:
    """ANSI color codes used by the console log formatter"""
    RESET = "\033[0m"
    BOLD = "\033[1m"

    # Text Colors
    GREY = "\033[90m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
