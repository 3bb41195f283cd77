"""
Command grammar for the DingTalk bot.

Messages look like `COMMAND#content`:
- `LIST` - list environment variable names
- `UPDATE#key=value` - set a variable's value
"""

from enum import Enum
from typing import Optional, Tuple


class Command(str, Enum):
    LIST = "LIST"
    UPDATE = "UPDATE"


COMMAND_DELIMITER = "#"
ASSIGNMENT_DELIMITER = "="

LIST_HEADER = "Environment variables:"

USAGE_HELP_TEXT = """Unrecognized command. Supported commands: {commands}

- `LIST`: list all environment variable names
- `UPDATE#key=value`: update the value of environment variable `key`
"""


def parse_command(text: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Split message text into (command, content) on the first `#`.

    Empty text gives (None, None); text without `#` gives (text, None).
    """
    text = (text or "").strip()
    if not text:
        return None, None

    command, delimiter, content = text.partition(COMMAND_DELIMITER)
    return command, content if delimiter else None


def parse_assignment(content: Optional[str]) -> Tuple[str, str]:
    """Split `key=value` on the first `=`; missing parts come back empty."""
    key, _, value = (content or "").partition(ASSIGNMENT_DELIMITER)
    return key, value


def format_variable_list(names: list[str]) -> str:
    return LIST_HEADER + "\n" + "\n".join(names)


def format_usage_help() -> str:
    commands = ", ".join(f"`{command.value}`" for command in Command)
    return USAGE_HELP_TEXT.format(commands=commands).strip()
