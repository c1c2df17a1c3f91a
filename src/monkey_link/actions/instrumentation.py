"""Instrumentation output parser."""

from __future__ import annotations

import re

from monkey_link.errors import malformed_result_error

_TAG_PATTERN = re.compile(r"^INSTRUMENTATION_(\w+): ", re.MULTILINE)


def parse_instrumentation_result(output: str) -> dict[str, str]:
    """Collect key=value pairs from INSTRUMENTATION_RESULT blocks.

    A block runs from its tag to the next tag (or end of output). Only
    RESULT blocks contribute; the trimmed block text is split on its first
    ``=``, so values may span several lines.

    Raises:
        MonkeyError: If a RESULT block has no '=' (ERR_MALFORMED_RESULT).
    """
    results: dict[str, str] = {}
    matches = list(_TAG_PATTERN.finditer(output))

    for index, match in enumerate(matches):
        if match.group(1) != "RESULT":
            continue
        block_end = matches[index + 1].start() if index + 1 < len(matches) else len(output)
        line = output[match.end() : block_end].strip()
        key, sep, value = line.partition("=")
        if not sep:
            raise malformed_result_error(line)
        results[key] = value

    return results
