# content_engine/utils/frontmatter.py
"""
Metadata header parsing for markdown and HTML content files.

A header is a YAML block between two ``---`` lines at the very top of the
file. Absence of a header is valid; a malformed header is logged and the
file is treated as having none.
"""

import logging
import re
from typing import Any, Dict, Tuple

import yaml

logger = logging.getLogger(__name__)

_HEADER_RE = re.compile(r"\A---[ \t]*\n(.*?)\n?---[ \t]*(?:\n|\Z)", re.DOTALL)


def parse_frontmatter(content: str, source: str = "") -> Tuple[Dict[str, Any], str]:
    """
    Split a document into its header fields and body.

    Args:
        content: Full file text
        source: Path used in log messages

    Returns:
        (metadata, body). Metadata is empty when there is no usable header.
    """
    text = content.lstrip("﻿").replace("\r\n", "\n")
    match = _HEADER_RE.match(text)
    if not match:
        return {}, text

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        logger.warning("Ignoring malformed header in %s: %s", source or "<content>", e)
        return {}, text

    if data is None:
        data = {}
    if not isinstance(data, dict):
        logger.warning("Ignoring non-mapping header in %s", source or "<content>")
        return {}, text

    return data, text[match.end():]
