# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""JSON-with-comments decoding for debug configuration files."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import json5

JsoncLoader = Callable[[str], Any]


def load_jsonc(text: str) -> Any:
    """Decode ``text`` allowing comments and trailing commas.

    Raises:
        ValueError: If the document cannot be decoded.
    """

    return json5.loads(text)


__all__ = ["JsoncLoader", "load_jsonc"]
