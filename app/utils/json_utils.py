# Fichier : app/utils/json_utils.py

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def strip_code_fences(raw: str) -> str:
    """Supprime des fences ```...``` éventuels (ex: ```json ... ```)."""
    text = raw.strip()
    if not text.startswith("```"):
        return text

    newline = text.find("\n")
    inner = text[newline + 1 :] if newline != -1 else text[3:]
    end = inner.rfind("```")
    if end != -1:
        inner = inner[:end]
    return inner.strip()


def parse_json_field(raw: Any) -> Any:
    """Parse a free-text JSON form field.

    Valid JSON is returned decoded. Anything else (plain prose, a half-typed
    object) is returned unchanged so the field is stored as an opaque string
    instead of failing the whole form.
    """
    if not isinstance(raw, str):
        return raw

    text = raw.strip()
    if not text:
        return raw

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        logger.debug("Keeping non-JSON field value as text (%d chars)", len(text))
        return raw


def load_json_document(raw: str) -> Any:
    """Decode an uploaded/pasted JSON document. Raises ``ValueError`` when it is not JSON."""
    if raw is None:
        raise ValueError("load_json_document: input is None")
    return json.loads(strip_code_fences(str(raw)))


def dump_json(data: Any) -> str:
    """Pretty JSON with Japanese text left readable."""
    return json.dumps(data, ensure_ascii=False, indent=2, default=str)
