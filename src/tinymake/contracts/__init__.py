"""Packaged JSON schemas."""

from __future__ import annotations

import json
from importlib import resources

CONFIG_SCHEMA = "tinymake-config.v1.schema.json"
OUTPUT_SCHEMA = "tinymake-output.v1.schema.json"


def load_schema(name: str) -> dict[str, object]:
    text = resources.files(__name__).joinpath("schema").joinpath(name).read_text(encoding="utf-8")
    return json.loads(text)
