"""
Utility script to generate and write the OpenAPI schema for the FastAPI app.

Usage:
    python -m tasklist.generate_openapi [output_path]

Notes:
- The script ensures every tag from openapi_tags is present in the schema.
- Default output path is interfaces/openapi.json under the current directory.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from fastapi import FastAPI

from .main import app as default_app
from .main import openapi_tags

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = os.path.join("interfaces", "openapi.json")


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """
    Ensure the OpenAPI schema contains the expected tags metadata. Existing
    tag definitions are left alone.
    """
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


# PUBLIC_INTERFACE
def generate_openapi(out_path: str = DEFAULT_OUTPUT, app: Optional[FastAPI] = None) -> str:
    """Write the OpenAPI schema to out_path (creating directories) and return the path."""
    schema = (app or default_app).openapi()
    _ensure_tags(schema)

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    logger.info("Wrote OpenAPI schema to %s", out_path)
    return out_path


def main() -> None:
    out = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_OUTPUT
    print(f"Wrote OpenAPI schema to: {generate_openapi(out)}")


if __name__ == "__main__":
    main()
