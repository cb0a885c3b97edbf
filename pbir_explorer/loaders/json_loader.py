"""JSON file reading with failures reported as LoadResult values."""

import json
import os
from pathlib import Path
from typing import Any

from pbir_explorer.domain.enums import LoadFailure
from pbir_explorer.domain.result import LoadResult


def read_json(path: str | os.PathLike) -> LoadResult[Any]:
    """Read and decode a JSON file.

    A missing file is NOT_FOUND; anything unreadable or undecodable is
    PARSE_FAILURE. Files written by the authoring tool may carry a BOM.
    """
    path = Path(path)
    try:
        with open(path, encoding='utf-8-sig') as f:
            return LoadResult.success(json.load(f))
    except FileNotFoundError:
        return LoadResult.fail(LoadFailure.NOT_FOUND, str(path))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        return LoadResult.fail(LoadFailure.PARSE_FAILURE, f"{path}: {e}")


def read_json_object(path: str | os.PathLike) -> LoadResult[dict[str, Any]]:
    """Read a JSON file whose top-level value must be an object."""
    result = read_json(path)
    if result.ok and not isinstance(result.value, dict):
        return LoadResult.fail(
            LoadFailure.PARSE_FAILURE, f"{path}: expected a JSON object",
        )
    return result
