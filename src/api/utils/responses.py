"""Default response class of the application.

Bodies are encoded with orjson and keys are sorted, so the same payload is
always the same bytes. ``None`` values are written as ``null``; error bodies
drop optional keys themselves before they get here.
"""

from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ORJSONResponse(JSONResponse):
    """orjson-encoded JSON response with sorted keys."""

    def render(self, content: Any) -> bytes:  # noqa: ANN401
        """Encode a response model or plain JSON-compatible value."""
        payload = (
            content.model_dump(mode="json")
            if isinstance(content, BaseModel)
            else content
        )
        return orjson.dumps(payload, option=orjson.OPT_SORT_KEYS)
