"""Error response bodies.

Every error answers with ``{"error": <label>}``. Client-facing errors add a
``details`` string; validation failures add the list of violations instead.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of every non-validation error response."""

    error: str = Field(
        ...,
        description="Stable label of the error kind",
        examples=["Resource not found", "Conflict", "Internal server error"],
    )
    details: str | None = Field(
        default=None,
        description="Client-facing detail, omitted when there is none",
        examples=["Email already exists"],
    )


class Violation(BaseModel):
    """All messages reported for one field."""

    field: str = Field(
        ...,
        description="Dotted path of the field in the request body",
        examples=["title", "metadata.tags.0.name"],
    )
    messages: list[str] = Field(
        ...,
        description="Every rule the field violates",
        examples=[["String should have at most 50 characters"]],
    )


class ValidationErrorResponse(BaseModel):
    """Body of a 422 response."""

    error: str = Field(..., examples=["Validation failed"])
    violations: list[Violation]

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "Validation failed",
                    "violations": [
                        {
                            "field": "metadata.tags.0.name",
                            "messages": ["String should have at most 50 characters"],
                        }
                    ],
                }
            ]
        }
    }
