"""Type aliases for dynamic data structures."""

# JSON-compatible type that represents any valid JSON value
# Used for the post metadata column
type JsonValue = (
    dict[str, "JsonValue"] | list["JsonValue"] | str | int | float | bool | None
)
