from pydantic import ConfigDict

# Request bodies: strip whitespace, validate on assignment, reject unknown keys
request_model_config = ConfigDict(
    str_strip_whitespace=True,
    validate_assignment=True,
    extra="forbid",
)
