"""Grammar for the values of individual docblock tags."""

import json
import re

from routedoc.errors import TagSyntaxError
from routedoc.models import ExampleResponse, Parameter, ResponseField

TYPE_ALIASES = {
    "str": "string",
    "string": "string",
    "int": "integer",
    "integer": "integer",
    "float": "number",
    "double": "number",
    "number": "number",
    "bool": "boolean",
    "boolean": "boolean",
    "array": "array",
    "list": "array",
    "object": "object",
    "dict": "object",
    "file": "file",
}

EXAMPLE = re.compile(r"\s*Example:\s*(.+?)\s*$", re.DOTALL)
NO_EXAMPLE = re.compile(r"\s*No-example\.?\s*$")
ENUM = re.compile(r"\s*Enum:\s*(.+?)\s*$")
STATUS = re.compile(r"^(\d{3})\b\s*")
SCENARIO = re.compile(r'^scenario\s*=\s*"([^"]*)"\s*')


def normalize_type(value: str) -> str | None:
    """Map a declared type word to a canonical one; None if it is not a type."""
    value = value.strip().lower()
    if value.endswith("[]"):
        inner = normalize_type(value[:-2])
        return f"{inner}[]" if inner else None
    return TYPE_ALIASES.get(value)


def parse_param_tag(content: str, default_type: str = "string") -> Parameter:
    """Parse "name [type] [required] description [Example: x | No-example]"."""
    parts = content.strip().split(None, 1)
    if not parts:
        raise TagSyntaxError("Parameter tag has no name")
    name = parts[0]
    rest = parts[1] if len(parts) > 1 else ""

    param_type = default_type
    head, _, tail = rest.partition(" ")
    if head and normalize_type(head):
        param_type = normalize_type(head)
        rest = tail

    required = False
    head, _, tail = rest.partition(" ")
    if head == "required":
        required = True
        rest = tail

    description, example, has_example = _split_example(rest.strip())
    enum = None
    match = ENUM.search(description)
    if match:
        enum = [cast_value(v.strip().strip("`"), param_type) for v in match.group(1).split(",")]
        description = description[: match.start()].strip()

    return Parameter(
        name=name,
        type=param_type,
        required=required,
        description=description,
        example=cast_value(example, param_type) if has_example and example is not None else None,
        has_example=has_example,
        enum=enum,
    )


def _split_example(text: str) -> tuple[str, str | None, bool]:
    """Return (description, example, example_was_declared)."""
    if NO_EXAMPLE.search(text):
        return NO_EXAMPLE.sub("", text).strip(), None, True
    match = EXAMPLE.search(text)
    if match:
        return text[: match.start()].strip(), match.group(1), True
    return text, None, False


def cast_value(value, param_type: str):
    """Cast an example given as text to the parameter's declared type."""
    if not isinstance(value, str):
        return value
    if param_type.endswith("[]") or param_type == "array":
        try:
            loaded = json.loads(value)
            if isinstance(loaded, list):
                return loaded
        except json.JSONDecodeError:
            pass
        inner = param_type[:-2] if param_type.endswith("[]") else "string"
        return [cast_value(v.strip(), inner) for v in value.split(",")]
    if param_type == "integer":
        try:
            return int(value)
        except ValueError:
            return value
    if param_type == "number":
        try:
            return float(value)
        except ValueError:
            return value
    if param_type == "boolean":
        return value.strip().lower() in ("true", "1", "yes")
    if param_type == "object":
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


def parse_header_tag(content: str) -> tuple[str, str]:
    name, _, value = content.strip().partition(" ")
    return name, value.strip()


def parse_response_tag(content: str) -> ExampleResponse:
    """Parse "[status] [scenario="..."] body"."""
    text = content.strip()
    status = 200
    match = STATUS.match(text)
    if match:
        status = int(match.group(1))
        text = text[match.end():]
    description = ""
    match = SCENARIO.match(text)
    if match:
        description = match.group(1)
        text = text[match.end():]
    return ExampleResponse(status=status, body=text.strip(), description=description)


def parse_response_file_tag(content: str) -> tuple[int, str, dict]:
    """Parse "[status] path [json overrides]" into (status, path, overrides)."""
    text = content.strip()
    status = 200
    match = STATUS.match(text)
    if match:
        status = int(match.group(1))
        text = text[match.end():]
    path, _, extra = text.partition(" ")
    overrides = {}
    if extra.strip():
        try:
            overrides = json.loads(extra)
        except json.JSONDecodeError as e:
            raise TagSyntaxError(f"@responseFile {path} has invalid JSON overrides") from e
    return status, path, overrides


def parse_response_field_tag(content: str) -> ResponseField:
    parts = content.strip().split(None, 1)
    if not parts:
        raise TagSyntaxError("Response field tag has no name")
    name = parts[0]
    rest = parts[1] if len(parts) > 1 else ""
    field_type = ""
    head, _, tail = rest.partition(" ")
    if head and normalize_type(head):
        field_type = normalize_type(head)
        rest = tail
    return ResponseField(name=name, type=field_type, description=rest.strip())
