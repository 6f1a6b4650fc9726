"""Validates rendered artifacts before they replace the previous output."""

import json


def validate_json(files: dict[str, str]) -> dict[str, str]:
    """Check JSON files parse and look like a Postman collection.

    Returns dict of {filename: error_message} for files with errors.
    """
    errors = {}
    for filename, content in files.items():
        if not filename.endswith(".json"):
            continue
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            errors[filename] = f"JSONDecodeError: {e.msg} (line {e.lineno})"
            continue
        if not isinstance(data, dict) or "info" not in data or not isinstance(data.get("item"), list):
            errors[filename] = "Not a collection: expected top-level 'info' and 'item' keys"
    return errors


def validate_markdown(files: dict[str, str]) -> dict[str, str]:
    """Check Markdown files are non-empty and close every code fence.

    Returns dict of {filename: error_message} for files with errors.
    """
    errors = {}
    for filename, content in files.items():
        if not filename.endswith(".md"):
            continue
        if not content.strip():
            errors[filename] = "Empty page"
            continue
        fences = sum(1 for line in content.splitlines() if line.startswith("```"))
        if fences % 2:
            errors[filename] = "Unclosed code fence"
    return errors


def validate_files(files: dict[str, str]) -> dict[str, str]:
    """Run all validations on rendered files.

    Returns dict of {filename: error_message} for all files with errors.
    """
    errors = {}
    errors.update(validate_json(files))
    errors.update(validate_markdown(files))
    return errors
