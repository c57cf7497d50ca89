"""Syntax checks for generated code in the languages Python can parse itself."""

import ast
import json

import yaml


def validate_python(code: str) -> str | None:
    """Check Python code for syntax errors.

    Returns the error message, or None when the code parses.
    """
    try:
        ast.parse(code)
    except SyntaxError as e:
        return f"SyntaxError: {e.msg} (line {e.lineno})"
    return None


def validate_json(code: str) -> str | None:
    try:
        json.loads(code)
    except json.JSONDecodeError as e:
        return f"JSONDecodeError: {e.msg} (line {e.lineno})"
    return None


def validate_yaml(code: str) -> str | None:
    try:
        yaml.safe_load(code)
    except yaml.YAMLError as e:
        return f"YAMLError: {e}"
    return None


VALIDATORS = {
    "python": validate_python,
    "json": validate_json,
    "ansible": validate_yaml,
    "strest": validate_yaml,
}


def validate_output(language: str, code: str) -> str | None:
    """Run the syntax check for ``language``.

    Languages without a checker always pass.
    """
    validator = VALIDATORS.get(language)
    if validator is None:
        return None
    return validator(code)
