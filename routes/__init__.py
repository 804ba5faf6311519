from flask import request


class FieldError(ValueError):
    """A request body field has the wrong type or is blank."""


def json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def text_field(data, key, default=None, required=False):
    """Return ``data[key]`` stripped; raise FieldError on non-strings or required blanks."""
    value = data.get(key)
    if value is None:
        value = default
    elif not isinstance(value, str):
        raise FieldError(f"{key} must be a string.")
    else:
        value = value.strip()
    if required and not value:
        raise FieldError(f"{key} is required.")
    return value
