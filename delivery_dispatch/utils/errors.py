"""Exception serialization for failure results."""

import json
import traceback
from typing import Any


def describe_exception(error: BaseException) -> dict[str, Any]:
    """
    Describe an exception as plain data.

    Includes the type, message, args, any attributes set on the instance,
    the formatted traceback and, recursively, the exception that caused it.
    """
    details: dict[str, Any] = {
        "type": type(error).__name__,
        "message": str(error),
        "args": list(error.args),
    }

    attributes = {
        name: value for name, value in vars(error).items() if not name.startswith("_")
    }
    if attributes:
        details["attributes"] = attributes

    if error.__traceback__ is not None:
        details["stack"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )

    cause = error.__cause__
    if cause is None and not error.__suppress_context__:
        cause = error.__context__
    if cause is not None:
        details["cause"] = describe_exception(cause)

    return details


def serialize_exception(error: BaseException) -> str:
    """Serialize an exception, including instance attributes, to a JSON string."""
    return json.dumps(describe_exception(error), default=str)
