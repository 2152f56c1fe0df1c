"""Structured error results returned by engine operations."""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from delivery_dispatch.utils.errors import serialize_exception


class ErrorKind(str, Enum):
    """The two disjoint classes of error an operation can return."""

    REFUSAL = "refusal"  # expected business condition
    FAILURE = "failure"  # persistence or transport exception


class ErrorDetail(BaseModel):
    """Details of a refusal or failure."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    kind: ErrorKind
    message: str | None = None
    status: int | None = None
    function_name: str | None = None
    error_string: str | None = None
    debug: dict[str, Any] | None = None


class ErrorResult(BaseModel):
    """
    Wrapper returned instead of a success value.

    Refusals carry a human-readable ``message`` and usually a ``status``
    hint. Failures carry the serialized exception in ``error_string`` and
    the same data, unserialized, in ``debug``.
    """

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail

    @classmethod
    def refusal(
        cls,
        message: str,
        status: int | None = None,
        function_name: str | None = None,
    ) -> "ErrorResult":
        """Build a business refusal."""
        return cls(
            error=ErrorDetail(
                kind=ErrorKind.REFUSAL,
                message=message,
                status=status,
                function_name=function_name,
            )
        )

    @classmethod
    def failure(
        cls,
        error: BaseException,
        function_name: str,
        status: int | None = None,
    ) -> "ErrorResult":
        """Build a failure result from an unexpected exception."""
        error_string = serialize_exception(error)
        return cls(
            error=ErrorDetail(
                kind=ErrorKind.FAILURE,
                function_name=function_name,
                status=status,
                error_string=error_string,
                debug=json.loads(error_string),
            )
        )

    @property
    def is_refusal(self) -> bool:
        return self.error.kind == ErrorKind.REFUSAL

    @property
    def is_failure(self) -> bool:
        return self.error.kind == ErrorKind.FAILURE

    def as_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting unset fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
