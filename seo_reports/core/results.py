from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    QUOTA = "quota"
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"


STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.QUOTA: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UPSTREAM: 500,
}


@dataclass
class ServiceError:
    """
    Failure returned by a collaborator. The HTTP layer turns it into a
    status code and a JSON body; nothing below the route raises for these.
    """

    kind: ErrorKind
    message: str
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message, **self.payload}


@dataclass
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, **payload: Any) -> "Result[T]":
        return cls(error=ServiceError(kind=kind, message=message, payload=payload))
