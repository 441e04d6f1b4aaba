"""
Operation results.

Every subscriber operation returns one of these instead of raising, and the
route turns it into an HTTP response.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    INVALID_INPUT = 400
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    CONFLICT = 409
    STORAGE_ERROR = 500

    @property
    def status(self) -> int:
        return self.value


@dataclass
class Success:
    payload: Dict[str, Any] = field(default_factory=dict)
    status: int = 200

    def body(self) -> Dict[str, Any]:
        return {'success': True, **self.payload}


@dataclass
class CsvExport:
    filename: str
    content: str
    status: int = 200


@dataclass
class Failure:
    kind: ErrorKind
    message: str
    extra: Optional[Dict[str, Any]] = None

    @property
    def status(self) -> int:
        return self.kind.status

    def body(self) -> Dict[str, Any]:
        body = {'success': False, 'message': self.message}
        if self.extra:
            body.update(self.extra)
        return body
