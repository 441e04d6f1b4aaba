"""
Request-side values handed to the subscriber operations.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .results import ErrorKind, Failure

# Email validation regex: rejects consecutive dots, leading/trailing dots
EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9_%+-]+(\.[a-zA-Z0-9_%+-]+)*@[a-zA-Z0-9-]+(\.[a-zA-Z0-9-]+)*\.[a-zA-Z]{2,}$')

MAX_EMAIL_LENGTH = 255
MAX_IP_LENGTH = 45
DEFAULT_IP = '0.0.0.0'


@dataclass
class RequestContext:
    """Everything an operation may read from the incoming request."""
    method: str
    args: Dict[str, str] = field(default_factory=dict)
    body: bytes = b''
    forwarded_for: Optional[str] = None
    real_ip: Optional[str] = None
    remote_addr: Optional[str] = None

    @classmethod
    def from_flask(cls, request):
        return cls(
            method=request.method.upper(),
            args=request.args.to_dict(),
            body=request.get_data(),
            forwarded_for=request.headers.get('X-Forwarded-For'),
            real_ip=request.headers.get('X-Real-IP'),
            remote_addr=request.remote_addr,
        )

    def has_arg(self, name):
        return name in self.args

    def client_ip(self):
        """
        Origin address: first X-Forwarded-For hop, then X-Real-IP, then the
        socket peer. Client-supplied headers are trusted as-is.
        """
        ip = None
        if self.forwarded_for:
            ip = self.forwarded_for.split(',')[0].strip()
        if not ip and self.real_ip:
            ip = self.real_ip.strip()
        if not ip:
            ip = self.remote_addr or DEFAULT_IP
        return ip[:MAX_IP_LENGTH]


def validate_email(email):
    """Validate email format"""
    if not email or len(email) > MAX_EMAIL_LENGTH:
        return False
    return EMAIL_REGEX.match(email) is not None


@dataclass
class SubscribeRequest:
    email: str

    @classmethod
    def parse(cls, body):
        """
        Decode a subscribe body into a SubscribeRequest, or return the
        Failure describing why it was rejected.
        """
        if not body:
            return Failure(ErrorKind.INVALID_INPUT, 'no data received')

        try:
            data: Any = json.loads(body)
        except ValueError as e:
            return Failure(ErrorKind.INVALID_INPUT, f'invalid JSON data: {e}')

        if not isinstance(data, dict):
            return Failure(ErrorKind.INVALID_INPUT, 'email is required')

        email = data.get('email')
        if email is None:
            return Failure(ErrorKind.INVALID_INPUT, 'email is required')
        if not isinstance(email, str):
            return Failure(ErrorKind.INVALID_INPUT, 'invalid email address')

        email = email.strip()
        if not email:
            return Failure(ErrorKind.INVALID_INPUT, 'email is required')
        if not validate_email(email):
            return Failure(ErrorKind.INVALID_INPUT, 'invalid email address')

        return cls(email=email)


# Ids saturate at the signed 64-bit bounds instead of overflowing the driver
MAX_ID = 2 ** 63 - 1
MIN_ID = -2 ** 63


def coerce_id(raw):
    """Leading-integer coercion: '12abc' -> 12, 'abc' -> 0, huge values clamp"""
    match = re.match(r'\s*([+-]?\d+)', raw or '')
    if not match:
        return 0
    return max(MIN_ID, min(MAX_ID, int(match.group(1))))
