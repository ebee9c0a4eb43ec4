from __future__ import annotations

from ..exceptions import (
    GenerationError,
    NoImageGeneratedError,
    ProviderUnavailableError,
    ShockStyleError,
    ValidationError,
)
from ..schema import Error
from ..shard import constants as C

_CREDENTIALS_TIP = " Tip: check GENERATION_PROVIDER and the matching endpoint/API key settings."


def _looks_like_auth_or_config_issue(text: str) -> bool:
    """Best-effort detection for auth/configuration issues from provider errors."""
    if not text:
        return False
    lower = text.lower()

    keywords = [
        # auth/credentials
        "api key",
        "apikey",
        "invalid key",
        "missing key",
        "no api key",
        "unauthorized",
        "forbidden",
        "access denied",
        "credentials",
        "auth",
        "401",
        "403",
        # billing/quota
        "billing",
        "quota",
        # provider disabled
        "not enabled",
        "missing endpoint",
    ]

    return any(k in lower for k in keywords)


def augment_with_credentials_tip(message: str) -> str:
    """Append a configuration tip to the message when appropriate."""
    if not message:
        return message
    if _CREDENTIALS_TIP.strip() in message:
        return message
    if _looks_like_auth_or_config_issue(message):
        return message.rstrip() + _CREDENTIALS_TIP
    return message


def as_generation_error(exc: BaseException) -> GenerationError:
    """Return ``exc`` if it already is a GenerationError, else wrap it in one."""
    if isinstance(exc, GenerationError):
        return exc
    message = str(exc) or type(exc).__name__
    err = GenerationError(augment_with_credentials_tip(message))
    err.__cause__ = exc
    return err


def error_record(exc: ShockStyleError) -> Error:
    """Build a normalized ``Error`` record for logs and host reporting."""
    if isinstance(exc, ValidationError):
        code = C.ERROR_CODE_VALIDATION
    elif isinstance(exc, ProviderUnavailableError):
        code = C.ERROR_CODE_PROVIDER_UNAVAILABLE
    elif isinstance(exc, NoImageGeneratedError):
        code = C.ERROR_CODE_NO_IMAGE
    elif isinstance(exc, GenerationError):
        code = C.ERROR_CODE_PROVIDER_ERROR
    else:
        code = type(exc).__name__
    details = {k: v for k, v in (("field", getattr(exc, "field", None)), ("status_code", getattr(exc, "status_code", None))) if v is not None}
    return Error(code=code, message=exc.message, details=details or None)


__all__ = [
    "augment_with_credentials_tip",
    "as_generation_error",
    "error_record",
]
