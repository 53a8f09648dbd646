# ─────────────────────────────────────────────────────────────────────────────
# Provider Error Classification
# ─────────────────────────────────────────────────────────────────────────────
# Maps whatever the upstream SDK raised onto a ProviderError subclass.
# Structured signals (HTTP code, RPC status) are consulted first; message
# keywords only when no structured signal maps to a known category.
# Category priority: auth → quota → not found → unavailable → generic.
# ─────────────────────────────────────────────────────────────────────────────


from sketchgen.exceptions import (
    GenerationError,
    ModelNotFoundError,
    ProviderAuthError,
    ProviderError,
    QuotaExceededError,
    ServiceUnavailableError,
)

_STATUS_CODES: dict[int, type[ProviderError]] = {
    401: ProviderAuthError,
    403: ProviderAuthError,
    429: QuotaExceededError,
    404: ModelNotFoundError,
    500: ServiceUnavailableError,
    503: ServiceUnavailableError,
}

_RPC_STATUSES: dict[str, type[ProviderError]] = {
    "UNAUTHENTICATED": ProviderAuthError,
    "PERMISSION_DENIED": ProviderAuthError,
    "RESOURCE_EXHAUSTED": QuotaExceededError,
    "NOT_FOUND": ModelNotFoundError,
    "UNAVAILABLE": ServiceUnavailableError,
    "INTERNAL": ServiceUnavailableError,
}

_MESSAGE_KEYWORDS: tuple[tuple[type[ProviderError], tuple[str, ...]], ...] = (
    (ProviderAuthError, ("api key", "apikey", "authentication", "credential", "unauthorized")),
    (QuotaExceededError, ("quota", "limit")),
    (ModelNotFoundError, ("not found", "404")),
)


def _status_code(exc: BaseException) -> int | None:
    for attr in ("code", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _structured_category(exc: BaseException) -> type[ProviderError] | None:
    code = _status_code(exc)
    if code in _STATUS_CODES:
        return _STATUS_CODES[code]

    status = getattr(exc, "status", None)
    if isinstance(status, str):
        return _RPC_STATUSES.get(status.upper())
    if isinstance(status, int) and status in _STATUS_CODES:
        return _STATUS_CODES[status]
    return None


def _message_category(message: str) -> type[ProviderError] | None:
    lower = message.lower()
    for category, keywords in _MESSAGE_KEYWORDS:
        if any(k in lower for k in keywords):
            return category
    return None


def classify_provider_error(exc: BaseException) -> ProviderError:
    """Convert an upstream exception into a :class:`ProviderError`.

    The original message is kept as ``reason`` for logs; the instance's
    public ``message`` is the fixed text of its kind.
    """
    if isinstance(exc, ProviderError):
        return exc

    reason = str(exc) or type(exc).__name__
    category = _structured_category(exc) or _message_category(reason) or GenerationError
    return category(reason)
