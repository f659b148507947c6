"""Maps litellm exceptions onto pipeline failure reasons."""

import litellm

from ..core.session.errors import FailureReason

_NETWORK_ERRORS = (
    litellm.Timeout,
    litellm.APIConnectionError,
    litellm.ServiceUnavailableError,
)


def classify_provider_error(error: Exception) -> FailureReason:
    if isinstance(error, _NETWORK_ERRORS):
        return FailureReason.NETWORK
    if isinstance(error, litellm.APIResponseValidationError):
        return FailureReason.INVALID_RESPONSE
    return FailureReason.API_REJECTED
