"""Provider error taxonomy.

Adapters translate SDK exceptions into these classes; the generation
gateway maps them onto the API error taxonomy. Content blocks and empty
outputs surface as distinct user-facing errors.
"""


__all__ = [
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "ContentFilterError",
    "NoOutputError",
    "TransientError",
]


class ProviderError(Exception):
    """Base class for all provider errors.

    Anything not classified more precisely is reported as a provider
    outage and leaves the balance unchanged.
    """

    pass


class RateLimitError(ProviderError):
    """Provider quota or rate limit exhausted."""

    pass


class AuthenticationError(ProviderError):
    """Invalid or missing API key. Needs operator intervention."""

    pass


class ContentFilterError(ProviderError):
    """Content blocked by the provider's safety filter.

    The end user has to change the prompt; retrying as-is will not help.
    """

    pass


class NoOutputError(ProviderError):
    """Provider call succeeded but carried no usable payload.

    Examples: empty image list, no inline data part, empty text.
    """

    pass


class TransientError(ProviderError):
    """Temporary failure (network, server overload, 5xx)."""

    pass
