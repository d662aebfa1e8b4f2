"""Provider credential resolution.

Decides which API key a request uses and, with it, whether the request
is metered. A user who brings their own key bypasses the credit ledger;
requests on the server key spend free-tier credits.
"""

import re
from dataclasses import dataclass, field
from typing import Literal

from panelgate.exceptions import MissingProviderCredentialError

PLACEHOLDER_PATTERN = re.compile(r"(dummy|your_|example|changeme|replace)", re.IGNORECASE)


@dataclass(frozen=True)
class ProviderCredential:
    """The API key a request will use."""

    api_key: str = field(repr=False)
    source: Literal["user", "server"]

    @property
    def metered(self) -> bool:
        """Whether requests on this key spend credits."""
        return self.source == "server"


def normalize_api_key(value: str | None) -> str | None:
    """Strip a key; blank values count as absent."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def is_placeholder_api_key(value: str | None) -> bool:
    """Check for missing or template-looking keys such as 'your_key_here'."""
    if not value:
        return True
    return bool(PLACEHOLDER_PATTERN.search(value))


def has_usable_server_key(server_key: str | None) -> bool:
    key = normalize_api_key(server_key)
    return key is not None and not is_placeholder_api_key(key)


def resolve_provider_credential(
    user_key: str | None, server_key: str | None
) -> ProviderCredential:
    """Pick the credential for a request.

    A non-blank user key always wins and is unmetered. Otherwise the
    server key is used if it is present and not a placeholder.

    Raises:
        MissingProviderCredentialError: If neither key is usable
    """
    own_key = normalize_api_key(user_key)
    if own_key is not None:
        return ProviderCredential(api_key=own_key, source="user")

    if not has_usable_server_key(server_key):
        raise MissingProviderCredentialError(
            "No provider API key is configured. Add your own API key to continue."
        )

    return ProviderCredential(api_key=normalize_api_key(server_key) or "", source="server")
