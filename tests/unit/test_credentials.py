"""Unit tests for provider credential resolution."""

import pytest

from panelgate.credentials import (
    is_placeholder_api_key,
    resolve_provider_credential,
)
from panelgate.exceptions import MissingProviderCredentialError


class TestResolveProviderCredential:
    """Tests for resolve_provider_credential."""

    def test_user_key_is_unmetered(self) -> None:
        credential = resolve_provider_credential(" user-key-123 ", "server-key-abc")

        assert credential.api_key == "user-key-123"
        assert credential.source == "user"
        assert credential.metered is False

    def test_server_key_is_metered(self) -> None:
        credential = resolve_provider_credential(None, "tgp_v1_real")

        assert credential.source == "server"
        assert credential.metered is True

    def test_blank_user_key_falls_back_to_server(self) -> None:
        assert resolve_provider_credential("   ", "tgp_v1_real").source == "server"

    @pytest.mark.parametrize(
        "server_key", [None, "", "dummy-key", "your_api_key", "CHANGEME", "replace-me"]
    )
    def test_no_usable_key_raises(self, server_key: str | None) -> None:
        with pytest.raises(MissingProviderCredentialError) as exc_info:
            resolve_provider_credential(None, server_key)
        assert exc_info.value.status_code == 400

    def test_key_not_in_repr(self) -> None:
        credential = resolve_provider_credential("secret-user-key", None)
        assert "secret-user-key" not in repr(credential)


class TestPlaceholderDetection:
    """Tests for is_placeholder_api_key."""

    def test_placeholders(self) -> None:
        assert is_placeholder_api_key("sk-example-123")
        assert not is_placeholder_api_key("tgp_v1_abc")
