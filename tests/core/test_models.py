# Model tests.
# Validates reading backend records and masking secrets.

from __future__ import annotations

import pytest

from guardfx.core.models import AccountSecret


class TestAccountSecret:
    """Tests for AccountSecret."""

    @pytest.mark.unit
    def test_from_dict_reads_backend_record(self) -> None:
        """Backend wire names map onto the model."""
        account = AccountSecret.from_dict({"name": "Main", "shared_secret": "c2VjcmV0MQ=="})

        assert account.name == "Main"
        assert account.shared_secret == "c2VjcmV0MQ=="
        assert account.key

    @pytest.mark.unit
    def test_from_dict_keeps_given_key(self) -> None:
        """A carried-forward key is reused instead of generated."""
        account = AccountSecret.from_dict({"name": "Main", "shared_secret": "x"}, key="abc12345")
        assert account.key == "abc12345"

    @pytest.mark.unit
    def test_key_is_not_part_of_equality(self) -> None:
        """Two records with the same data compare equal whatever their keys."""
        assert AccountSecret("Main", "x", key="a") == AccountSecret("Main", "x", key="b")

    @pytest.mark.unit
    def test_model_has_no_serializer(self) -> None:
        """The backend owns the stored shape, so accounts are never written back."""
        assert not hasattr(AccountSecret, "to_dict")

    @pytest.mark.unit
    def test_masked_secret_hides_everything(self) -> None:
        """The mask reveals no characters and caps its length."""
        assert AccountSecret("Main", "abc").masked_secret == "•••"
        assert AccountSecret("Main", "a" * 40).masked_secret == "•" * 24
