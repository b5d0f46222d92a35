"""Tests for CLI input validation."""

import pytest

from dmrelay.cli.utils.validation import (validate_api_url, validate_message_content, validate_role,
                                          validate_user_id)
from dmrelay.client import Scope


class TestValidateUserId:
    def test_valid_ids(self) -> None:
        assert validate_user_id(" alice ") == "alice"
        assert validate_user_id("65f0c0ffee1234567890abcd") == "65f0c0ffee1234567890abcd"
        assert validate_user_id("a.b@school.edu") == "a.b@school.edu"

    def test_empty_raises(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            validate_user_id("")

    def test_path_characters_rejected(self) -> None:
        with pytest.raises(ValueError, match="only contain"):
            validate_user_id("../admin")

    def test_too_long(self) -> None:
        with pytest.raises(ValueError, match="256"):
            validate_user_id("a" * 257)


class TestValidateApiUrl:
    def test_trailing_slash_removed(self) -> None:
        assert validate_api_url("https://api.test/api/") == "https://api.test/api"

    def test_http_allowed(self) -> None:
        assert validate_api_url("http://localhost:5000/api") == "http://localhost:5000/api"

    def test_scheme_required(self) -> None:
        with pytest.raises(ValueError, match="http"):
            validate_api_url("api.test")


class TestValidateRole:
    def test_roles(self) -> None:
        assert validate_role("Staff") is Scope.STAFF
        assert validate_role("student") is Scope.STUDENT

    @pytest.mark.parametrize("role", ["any", "root", ""])
    def test_invalid_roles(self, role: str) -> None:
        with pytest.raises(ValueError, match="Role"):
            validate_role(role)


class TestValidateMessageContent:
    def test_blank_rejected(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            validate_message_content("   ")

    def test_content_kept_verbatim(self) -> None:
        assert validate_message_content("  spaced  ") == "  spaced  "

    def test_too_long(self) -> None:
        with pytest.raises(ValueError, match="65536"):
            validate_message_content("x" * 65537)
