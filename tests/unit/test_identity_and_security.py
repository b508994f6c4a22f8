"""
Unit tests for the identity adapters, attachment guardrails and data URI
helpers. Streamlit is replaced by a mock; nothing renders.
"""

import pytest
from unittest.mock import patch

from core.errors import InvalidAttachmentType
from core.models import AuthStatus, UserProfile
from core.services.identity import LocalIdentityProvider, StreamlitIdentityProvider
from core.services.security import DefaultSecurity
from core.utils.data_uri import encode_data_uri, parse_data_uri


@pytest.fixture
def mock_st():
    with patch("core.services.identity.st") as st:
        yield st


def sign_in_as(st, claims):
    st.user.is_logged_in = True
    st.user.get.side_effect = claims.get


class TestStreamlitIdentityProvider:
    def test_signed_out(self, mock_st):
        mock_st.user.is_logged_in = False
        provider = StreamlitIdentityProvider()
        assert provider.status() == AuthStatus.SIGNED_OUT
        assert provider.current_user() is None

    def test_profile_from_oidc_claims(self, mock_st):
        sign_in_as(
            mock_st,
            {"sub": "g-42", "name": "Ada", "email": "ada@example.com", "picture": "http://p"},
        )
        provider = StreamlitIdentityProvider()
        assert provider.status() == AuthStatus.SIGNED_IN
        assert provider.current_user() == UserProfile(
            uid="g-42", display_name="Ada", email="ada@example.com", photo_url="http://p"
        )

    def test_email_used_when_sub_missing(self, mock_st):
        sign_in_as(mock_st, {"email": "ada@example.com"})
        assert StreamlitIdentityProvider().current_user().uid == "ada@example.com"

    def test_sign_in_with_named_provider(self, mock_st):
        assert StreamlitIdentityProvider("google").sign_in() is True
        mock_st.login.assert_called_once_with("google")

    def test_sign_in_failure_returns_false(self, mock_st):
        mock_st.login.side_effect = RuntimeError("auth not configured")
        assert StreamlitIdentityProvider().sign_in() is False

    def test_sign_out(self, mock_st):
        StreamlitIdentityProvider().sign_out()
        mock_st.logout.assert_called_once_with()


class TestLocalIdentityProvider:
    def test_sign_in_and_out(self):
        provider = LocalIdentityProvider()
        assert provider.status() == AuthStatus.SIGNED_OUT
        assert provider.sign_in() is True
        assert provider.current_user().uid == "local"
        provider.sign_out()
        assert provider.current_user() is None


class TestDefaultSecurity:
    def test_validate_user_input(self):
        sec = DefaultSecurity(max_input_chars=5)
        sec.validate_user_input("hello")
        with pytest.raises(ValueError):
            sec.validate_user_input("  ")
        with pytest.raises(ValueError, match="too long"):
            sec.validate_user_input("hello!")

    def test_sanitize_strips_nul(self):
        assert DefaultSecurity().sanitize_for_prompt(" a\x00b ") == " ab "

    def test_accepts_pdf(self):
        DefaultSecurity().validate_attachment(
            encode_data_uri(b"%PDF", "application/pdf"), "application/pdf"
        )

    @pytest.mark.parametrize(
        "uri,declared",
        [
            (encode_data_uri(b"hi", "text/plain"), "text/plain"),
            ("not a data uri", "application/pdf"),
            ("data:application/pdf;base64,", "application/pdf"),
            ("data:application/pdf;base64,@@@", "application/pdf"),
        ],
    )
    def test_rejects(self, uri, declared):
        with pytest.raises(InvalidAttachmentType):
            DefaultSecurity().validate_attachment(uri, declared)


class TestDataUri:
    def test_encode_parse(self):
        uri = encode_data_uri(b"%PDF-1.4", "application/pdf")
        assert uri.startswith("data:application/pdf;base64,")
        assert parse_data_uri(uri) == ("application/pdf", b"%PDF-1.4")

    def test_parameters_before_base64(self):
        uri = "data:application/pdf;name=notes.pdf;base64,JVBERg=="
        assert parse_data_uri(uri) == ("application/pdf", b"%PDF")

    def test_malformed(self):
        with pytest.raises(ValueError):
            parse_data_uri("hello")
        with pytest.raises(ValueError):
            parse_data_uri("data:text/plain,hello")
