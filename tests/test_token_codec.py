"""TokenCodecAdapter 서명/검증 테스트"""

import pytest

from adapters.external.token_codec import TokenCodecAdapter, _b64encode, decode_secret
from core.domain.entities import TokenKind
from core.domain.exceptions import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenError,
    WrongKindError,
)


class TestIssueAndVerify:
    def test_anonymous_token_has_no_subject(self, token_codec):
        token = token_codec.issue(TokenKind.ANONYMOUS)

        assert token.kind == TokenKind.ANONYMOUS
        assert token.subject is None
        assert token.value.startswith("anonymous..")
        assert token_codec.verify(token.value, TokenKind.ANONYMOUS) is None

    def test_session_token_returns_subject(self, token_codec):
        token = token_codec.issue(TokenKind.SESSION, subject="7f0c1e4a-0000-4000-8000-000000000001")

        subject = token_codec.verify(token.value, TokenKind.SESSION)

        assert subject == "7f0c1e4a-0000-4000-8000-000000000001"

    def test_subject_may_contain_dots(self, token_codec):
        anonymous = token_codec.issue(TokenKind.ANONYMOUS)
        transition = token_codec.issue(TokenKind.TRANSITION, subject=anonymous.value)

        assert token_codec.verify(transition.value, TokenKind.TRANSITION) == anonymous.value

    def test_anonymous_with_subject_rejected(self, token_codec):
        with pytest.raises(ValueError):
            token_codec.issue(TokenKind.ANONYMOUS, subject="someone")

    @pytest.mark.parametrize("kind", [TokenKind.TRANSITION, TokenKind.SESSION])
    def test_subject_required(self, token_codec, kind):
        with pytest.raises(ValueError):
            token_codec.issue(kind)


class TestRejection:
    def test_wrong_kind(self, token_codec):
        token = token_codec.issue(TokenKind.TRANSITION, subject="state")

        with pytest.raises(WrongKindError) as exc_info:
            token_codec.verify(token.value, TokenKind.SESSION)

        assert exc_info.value.expected == TokenKind.SESSION
        assert exc_info.value.actual == TokenKind.TRANSITION

    def test_flipped_signature_byte(self, token_codec):
        token = token_codec.issue(TokenKind.SESSION, subject="account")
        payload, _, encoded_signature = token.value.rpartition(".")
        signature = bytearray(token_codec._sign(payload.encode("ascii")))
        signature[0] ^= 0x01
        tampered = f"{payload}.{_b64encode(bytes(signature))}"

        with pytest.raises(InvalidSignatureError):
            token_codec.verify(tampered, TokenKind.SESSION)

    def test_changed_subject_invalidates_signature(self, token_codec):
        token = token_codec.issue(TokenKind.SESSION, subject="alice")
        kind, _, issued, signature = token.value.split(".")
        forged = ".".join([kind, _b64encode(b"mallory"), issued, signature])

        with pytest.raises(InvalidSignatureError):
            token_codec.verify(forged, TokenKind.SESSION)

    def test_other_secret_rejected(self, token_codec, logger):
        other = TokenCodecAdapter(b"another_secret_that_is_long_enough_!!", logger)
        token = other.issue(TokenKind.ANONYMOUS)

        with pytest.raises(InvalidSignatureError):
            token_codec.verify(token.value, TokenKind.ANONYMOUS)
        assert logger.messages("warning")

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "not-a-token",
            "anonymous..123",
            "anonymous..123.sig.extra",
            "unknown..123.c2ln",
            "session..notanumber.c2ln",
            "session..123.c2ln",
            "anonymous.YWxpY2U.123.c2ln",
        ],
    )
    def test_malformed(self, token_codec, raw):
        with pytest.raises(MalformedTokenError):
            token_codec.verify(raw, TokenKind.SESSION)

    def test_all_failures_share_token_error(self, token_codec):
        token = token_codec.issue(TokenKind.ANONYMOUS)

        with pytest.raises(TokenError):
            token_codec.verify(token.value, TokenKind.SESSION)


class TestSecret:
    def test_short_secret_rejected(self, logger):
        with pytest.raises(ValueError):
            TokenCodecAdapter(b"short", logger)

    def test_decode_secret(self):
        assert decode_secret("dGVzdF90b2tlbl9zZWNyZXRfa2V5XzMyX2J5dGVzX2xvbmdfXw") == b"test_token_secret_key_32_bytes_long__"

    def test_decode_secret_invalid(self):
        with pytest.raises(ValueError):
            decode_secret("a")
