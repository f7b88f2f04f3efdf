"""
토큰 코덱 어댑터

익명/전환/세션 토큰의 서명과 검증을 담당하는 어댑터입니다.
HMAC-SHA512 서명을 사용하며, 토큰 형식은 다음과 같습니다.

    <kind>.<base64url(subject)>.<issued_ms>.<base64url(signature)>

서명 대상은 앞의 세 필드입니다. 만료 검사는 하지 않습니다.
"""

import base64
import binascii
import time
from typing import Optional, Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

from core.domain.entities import Token, TokenKind
from core.domain.exceptions import (
    InvalidSignatureError,
    MalformedTokenError,
    WrongKindError,
)
from core.domain.ports import LoggerPort, TokenCodecPort

MIN_SECRET_LENGTH = 32


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode((data + padding).encode("ascii"))


class TokenCodecAdapter(TokenCodecPort):
    """토큰 코덱 어댑터"""

    def __init__(self, secret: bytes, logger: LoggerPort):
        if len(secret) < MIN_SECRET_LENGTH:
            raise ValueError(f"토큰 서명 키가 너무 짧습니다: {len(secret)}바이트")
        self.logger = logger
        self._secret = secret

    def _sign(self, payload: bytes) -> bytes:
        """페이로드 서명을 계산합니다."""
        h = hmac.HMAC(self._secret, hashes.SHA512())
        h.update(payload)
        return h.finalize()

    @staticmethod
    def _payload(kind: TokenKind, subject: Optional[str], issued_at: int) -> str:
        encoded_subject = _b64encode(subject.encode("utf-8")) if subject is not None else ""
        return f"{kind.value}.{encoded_subject}.{issued_at}"

    def issue(self, kind: TokenKind, subject: Optional[str] = None) -> Token:
        """토큰을 발급합니다."""
        if kind == TokenKind.ANONYMOUS:
            if subject is not None:
                raise ValueError("익명 토큰에는 subject가 없어야 합니다")
        elif not subject:
            raise ValueError(f"{kind.value} 토큰에는 subject가 필요합니다")

        issued_at = int(time.time() * 1000)
        payload = self._payload(kind, subject, issued_at)
        signature = self._sign(payload.encode("ascii"))

        self.logger.debug(f"토큰 발급: kind={kind.value}")
        return Token(
            kind=kind,
            subject=subject,
            issued_at=issued_at,
            value=f"{payload}.{_b64encode(signature)}",
        )

    def decode(self, raw: str) -> Tuple[Token, bytes]:
        """서명 검증 없이 토큰을 해석합니다."""
        parts = raw.split(".") if raw else []
        if len(parts) != 4:
            raise MalformedTokenError("토큰 구성 요소 개수가 올바르지 않습니다")

        kind_value, encoded_subject, issued_value, encoded_signature = parts
        try:
            kind = TokenKind(kind_value)
        except ValueError:
            raise MalformedTokenError(f"알 수 없는 토큰 종류: {kind_value}")

        try:
            subject = _b64decode(encoded_subject).decode("utf-8") if encoded_subject else None
            signature = _b64decode(encoded_signature)
            issued_at = int(issued_value)
        except (binascii.Error, UnicodeDecodeError, ValueError):
            raise MalformedTokenError("토큰 디코딩 실패")

        # 발급 시 subject 규칙과 다르면 서명이 맞더라도 형식 오류로 본다
        if (kind == TokenKind.ANONYMOUS) != (subject is None):
            raise MalformedTokenError("토큰 subject가 종류와 맞지 않습니다")

        token = Token(kind=kind, subject=subject, issued_at=issued_at, value=raw)
        return token, signature

    def verify(self, raw: str, expected_kind: TokenKind) -> Optional[str]:
        """토큰을 검증하고 subject를 반환합니다."""
        token, signature = self.decode(raw)

        payload = self._payload(token.kind, token.subject, token.issued_at)
        h = hmac.HMAC(self._secret, hashes.SHA512())
        h.update(payload.encode("ascii"))
        try:
            h.verify(signature)
        except InvalidSignature:
            self.logger.warning(f"토큰 서명 불일치: kind={token.kind.value}")
            raise InvalidSignatureError("토큰 서명이 올바르지 않습니다")

        if token.kind != expected_kind:
            raise WrongKindError(expected_kind, token.kind)

        # TODO: 세션 토큰 만료 기간이 정해지면 issued_at 기준 만료 검사를 추가할 것
        return token.subject


def decode_secret(encoded: str) -> bytes:
    """base64url로 인코딩된 서명 키를 디코딩합니다."""
    try:
        return _b64decode(encoded.strip())
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"TOKEN_SECRET 디코딩 실패: {str(e)}")
