"""
ID 연동 유즈케이스

익명 방문자를 Reddit 계정에 연동된 세션으로 승격하는 비즈니스 로직을 구현합니다.
- 익명 토큰 발급
- 공급자 인증 URL 생성 (익명 토큰을 state로 사용)
- 콜백 state로 전환 토큰 발급
- 인증 코드 교환, 계정 생성/갱신, 세션 토큰 발급
"""

import hmac
from typing import Optional
from uuid import UUID

from ..domain.entities import Account, Token, TokenKind
from ..domain.exceptions import ConflictingAccountError, MalformedTokenError, StateMismatchError
from ..domain.ports import (
    AccountRepositoryPort,
    IdentityProviderPort,
    LoggerPort,
    TokenCodecPort,
)


class IdentityLinkingUseCase:
    """ID 연동 유즈케이스"""

    def __init__(
        self,
        account_repository: AccountRepositoryPort,
        identity_provider: IdentityProviderPort,
        token_codec: TokenCodecPort,
        logger: LoggerPort,
    ):
        self.account_repository = account_repository
        self.identity_provider = identity_provider
        self.token_codec = token_codec
        self.logger = logger

    def issue_anonymous_token(self) -> Token:
        """익명 토큰을 발급합니다."""
        token = self.token_codec.issue(TokenKind.ANONYMOUS)
        self.logger.debug("익명 토큰 발급 완료")
        return token

    def begin_provider_flow(self, anonymous_token: str) -> str:
        """
        공급자 인증을 시작합니다.

        Args:
            anonymous_token: 클라이언트가 보관 중인 익명 토큰

        Returns:
            공급자 인증 URL (익명 토큰이 state로 포함됨)

        Raises:
            TokenError: 익명 토큰이 유효하지 않은 경우
        """
        self.token_codec.verify(anonymous_token, TokenKind.ANONYMOUS)

        authorization_url = self.identity_provider.get_authorization_url(state=anonymous_token)
        self.logger.info("공급자 인증 URL 생성 완료")
        return authorization_url

    def accept_provider_callback(self, returned_state: str) -> Token:
        """
        공급자 콜백의 state로 전환 토큰을 발급합니다.

        state 검증은 complete_provider_flow에서 익명 토큰과 비교하여 수행합니다.
        """
        if not returned_state:
            raise MalformedTokenError("콜백에 state가 없습니다")

        token = self.token_codec.issue(TokenKind.TRANSITION, subject=returned_state)
        self.logger.debug("전환 토큰 발급 완료")
        return token

    async def complete_provider_flow(
        self,
        authorization_code: str,
        returned_state: str,
        anonymous_token_value: str,
    ) -> Token:
        """
        공급자 인증을 완료하고 세션 토큰을 발급합니다.

        Args:
            authorization_code: 공급자가 발급한 인증 코드
            returned_state: 공급자가 되돌려준 state
            anonymous_token_value: 클라이언트가 보관 중인 익명 토큰

        Returns:
            세션 토큰 (subject = 계정 ID)

        Raises:
            TokenError: 익명 토큰이 유효하지 않은 경우
            StateMismatchError: state가 익명 토큰과 다른 경우
            ProviderUnavailableError: 공급자 호출 실패
            ProviderRejectedError: 공급자가 요청을 거부한 경우
        """
        self.logger.info("공급자 인증 완료 시작")

        # state 검증
        self.token_codec.verify(anonymous_token_value, TokenKind.ANONYMOUS)
        if not hmac.compare_digest(
            returned_state.encode("utf-8"),
            anonymous_token_value.encode("utf-8"),
        ):
            self.logger.warning("state 불일치로 인증 거부")
            raise StateMismatchError("state가 발급한 익명 토큰과 일치하지 않습니다")

        # 토큰 교환 및 사용자 조회
        access_token = await self.identity_provider.exchange_code_for_token(authorization_code)
        identity = await self.identity_provider.get_identity(access_token)

        account = await self._link_account(identity.external_user_id, identity.display_name)

        session_token = self.token_codec.issue(TokenKind.SESSION, subject=str(account.id))
        self.logger.info(f"공급자 인증 완료: account={account.id}, name={account.display_name}")
        return session_token

    async def complete_from_transition(
        self,
        transition_token: str,
        authorization_code: str,
        anonymous_token_value: str,
    ) -> Token:
        """전환 토큰을 검증한 뒤 공급자 인증을 완료합니다."""
        returned_state = self.token_codec.verify(transition_token, TokenKind.TRANSITION)
        return await self.complete_provider_flow(
            authorization_code=authorization_code,
            returned_state=returned_state,
            anonymous_token_value=anonymous_token_value,
        )

    def authenticate(self, session_token: str) -> UUID:
        """세션 토큰을 검증하고 계정 ID를 반환합니다."""
        subject = self.token_codec.verify(session_token, TokenKind.SESSION)
        try:
            return UUID(subject)
        except (TypeError, ValueError):
            raise MalformedTokenError("세션 토큰 subject가 계정 ID가 아닙니다")

    async def _link_account(self, external_user_id: int, display_name: str) -> Account:
        """계정을 생성하거나 갱신합니다. 유일성 충돌 시 기존 계정을 재사용합니다."""
        try:
            account = await self.account_repository.upsert_account(external_user_id, display_name)
        except ConflictingAccountError as e:
            self.logger.warning(f"계정 연동 충돌, 기존 계정 재사용 시도: {str(e)}")
            existing: Optional[Account] = await self.account_repository.find_by_external_id(
                external_user_id
            )
            if existing is None:
                raise
            account = existing

        self.logger.debug(f"계정 연동: external_id={external_user_id}, account={account.id}")
        return account
