"""
Reddit OAuth 클라이언트 어댑터

Reddit을 ID 공급자로 사용하는 IdentityProviderPort 구현입니다.
- 인증 URL 생성 (scope=identity, duration=temporary)
- 인증 코드 -> 액세스 토큰 교환 (HTTP Basic 인증)
- /api/v1/me 조회 (base36 사용자 ID 디코딩)
"""

from typing import Optional
from urllib.parse import urlencode

import httpx

from config import __version__
from core.domain.entities import ProviderIdentity
from core.domain.exceptions import ProviderRejectedError, ProviderUnavailableError
from core.domain.ports import IdentityProviderPort, LoggerPort

REDDIT_API_BASE_URL = "https://oauth.reddit.com"


def user_agent(client_id: str, owner_username: str) -> str:
    """Reddit API 규칙에 맞는 User-Agent 문자열을 만듭니다."""
    return f"cmflairs:{client_id}:{__version__} (by /u/{owner_username})"


class RedditClientAdapter(IdentityProviderPort):
    """Reddit OAuth 클라이언트 어댑터"""

    def __init__(
        self,
        reddit_config: dict,
        logger: LoggerPort,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.logger = logger
        self.client_id = reddit_config["client_id"]
        self.client_secret = reddit_config["client_secret"]
        self.authorize_url = reddit_config["authorize_url"]
        self.token_url = reddit_config["token_url"]
        self.callback_url = reddit_config["callback_url"]
        self.api_base_url = REDDIT_API_BASE_URL
        self.timeout = timeout
        self.transport = transport
        self.headers = {
            "User-Agent": user_agent(self.client_id, reddit_config["owner_username"]),
        }

    def get_authorization_url(self, state: str) -> str:
        """인증 URL을 생성합니다."""
        params = {
            "response_type": "code",
            "scope": "identity",
            "redirect_uri": self.callback_url,
            "client_id": self.client_id,
            "duration": "temporary",
            "state": state,
        }

        url = f"{self.authorize_url}?{urlencode(params)}"
        self.logger.debug(f"Reddit 인증 URL 생성: client_id={self.client_id}")
        return url

    async def exchange_code_for_token(self, code: str) -> str:
        """인증 코드를 액세스 토큰으로 교환합니다."""
        self.logger.debug("Reddit 토큰 교환 요청")

        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.callback_url,
        }
        response = await self._send(
            "POST",
            self.token_url,
            data=data,
            auth=(self.client_id, self.client_secret),
        )
        result = self._parse_json(response, "토큰 교환")

        # Reddit은 잘못된 코드에도 200과 error 필드를 돌려준다
        access_token = result.get("access_token")
        if "error" in result or not access_token:
            error_msg = f"토큰 교환 거부: {result.get('error', 'access_token 없음')}"
            self.logger.error(error_msg)
            raise ProviderRejectedError(error_msg)

        self.logger.debug("Reddit 토큰 교환 성공")
        return access_token

    async def get_identity(self, access_token: str) -> ProviderIdentity:
        """액세스 토큰으로 사용자 식별 정보를 조회합니다."""
        response = await self._send(
            "GET",
            f"{self.api_base_url}/api/v1/me",
            headers={"Authorization": f"bearer {access_token}"},
        )
        result = self._parse_json(response, "사용자 조회")

        try:
            identity = ProviderIdentity(
                external_user_id=int(result["id"], 36),
                display_name=result["name"],
            )
        except (KeyError, TypeError, ValueError) as e:
            error_msg = f"사용자 조회 응답 형식 오류: {str(e)}"
            self.logger.error(error_msg)
            raise ProviderRejectedError(error_msg)

        self.logger.debug(f"Reddit 사용자 조회 성공: {identity.display_name}")
        return identity

    async def _send(self, method: str, url: str, headers: Optional[dict] = None, **kwargs) -> httpx.Response:
        """요청을 보내고 네트워크/상태 코드 오류를 도메인 예외로 변환합니다."""
        request_headers = dict(self.headers)
        if headers:
            request_headers.update(headers)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(method, url, headers=request_headers, **kwargs)
        except httpx.HTTPError as e:
            error_msg = f"Reddit 호출 실패: {method} {url} - {str(e)}"
            self.logger.error(error_msg)
            raise ProviderUnavailableError(error_msg)

        if response.status_code >= 500:
            error_msg = f"Reddit 서버 오류: {response.status_code}"
            self.logger.error(error_msg)
            raise ProviderUnavailableError(error_msg)

        if response.status_code != 200:
            error_msg = f"Reddit 요청 거부: {response.status_code} - {response.text}"
            self.logger.error(error_msg)
            raise ProviderRejectedError(error_msg)

        return response

    def _parse_json(self, response: httpx.Response, action: str) -> dict:
        try:
            result = response.json()
        except ValueError:
            error_msg = f"{action} 응답을 해석할 수 없습니다"
            self.logger.error(error_msg)
            raise ProviderRejectedError(error_msg)

        if not isinstance(result, dict):
            raise ProviderRejectedError(f"{action} 응답 형식 오류")
        return result
