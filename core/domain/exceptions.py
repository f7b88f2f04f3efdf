"""
도메인 예외 정의

토큰, 공급자 연동, 동기화 단계에서 발생하는 오류 분류입니다.
어댑터는 외부 라이브러리 예외를 이 예외들로 변환하여 올려보냅니다.
"""


class CmflairsError(Exception):
    """모든 도메인 예외의 기본 클래스"""


# 토큰 계층 (401, 재시도 없음)
class TokenError(CmflairsError):
    """토큰 검증 실패"""


class MalformedTokenError(TokenError):
    """토큰 형식 오류"""


class InvalidSignatureError(TokenError):
    """서명 불일치"""


class WrongKindError(TokenError):
    """기대한 토큰 종류가 아님"""

    def __init__(self, expected, actual):
        super().__init__(f"토큰 종류 불일치: expected={expected.value}, actual={actual.value}")
        self.expected = expected
        self.actual = actual


# 로그인 플로우
class StateMismatchError(CmflairsError):
    """공급자가 돌려준 state가 서버가 발급한 익명 토큰과 다름 (CSRF 의심)"""


class ProviderError(CmflairsError):
    """외부 공급자 오류"""


class ProviderUnavailableError(ProviderError):
    """네트워크 오류 또는 공급자 장애"""


class ProviderRejectedError(ProviderError):
    """공급자가 요청을 거부함"""


class ConflictingAccountError(CmflairsError):
    """계정 연동 중 유일성 제약 위반"""


class EntityNotFoundError(CmflairsError):
    """엔티티를 찾을 수 없거나 소유자가 아님"""


# 동기화 (엔티티 단위, 배치 수준에서 처리)
class SyncError(CmflairsError):
    """동기화 오류"""

    def __init__(self, entity_key: str, message: str):
        super().__init__(f"{entity_key}: {message}")
        self.entity_key = entity_key


class SyncFetchFailedError(SyncError):
    """통계 조회 실패"""


class SyncAggregateFailedError(SyncError):
    """통계 집계 실패"""
