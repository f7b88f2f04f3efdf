"""
Domain 패키지

도메인 엔티티, 포트, 예외를 정의합니다.
외부 의존성 없이 순수한 비즈니스 개념만 포함합니다.

주요 엔티티:
- Account: Reddit 계정과 연동된 사용자
- TrackedEntity: 사용자가 연동한 게임 계정 (소환사)
- Token: 익명/전환/세션 베어러 토큰
- RefreshJob: 통계 갱신 작업
- ChampionScore: 챔피언별 집계 통계
"""
