"""
설정 어댑터

환경 변수와 .env 파일에서 설정을 읽어 ConfigPort를 구현합니다.
"""

import os
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator

from adapters.external.token_codec import MIN_SECRET_LENGTH, decode_secret
from core.domain.ports import ConfigPort


class BaseConfig(BaseSettings, ConfigPort):
    """기본 설정 클래스"""

    # 환경 설정
    environment: str = Field(default="development", env="ENVIRONMENT")
    debug: bool = Field(default=False, env="DEBUG")

    # 데이터베이스 설정
    database_url: str = Field(..., env="DATABASE_URL")

    # 토큰 서명 키 (base64url, 디코딩 후 32바이트 이상)
    token_secret: str = Field(..., env="TOKEN_SECRET")

    # Reddit OAuth 설정
    reddit_client_id: str = Field(..., env="REDDIT_CLIENT_ID")
    reddit_client_secret: str = Field(..., env="REDDIT_CLIENT_SECRET")
    reddit_provider_authorize_url: str = Field(
        default="https://www.reddit.com/api/v1/authorize",
        env="REDDIT_PROVIDER_AUTHORIZE_URL",
    )
    reddit_provider_token_url: str = Field(
        default="https://www.reddit.com/api/v1/access_token",
        env="REDDIT_PROVIDER_TOKEN_URL",
    )
    reddit_callback_url: str = Field(
        default="http://localhost:5000/signin/reddit/callback",
        env="REDDIT_CALLBACK_URL",
    )
    reddit_owner_username: str = Field(default="cmflairs", env="REDDIT_OWNER_USERNAME")

    # Riot Sign On 설정
    rso_client_id: str = Field(default="", env="RSO_CLIENT_ID")
    rso_client_secret: str = Field(default="", env="RSO_CLIENT_SECRET")
    rso_provider_authorize_url: str = Field(
        default="https://auth.riotgames.com/authorize",
        env="RSO_PROVIDER_AUTHORIZE_URL",
    )
    rso_provider_token_url: str = Field(
        default="https://auth.riotgames.com/token",
        env="RSO_PROVIDER_TOKEN_URL",
    )
    rso_callback_url: str = Field(
        default="http://localhost:5173/signin-rso",
        env="RSO_CALLBACK_URL",
    )

    # Riot API 설정
    rgapi_key: str = Field(default="", env="RGAPI_KEY")
    riot_regional_route: str = Field(default="americas", env="RIOT_REGIONAL_ROUTE")
    http_timeout_seconds: float = Field(default=5.0, env="HTTP_TIMEOUT_SECONDS")

    # 프론트엔드 (별도 배포) origin
    pages_origin: str = Field(default="http://localhost:5173/", env="PAGES_ORIGIN")

    # 작업 큐 / 동기화 설정
    job_queue_backend: str = Field(default="database", env="JOB_QUEUE_BACKEND")
    job_visibility_timeout: float = Field(default=60.0, env="JOB_VISIBILITY_TIMEOUT")
    webjob_bulk_update_batch_size: int = Field(default=20, env="WEBJOB_BULK_UPDATE_BATCH_SIZE")
    sync_min_request_interval: float = Field(default=0.0, env="SYNC_MIN_REQUEST_INTERVAL")
    embedded_worker: bool = Field(default=False, env="EMBEDDED_WORKER")

    # 로깅 설정
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        env="LOG_FORMAT"
    )

    # 웹 서버 설정
    web_host: str = Field(default="0.0.0.0", env="WEB_HOST")
    web_port: int = Field(default=5000, env="WEB_PORT")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @field_validator("token_secret")
    @classmethod
    def validate_token_secret(cls, v):
        """서명 키 검증 (짧거나 디코딩 불가하면 기동 실패)"""
        secret = decode_secret(v)
        if len(secret) < MIN_SECRET_LENGTH:
            raise ValueError(f"TOKEN_SECRET이 너무 짧습니다: {len(secret)}바이트")
        return v

    @field_validator("pages_origin")
    @classmethod
    def validate_pages_origin(cls, v):
        """origin은 항상 슬래시로 끝나도록 정규화"""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('유효한 URL이 아닙니다')
        return v if v.endswith("/") else v + "/"

    @field_validator("job_queue_backend")
    @classmethod
    def validate_job_queue_backend(cls, v):
        """작업 큐 백엔드 검증"""
        if v.lower() not in ("database", "memory"):
            raise ValueError("작업 큐 백엔드는 database 또는 memory여야 합니다")
        return v.lower()

    @field_validator("webjob_bulk_update_batch_size")
    @classmethod
    def validate_bulk_update_batch_size(cls, v):
        """일괄 갱신 배치 크기 검증"""
        if v < 1:
            raise ValueError("WEBJOB_BULK_UPDATE_BATCH_SIZE는 양의 정수여야 합니다")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """로그 레벨 검증"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"로그 레벨은 {valid_levels} 중 하나여야 합니다")
        return v.upper()

    # ConfigPort 인터페이스 구현
    def get_environment(self) -> str:
        return self.environment

    def is_debug(self) -> bool:
        return self.debug

    def get_database_url(self) -> str:
        return self.database_url

    def get_token_secret(self) -> bytes:
        return decode_secret(self.token_secret)

    def get_reddit_config(self) -> dict:
        """Reddit OAuth 설정 조회"""
        return {
            "client_id": self.reddit_client_id,
            "client_secret": self.reddit_client_secret,
            "authorize_url": self.reddit_provider_authorize_url,
            "token_url": self.reddit_provider_token_url,
            "callback_url": self.reddit_callback_url,
            "owner_username": self.reddit_owner_username,
        }

    def get_rso_config(self) -> dict:
        """RSO OAuth 설정 조회"""
        return {
            "client_id": self.rso_client_id,
            "client_secret": self.rso_client_secret,
            "authorize_url": self.rso_provider_authorize_url,
            "token_url": self.rso_provider_token_url,
            "callback_url": self.rso_callback_url,
        }

    def get_rgapi_key(self) -> str:
        return self.rgapi_key

    def get_riot_regional_route(self) -> str:
        return self.riot_regional_route

    def get_http_timeout(self) -> float:
        return self.http_timeout_seconds

    def get_pages_origin(self) -> str:
        return self.pages_origin

    def get_job_queue_backend(self) -> str:
        return self.job_queue_backend

    def get_job_visibility_timeout(self) -> float:
        return self.job_visibility_timeout

    def get_bulk_update_batch_size(self) -> int:
        return self.webjob_bulk_update_batch_size

    def get_sync_min_request_interval(self) -> float:
        return self.sync_min_request_interval

    def run_embedded_worker(self) -> bool:
        return self.embedded_worker

    def get_log_level(self) -> str:
        return self.log_level

    def get_log_format(self) -> str:
        return self.log_format

    def get_web_host(self) -> str:
        return self.web_host

    def get_web_port(self) -> int:
        return self.web_port


class DevelopmentConfig(BaseConfig):
    """개발 환경 설정"""

    environment: str = "development"
    debug: bool = True
    log_level: str = "DEBUG"

    # 개발용 기본값들
    database_url: str = Field(
        default="sqlite+aiosqlite:///./dev_database.db",
        env="DATABASE_URL"
    )

    # 개발용 더미 값들 (실제 사용 시 .env 파일에서 설정)
    token_secret: str = Field(
        default="ZGV2X3Rva2VuX3NlY3JldF9rZXlfMzJfYnl0ZXNfbG9uZ19fXw",
        env="TOKEN_SECRET",
    )
    reddit_client_id: str = Field(default="dev_client_id", env="REDDIT_CLIENT_ID")
    reddit_client_secret: str = Field(default="dev_client_secret", env="REDDIT_CLIENT_SECRET")
    job_queue_backend: str = Field(default="memory", env="JOB_QUEUE_BACKEND")
    embedded_worker: bool = Field(default=True, env="EMBEDDED_WORKER")


class ProductionConfig(BaseConfig):
    """운영 환경 설정"""

    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"

    # 운영 환경에서는 Riot API 호출 간격을 둔다
    sync_min_request_interval: float = Field(default=1.2, env="SYNC_MIN_REQUEST_INTERVAL")

    @field_validator("database_url")
    @classmethod
    def validate_production_database_url(cls, v):
        """운영 환경에서는 데이터베이스 URL이 필수"""
        if not v or v.startswith("sqlite"):
            raise ValueError("운영 환경에서는 PostgreSQL 데이터베이스가 필요합니다")
        return v

    @field_validator("reddit_client_secret", "rso_client_secret", "rgapi_key")
    @classmethod
    def validate_production_secrets(cls, v):
        """운영 환경에서는 모든 시크릿이 필수"""
        if not v or v.startswith("dev_"):
            raise ValueError("운영 환경에서는 실제 시크릿 값이 필요합니다")
        return v


class TestingConfig(BaseConfig):
    """테스트 환경 설정"""

    environment: str = "testing"
    debug: bool = True
    log_level: str = "WARNING"

    # 테스트용 기본값들
    database_url: str = Field(
        default="sqlite+aiosqlite://",
        env="DATABASE_URL"
    )

    # 테스트용 더미 값들
    token_secret: str = "dGVzdF90b2tlbl9zZWNyZXRfa2V5XzMyX2J5dGVzX2xvbmdfXw"
    reddit_client_id: str = "test_client_id"
    reddit_client_secret: str = "test_client_secret"
    rso_client_id: str = "test_rso_client_id"
    rso_client_secret: str = "test_rso_client_secret"
    rgapi_key: str = "test_rgapi_key"
    job_queue_backend: str = "memory"


class ConfigAdapter:
    """설정 어댑터 팩토리"""

    @staticmethod
    def create_config() -> ConfigPort:
        """환경에 따른 설정 객체를 생성합니다."""
        environment = os.getenv("ENVIRONMENT", "development").lower()

        if environment == "production":
            return ProductionConfig()
        elif environment == "testing":
            return TestingConfig()
        else:
            return DevelopmentConfig()


# 전역 설정 인스턴스
_config: Optional[ConfigPort] = None


def get_config() -> ConfigPort:
    """전역 설정 인스턴스를 반환합니다."""
    global _config
    if _config is None:
        _config = ConfigAdapter.create_config()
    return _config


def initialize_config() -> ConfigPort:
    """설정을 초기화합니다."""
    global _config
    _config = ConfigAdapter.create_config()
    return _config
