"""
외부 서비스 어댑터 패키지

외부 API, 서비스와의 통신을 담당하는 어댑터들을 포함합니다.
"""

from .job_queue import InMemoryJobQueueAdapter
from .reddit_client import RedditClientAdapter
from .riot_api_client import RiotApiClientAdapter
from .token_codec import TokenCodecAdapter

__all__ = [
    "InMemoryJobQueueAdapter",
    "RedditClientAdapter",
    "RiotApiClientAdapter",
    "TokenCodecAdapter",
]
