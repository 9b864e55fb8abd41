"""
Error taxonomy for SafeScore.

Only ValidationError is meant to reach callers of the assessment API.
The other errors are raised by collaborators and caught at the
orchestrator boundary, where they degrade the affected source.
"""


class SafeScoreError(Exception):
    """SafeScore 오류 기본 클래스"""


class ValidationError(SafeScoreError):
    """잘못된 입력 (lat/lng 누락, 유한하지 않은 값 등)"""


class FeedParseError(SafeScoreError):
    """사고 피드를 XML로 파싱할 수 없음"""


class DatasetFetchError(SafeScoreError):
    """외부 데이터셋 또는 피드 HTTP 조회 실패"""


class ConfigurationError(SafeScoreError):
    """필수 설정값 누락 또는 해석 불가"""
