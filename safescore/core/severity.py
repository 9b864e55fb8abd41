"""
Severity normalization for SafeScore.

Maps free-text severity/urgency strings from hazard feeds onto the
Advice / Warning / Watch and Act / Emergency Warning taxonomy.
"""

from typing import Optional
from .models import ADVICE, WARNING, WATCH_AND_ACT, EMERGENCY_WARNING, Severity

# 우선순위 순서로 검사 (먼저 걸린 키워드가 이김)
_KEYWORDS = (
    ("emergency", EMERGENCY_WARNING),
    ("watch", WATCH_AND_ACT),
    ("advice", ADVICE),
    ("warning", WARNING),
)

def normalize_severity(raw: Optional[str]) -> Severity:
    """
    원문 심각도 문자열을 정규화합니다.

    Args:
        raw: 피드의 심각도/긴급도 또는 제목 텍스트

    Returns:
        정규화된 심각도. 키워드가 없으면 원문 그대로 반환
    """
    if not raw:
        return ADVICE
    text = str(raw)
    lowered = text.lower()
    for keyword, severity in _KEYWORDS:
        if keyword in lowered:
            return severity
    return text
