"""
Country risk scoring for SafeScore.

Base safety scores are derived from the World Bank / UNODC intentional
homicide indicator (VC.IHR.PSRC.P5, homicides per 100k people). A rate
of 0 maps to 10 (safest), the configurable ceiling (default 50) and
anything above it maps to 0, linearly in between.
"""

import math
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from safescore.common.geo import clamp, round1
from safescore.common.timeutil import to_iso_utc, utc_now
from safescore.observability.logging_setup import get_logger
from .models import CountryRisk

log = get_logger("safescore.country_risk")

DEFAULT_CEILING = 50.0
RISK_SOURCE = "WorldBank/UNODC"

def compute_risk_score(value: Any, ceiling: float = DEFAULT_CEILING) -> float:
    """
    10만명당 살인율을 0~10 안전 점수로 변환합니다.

    Args:
        value: 10만명당 살인율 (숫자로 해석 불가하면 0으로 간주)
        ceiling: 0점에 해당하는 상한값

    Returns:
        소수점 한 자리로 반올림된 점수 (0~10)
    """
    if not ceiling or not math.isfinite(ceiling) or ceiling <= 0:
        ceiling = DEFAULT_CEILING
    try:
        rate = float(value)
    except (TypeError, ValueError):
        rate = 0.0
    if math.isnan(rate):
        rate = 0.0
    base = clamp(rate / ceiling, 0.0, 1.0)
    return clamp(round1(10 - base * 10), 0.0, 10.0)

def row_country_code(row: Dict[str, Any]) -> Optional[str]:
    """데이터셋 행에서 ISO-2 국가 코드를 꺼냅니다 (대문자)."""
    country = row.get("country")
    candidates = [
        country.get("id") if isinstance(country, dict) else None,
        row.get("countryiso2code"),
        row.get("countryiso2"),
        row.get("countryCode"),
    ]
    for code in candidates:
        if code:
            return str(code).strip().upper()
    return None

def _row_year(row: Dict[str, Any]) -> Optional[int]:
    try:
        return int(str(row.get("date")).strip()[:4])
    except (TypeError, ValueError):
        return None

def resolve_country_risk(country_code: Optional[str],
                         rows: Iterable[Dict[str, Any]],
                         *,
                         ceiling: float = DEFAULT_CEILING,
                         now: Optional[datetime] = None) -> Optional[CountryRisk]:
    """
    요청한 국가의 가장 최근 연도 데이터로 기본 점수를 계산합니다.

    Args:
        country_code: ISO-2 국가 코드 (대소문자 무관)
        rows: 외부 지표 데이터셋의 원시 행
        ceiling: 살인율 상한
        now: lastUpdated 시각

    Returns:
        CountryRisk 또는 해당 데이터가 없으면 None
    """
    if not country_code:
        return None
    wanted = country_code.strip().upper()

    latest: Optional[Dict[str, Any]] = None
    latest_year = -1
    for row in rows or []:
        if not isinstance(row, dict) or row.get("value") is None:
            continue
        if row_country_code(row) != wanted:
            continue
        year = _row_year(row)
        # 연도를 알 수 없으면 가장 오래된 것으로 취급
        rank = year if year is not None else 0
        if latest is None or rank > latest_year:
            latest, latest_year = row, rank

    if latest is None:
        return None

    return CountryRisk(
        country_code=wanted,
        risk_score=compute_risk_score(latest["value"], ceiling),
        year=latest_year,
        source=RISK_SOURCE,
        last_updated=to_iso_utc(now or utc_now()),
    )

def build_latest_risk_table(rows: Iterable[Dict[str, Any]],
                            *,
                            ceiling: float = DEFAULT_CEILING,
                            now: Optional[datetime] = None) -> List[CountryRisk]:
    """
    데이터셋을 국가별 최신 연도 레코드 하나씩으로 변환합니다.

    Args:
        rows: 외부 지표 데이터셋의 원시 행
        ceiling: 살인율 상한
        now: 시딩 실행 시각 (모든 레코드에 동일하게 기록)

    Returns:
        국가당 하나의 CountryRisk 목록
    """
    last_updated = to_iso_utc(now or utc_now())
    latest: Dict[str, CountryRisk] = {}
    skipped = 0

    for row in rows or []:
        if not isinstance(row, dict):
            skipped += 1
            continue
        code = row_country_code(row)
        year = _row_year(row)
        if not code or row.get("value") is None or year is None:
            skipped += 1
            continue

        existing = latest.get(code)
        if existing is None or year > existing.year:
            latest[code] = CountryRisk(
                country_code=code,
                risk_score=compute_risk_score(row["value"], ceiling),
                year=year,
                source=RISK_SOURCE,
                last_updated=last_updated,
            )

    log.info(f"국가 위험도 테이블 생성 완료 countries:{len(latest)} skipped:{skipped}")
    return list(latest.values())
