"""
Hazard feed parsing for SafeScore.

This module turns GeoRSS / CAP flavoured Atom or RSS documents into
normalized Incident records. Tags are matched by local name, so
``georss:point``, ``geo:point`` and a bare ``point`` are treated alike,
as are ``cap:info`` and ``info``.
"""

import math
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from safescore.common.timeutil import parse_timestamp, to_iso_utc
from safescore.observability.logging_setup import get_logger
from .errors import FeedParseError
from .models import Coordinates, Incident
from .severity import normalize_severity

log = get_logger("safescore.feed")

DEFAULT_SOURCE = "NSW RFS"

# startedAt 후보 (우선순위 순)
_ENTRY_TIME_FIELDS = ("updated", "published", "pubDate")
_CAP_TIME_FIELDS = ("effective", "onset")


@dataclass
class FeedParseResult:
    incidents: List[Incident] = field(default_factory=list)
    skipped: int = 0


def _local(tag) -> str:
    if not isinstance(tag, str):  # 주석/처리 명령 노드
        return ""
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def _children(el: ET.Element, name: str) -> Iterator[ET.Element]:
    for child in el:
        if _local(child.tag) == name:
            yield child


def _descendant(el: ET.Element, name: str) -> Optional[ET.Element]:
    for child in el.iter():
        if child is not el and _local(child.tag) == name:
            return child
    return None


def _text(el: Optional[ET.Element]) -> Optional[str]:
    if el is None:
        return None
    txt = "".join(el.itertext()).strip()
    return txt or None


def _field(el: Optional[ET.Element], *names: str) -> Optional[str]:
    """직계 자식 중 이름이 일치하고 텍스트가 있는 첫 값을 반환합니다."""
    if el is None:
        return None
    for name in names:
        for child in _children(el, name):
            txt = _text(child)
            if txt:
                return txt
    return None


def _to_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        n = float(value)
    except (TypeError, ValueError):
        return None
    return n if math.isfinite(n) else None


def _pair(text: Optional[str]) -> Tuple[Optional[float], Optional[float]]:
    """공백(또는 쉼표)으로 구분된 앞의 두 숫자를 (lat, lng)로 해석합니다."""
    if not text:
        return None, None
    parts = text.replace(",", " ").split()
    if len(parts) < 2:
        return None, None
    return _to_float(parts[0]), _to_float(parts[1])


def _candidate_entries(root: ET.Element) -> List[ET.Element]:
    # Atom <feed><entry> 와 RSS <rss><channel><item> 모두 허용
    entries: List[ET.Element] = []
    name = _local(root.tag)
    if name == "feed":
        entries.extend(_children(root, "entry"))
    elif name == "rss":
        for channel in _children(root, "channel"):
            entries.extend(_children(channel, "item"))
    return entries


def _entry_id(entry: ET.Element) -> Optional[str]:
    # id → guid → (cap:)identifier → 중첩 CAP alert identifier → title
    direct = _field(entry, "id", "guid", "identifier")
    if direct:
        return direct
    alert = _descendant(entry, "alert")
    nested = _field(alert, "identifier")
    if nested:
        return nested
    return _field(entry, "title")


def _entry_coordinates(entry: ET.Element, info: Optional[ET.Element]) -> Optional[Coordinates]:
    lat, lng = _pair(_field(entry, "point"))
    if lat is None or lng is None:
        lat = _to_float(_field(entry, "lat"))
        lng = _to_float(_field(entry, "long"))
    if (lat is None or lng is None) and info is not None:
        circle = _descendant(info, "circle")
        lat, lng = _pair(_text(circle))
    if lat is None or lng is None:
        return None
    return Coordinates(lat=lat, lng=lng)


def _entry_started_at(entry: ET.Element, info: Optional[ET.Element]) -> Optional[str]:
    candidates = [_field(entry, name) for name in _ENTRY_TIME_FIELDS]
    candidates += [_field(info, name) for name in _CAP_TIME_FIELDS]
    for value in candidates:
        dt = parse_timestamp(value)
        if dt is not None:
            return to_iso_utc(dt)
    return None


def _entry_expires_at(info: Optional[ET.Element],
                      now: Optional[float],
                      ttl_hours: Optional[float]) -> Optional[float]:
    dt = parse_timestamp(_field(info, "expires"))
    if dt is not None:
        return dt.timestamp()
    if ttl_hours and now is not None:
        return now + ttl_hours * 3600
    return None


def _parse_entry(entry: ET.Element,
                 source: str,
                 now: Optional[float],
                 ttl_hours: Optional[float]) -> Optional[Incident]:
    incident_id = _entry_id(entry)
    if not incident_id:
        return None

    info = _descendant(entry, "info")
    coords = _entry_coordinates(entry, info)
    if coords is None:
        return None

    title = _field(entry, "title") or ""
    summary = _field(entry, "summary", "description") or ""

    # CAP event/severity 우선, 없으면 제목/요약으로 추정
    cap_event = _field(info, "event")
    cap_severity = _field(info, "severity", "urgency")

    return Incident(
        id=incident_id,
        type=(cap_event or title).strip(),
        severity=normalize_severity(cap_severity or title or summary),
        coordinates=coords,
        started_at=_entry_started_at(entry, info),
        source=source,
        expires_at=_entry_expires_at(info, now, ttl_hours),
    )


def parse_feed_document(xml_text,
                        source: str = DEFAULT_SOURCE,
                        *,
                        now: Optional[float] = None,
                        ttl_hours: Optional[float] = None) -> FeedParseResult:
    """
    피드 문서를 파싱하고 건너뛴 항목 수와 함께 반환합니다.

    Args:
        xml_text: XML 문서 (str 또는 bytes)
        source: 출처 라벨 (호출자가 지정)
        now: 현재 시각 (epoch 초), TTL 계산용
        ttl_hours: CAP expires가 없을 때 적용할 soft TTL (시간)

    Returns:
        FeedParseResult

    Raises:
        FeedParseError: 문서 전체를 XML로 파싱할 수 없는 경우
    """
    try:
        root = ET.fromstring(xml_text)
    except (ET.ParseError, TypeError, ValueError) as e:
        raise FeedParseError(f"hazard feed is not valid XML: {e}") from e

    result = FeedParseResult()
    for entry in _candidate_entries(root):
        try:
            incident = _parse_entry(entry, source, now, ttl_hours)
        except ValueError as e:
            # pydantic 검증 실패 등 개별 항목 오류는 건너뜀
            log.debug(f"피드 항목 파싱 실패, 건너뜀: {e}")
            incident = None
        if incident is None:
            result.skipped += 1
            continue
        result.incidents.append(incident)

    log.debug("피드 파싱 완료",
              source=source,
              incidents=len(result.incidents),
              skipped=result.skipped)
    return result


def parse_incident_feed(xml_text,
                        source: str = DEFAULT_SOURCE,
                        *,
                        now: Optional[float] = None,
                        ttl_hours: Optional[float] = None) -> List[Incident]:
    """
    GeoRSS/CAP 피드를 Incident 목록으로 변환합니다 (피드 순서 유지).

    id 또는 좌표를 알 수 없는 항목은 결과에서 제외됩니다.
    """
    return parse_feed_document(xml_text, source, now=now, ttl_hours=ttl_hours).incidents
