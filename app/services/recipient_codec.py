# app/services/recipient_codec.py
"""
수신 CSO 목록 코덱

입력 형태(단일 ID, ID 목록, JSON 문자열, 이미 파싱된 목록/레코드)를
정규형 [{id, read, read_at}] 목록으로 변환하고, 저장된 값을 읽을 때
깨진 JSON은 가능한 범위에서 복구한다.
"""

import json
import re
from datetime import datetime
from typing import Any, Iterable, List, Optional

from app.schemas.letter_schemas import RecipientState, RecipientSummary
from app.utils.logger import logger

_BAD_LITERALS = re.compile(r"\b(?:NaN|undefined|-?Infinity)\b")
_TRAILING_COMMA = re.compile(r",\s*([\]}])")
_ID_PAIR = re.compile(r"[\"']?id[\"']?\s*:\s*[\"']?(\d+)", re.ASCII)
_INTEGER = re.compile(r"\d+", re.ASCII)

# 깊게 중첩된 입력은 RecursionError로 실패
_JSON_ERRORS = (ValueError, RecursionError)

_FAILED = object()


def _coerce_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    # ASCII 숫자만 허용 ('²' 같은 문자는 isdigit()이지만 int() 불가)
    if isinstance(value, str) and _INTEGER.fullmatch(value.strip()):
        return int(value.strip())
    return None


def _coerce_read(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true")
    return value in (True, 1)


def _coerce_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _decode_input(value: Any) -> Optional[list]:
    """입력 형태 판별 -> 원소 목록 (판별 불가시 None, JSON 오류는 ValueError/RecursionError)"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, (int, dict, RecipientState)):
        return [value]
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text[0] in "[{":
            parsed = json.loads(text)
            return parsed if isinstance(parsed, list) else [parsed]
        if _INTEGER.fullmatch(text):
            return [int(text)]
    return None


def _to_state(item: Any) -> Optional[RecipientState]:
    if isinstance(item, RecipientState):
        return item.model_copy()
    if isinstance(item, dict):
        recipient_id = _coerce_id(item.get("id"))
        if recipient_id is None:
            return None
        read = _coerce_read(item.get("read"))
        read_at = _coerce_timestamp(item.get("read_at")) if read else None
        return RecipientState(id=recipient_id, read=read, read_at=read_at)
    recipient_id = _coerce_id(item)
    if recipient_id is None:
        return None
    return RecipientState(id=recipient_id)


def normalize(value: Any, previous: Optional[Iterable[RecipientState]] = None) -> Optional[List[RecipientState]]:
    """수신자 입력 -> 정규형 목록 (없음/해석 불가시 None, 예외를 던지지 않음)

    previous가 주어지면 새 입력이 구성원을 결정하고, 기존 구성원은
    이전 read/read_at 값을 유지한다. 새 구성원은 입력 레코드의 read 값과
    상관없이 미열람으로 시작한다.
    """
    try:
        items = _decode_input(value)
    except _JSON_ERRORS as e:
        logger.warning(f" 수신자 JSON 해석 실패, 무시: {value!r} ({e})")
        return None

    if items is None:
        if isinstance(value, str) and value.strip():
            logger.warning(f" 수신자 입력 형식 인식 불가: {value!r}")
        return None

    previous_by_id = {state.id: state for state in (previous or [])}
    states: List[RecipientState] = []
    seen = set()
    for item in items:
        state = _to_state(item)
        if state is None:
            logger.warning(f" 잘못된 수신자 항목 건너뜀: {item!r}")
            continue
        if state.id in seen:
            continue
        seen.add(state.id)
        if state.id in previous_by_id:
            state = previous_by_id[state.id].model_copy()
        elif previous is not None:
            state = RecipientState(id=state.id)
        states.append(state)

    return states or None


def encode(states: Optional[Iterable[RecipientState]]) -> Optional[str]:
    """정규형 목록 -> 저장용 JSON (비어 있으면 None)"""
    if not states:
        return None
    payload = [state.to_storage() for state in states]
    if not payload:
        return None
    return json.dumps(payload)


def _close_truncated(text: str):
    """잘린 배열: 마지막 완전한 객체까지 자르고 닫기"""
    if not text.startswith("["):
        return _FAILED
    end = text.rfind("}")
    candidate = text[:end + 1] if end != -1 else text.rstrip(", ")
    candidate = candidate.rstrip().rstrip(",") + "]"
    try:
        return json.loads(candidate)
    except _JSON_ERRORS:
        return _FAILED


def _repair(text: str):
    candidate = text
    if len(candidate) >= 2 and candidate[0] == candidate[-1] and candidate[0] in "'\"":
        candidate = candidate[1:-1].replace('\\"', '"')
    candidate = _BAD_LITERALS.sub("null", candidate)
    candidate = _TRAILING_COMMA.sub(r"\1", candidate)
    try:
        return json.loads(candidate)
    except _JSON_ERRORS:
        return _close_truncated(candidate)


def decode_stored(raw: Any) -> Optional[List[RecipientState]]:
    """저장된 selected_csos 값 -> 정규형 목록 (복구 불가시 None)"""
    if raw is None:
        return None
    if not isinstance(raw, (str, bytes, bytearray)):
        return normalize(raw)
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, (bytes, bytearray)) else raw
    text = text.strip()
    if not text:
        return None

    try:
        parsed = json.loads(text)
    except _JSON_ERRORS:
        parsed = _repair(text)
        if parsed is _FAILED:
            logger.warning(f" 저장된 수신자 JSON 복구 실패: {text[:200]!r}")
            return None
        logger.warning(f" 저장된 수신자 JSON 복구됨: {text[:200]!r}")

    # 이중 인코딩된 문자열도 normalize가 한 번 더 해석
    return normalize(parsed)


def extract_ids(raw: Any) -> List[int]:
    """숫자 추출 폴백 - "id": N 쌍 우선, 없으면 모든 정수"""
    if raw is None:
        return []
    if isinstance(raw, (bytes, bytearray)):
        text = raw.decode("utf-8", errors="replace")
    else:
        text = str(raw)
    found = _ID_PAIR.findall(text) or _INTEGER.findall(text)
    ids: List[int] = []
    for token in found:
        value = int(token)
        if value not in ids:
            ids.append(value)
    return ids


def recover_stored(raw: Any) -> List[RecipientState]:
    """읽기 경로용: 복구 실패시 추출한 ID로 미열람 항목 재구성"""
    states = decode_stored(raw)
    if states is not None:
        return states
    if raw is None:
        return []
    ids = extract_ids(raw)
    if ids:
        logger.warning(f" 수신자 목록 숫자 추출 폴백 사용: {ids}")
    return [RecipientState(id=recipient_id) for recipient_id in ids]


def find(states: Optional[Iterable[RecipientState]], recipient_id: int) -> Optional[RecipientState]:
    for state in states or []:
        if state.id == recipient_id:
            return state
    return None


def summarize(states: Optional[List[RecipientState]]) -> RecipientSummary:
    items = list(states or [])
    read_count = sum(1 for state in items if state.read)
    return RecipientSummary(
        items=items,
        read_count=read_count,
        total_count=len(items),
        unread_count=len(items) - read_count
    )
