"""구조화된 로깅 설정

structlog을 사용한 JSON 구조화 로깅
"""

import sys
import json
import structlog
from typing import Any, Dict, Optional, TextIO
from pathlib import Path
from datetime import datetime, timezone

from simulcast_sdp.config.models import LoggingConfig

# 현재 열려 있는 로그 파일 (재설정 시 닫기 위함)
_log_file: Optional[TextIO] = None


def add_utc_timestamp(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    """UTC 타임스탬프를 추가하는 프로세서 (밀리초 3자리까지)"""
    now = datetime.now(timezone.utc)
    timestamp = now.strftime("%Y-%m-%dT%H:%M:%S")
    milliseconds = f"{now.microsecond // 1000:03d}"
    event_dict["timestamp"] = f"{timestamp}.{milliseconds}Z"
    return event_dict


def reorder_keys(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    """로그 키 순서를 가독성 좋게 재정렬하는 프로세서
    
    순서:
    1. timestamp
    2. level
    3. event
    4. sdp_type, mid, rid (협상 추적)
    5. 나머지 필드들 (알파벳 순)
    """
    priority_keys = [
        "timestamp",
        "level",
        "event",
        "sdp_type",
        "mid",
        "rid",
        "rids",
    ]
    
    ordered = {}
    
    for key in priority_keys:
        if key in event_dict:
            ordered[key] = event_dict[key]
    
    remaining_keys = sorted([k for k in event_dict.keys() if k not in priority_keys])
    for key in remaining_keys:
        ordered[key] = event_dict[key]
    
    return ordered


def _json_serializer(event_dict, **kwargs):
    # structlog가 serializer를 호출할 때 kwargs를 넘길 수 있으므로 **kwargs 수용
    return json.dumps(event_dict, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", format_type: str = "json", output: str = "stdout") -> None:
    """로깅 설정 초기화
    
    Args:
        level: 로그 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: 로그 포맷 (json, text)
        output: 로그 출력 (stdout, stderr, 또는 파일 경로)
    """
    global _log_file
    
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        add_utc_timestamp,
        reorder_keys,
    ]

    if format_type == "json":
        processors.append(structlog.processors.JSONRenderer(serializer=_json_serializer))
    else:
        # 개발용 컬러 텍스트 포맷
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    if _log_file is not None:
        _log_file.close()
        _log_file = None

    if output == "stdout":
        log_stream = sys.stdout
    elif output == "stderr":
        log_stream = sys.stderr
    else:
        log_path = Path(output)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        # 라인 버퍼링으로 즉시 기록
        _log_file = open(log_path, "a", encoding="utf-8", buffering=1)
        log_stream = _log_file
    
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            _log_level_to_int(level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=log_stream),
        cache_logger_on_first_use=False,
    )


def setup_logging_from_config(config: LoggingConfig) -> None:
    """LoggingConfig 기반 로깅 설정"""
    setup_logging(
        level=_enum_value(config.level),
        format_type=_enum_value(config.format),
        output=config.output,
    )


def _enum_value(value: Any) -> str:
    # use_enum_values 설정 여부와 무관하게 문자열 반환
    return getattr(value, "value", value)


def _log_level_to_int(level: str) -> int:
    """로그 레벨 문자열을 정수로 변환"""
    levels = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    return levels.get(level.upper(), 20)  # 기본값: INFO


def get_logger(name: str) -> structlog.BoundLogger:
    """로거 인스턴스 반환
    
    Args:
        name: 로거 이름 (일반적으로 __name__)
        
    Returns:
        structlog.BoundLogger: 바운드 로거 인스턴스
        
    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("offer_patched", mid="video", rids=["1", "2"])
    """
    return structlog.get_logger(name)


def log_with_context(**context: Any) -> structlog.BoundLogger:
    """컨텍스트가 바인딩된 로거 반환
    
    Args:
        **context: 로그에 포함할 컨텍스트 정보
        
    Returns:
        structlog.BoundLogger: 컨텍스트가 바인딩된 로거
        
    Example:
        >>> logger = log_with_context(negotiation="alice->bob")
        >>> logger.info("answer_patched")
        # {"event": "answer_patched", "negotiation": "alice->bob", ...}
    """
    return structlog.get_logger().bind(**context)
