"""설정 모델 정의

Pydantic을 사용한 타입 안전 설정 검증 모델
"""

from typing import Dict
from enum import Enum
from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """로그 레벨"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """로그 포맷"""
    JSON = "json"
    TEXT = "text"


class LoggingConfig(BaseModel):
    """로깅 설정"""
    level: LogLevel = Field(default=LogLevel.INFO, description="로그 레벨")
    format: LogFormat = Field(default=LogFormat.JSON, description="로그 포맷")
    output: str = Field(default="stdout", description="로그 출력 (stdout, stderr, 파일 경로)")


class VideoCodecConfig(BaseModel):
    """비디오 코덱 선택 설정

    filter_codec_capabilities()의 입력 파라미터
    """
    name: str = Field(default="VP8", description="대상 코덱 이름 (VP8, VP9, H264, AV1)")
    required_params: Dict[str, str] = Field(
        default_factory=dict,
        description="반드시 일치해야 하는 fmtp 파라미터 (예: profile-id=0)"
    )
    use_rtx: bool = Field(default=True, description="RTX 재전송 코덱 포함")
    use_ulpfec: bool = Field(default=False, description="ULPFEC 사용 (현재 선택 로직에서 무시됨)")
    use_flexfec: bool = Field(default=False, description="FlexFEC 사용 (red/ulpfec 포함 여부도 결정)")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """코덱 이름이 비어 있지 않은지 검증"""
        if not v.strip():
            raise ValueError("codec name must not be empty")
        return v


class Config(BaseModel):
    """전체 설정 모델"""
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    video_codec: VideoCodecConfig = Field(default_factory=VideoCodecConfig)

    model_config = {
        "use_enum_values": True,
        "validate_assignment": True,
    }
