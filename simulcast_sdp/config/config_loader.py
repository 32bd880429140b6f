"""설정 로더 모듈

YAML 파일 로드 및 환경 변수 오버라이드 지원
"""

import os
from pathlib import Path
from typing import Optional, Any, Dict
import yaml
from pydantic import ValidationError

from .models import Config
from simulcast_sdp.common.exceptions import ConfigurationError
from simulcast_sdp.common.logger import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "SIMULCAST_SDP_"


class ConfigLoader:
    """설정 로더 클래스"""

    def __init__(self, config_path: Optional[str] = None):
        """초기화
        
        Args:
            config_path: 설정 파일 경로. None인 경우 기본 경로 사용
        """
        self.config_path = config_path or self._get_default_config_path()

    @staticmethod
    def _get_default_config_path() -> str:
        """기본 설정 파일 경로 반환"""
        env_path = os.getenv(f"{ENV_PREFIX}CONFIG_PATH")
        if env_path:
            return env_path
        
        # 프로젝트 루트/config/config.yaml
        current_file = Path(__file__)
        project_root = current_file.parent.parent.parent
        return str(project_root / "config" / "config.yaml")

    def load(self) -> Config:
        """설정 파일 로드 및 검증
        
        Returns:
            Config: 검증된 설정 객체
            
        Raises:
            FileNotFoundError: 설정 파일이 없는 경우
            ConfigurationError: 최상위가 mapping이 아닌 경우
            ValidationError: 설정 검증 실패 시
            yaml.YAMLError: YAML 파싱 실패 시
        """
        if not Path(self.config_path).exists():
            raise FileNotFoundError(
                f"설정 파일을 찾을 수 없습니다: {self.config_path}\n"
                f"config/config.example.yaml을 복사하여 config/config.yaml을 생성하세요."
            )

        with open(self.config_path, 'r', encoding='utf-8') as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            raw_config = {}
        if not isinstance(raw_config, dict):
            raise ConfigurationError(
                f"설정 파일 최상위는 mapping이어야 합니다: {self.config_path}"
            )

        raw_config = self._apply_env_overrides(raw_config)

        try:
            config = Config(**raw_config)
        except ValidationError as e:
            logger.error("config_validation_failed",
                        path=self.config_path,
                        details=self._format_validation_error(e))
            raise

        logger.debug("config_loaded", path=self.config_path)
        return config

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """환경 변수로 설정 오버라이드
        
        환경 변수 형식: SIMULCAST_SDP_<SECTION>_<KEY>
        section 이름에 '_'가 포함될 수 있으므로 Config 필드 이름 중
        가장 긴 prefix와 매칭한다.
        예: SIMULCAST_SDP_VIDEO_CODEC_USE_RTX=false -> video_codec.use_rtx
        
        Args:
            config: 원본 설정 딕셔너리
            
        Returns:
            Dict: 환경 변수가 적용된 설정
        """
        sections = sorted(Config.model_fields.keys(), key=len, reverse=True)
        
        for env_key, env_value in os.environ.items():
            if not env_key.startswith(ENV_PREFIX):
                continue
            
            rest = env_key[len(ENV_PREFIX):].lower()
            
            for section in sections:
                if not rest.startswith(f"{section}_"):
                    continue
                key_path = rest[len(section) + 1:]
                if not key_path:
                    break
                
                if not isinstance(config.get(section), dict):
                    config[section] = {}
                
                config[section][key_path] = self._convert_env_value(env_value)
                logger.debug("config_env_override", section=section, key=key_path)
                break
        
        return config

    @staticmethod
    def _convert_env_value(value: str) -> Any:
        """환경 변수 값을 적절한 타입으로 변환"""
        # Boolean
        if value.lower() in ('true', 'yes'):
            return True
        if value.lower() in ('false', 'no'):
            return False
        
        # Integer
        try:
            return int(value)
        except ValueError:
            pass
        
        # Float
        try:
            return float(value)
        except ValueError:
            pass
        
        return value

    @staticmethod
    def _format_validation_error(error: ValidationError) -> str:
        """ValidationError를 사용자 친화적인 메시지로 변환"""
        errors = []
        for err in error.errors():
            loc = " -> ".join(str(l) for l in err['loc'])
            msg = err['msg']
            errors.append(f"  - {loc}: {msg}")
        
        return "설정 검증 오류:\n" + "\n".join(errors)


def load_config(config_path: Optional[str] = None) -> Config:
    """설정 파일 로드 편의 함수
    
    Args:
        config_path: 설정 파일 경로
        
    Returns:
        Config: 검증된 설정 객체
    """
    loader = ConfigLoader(config_path)
    return loader.load()
