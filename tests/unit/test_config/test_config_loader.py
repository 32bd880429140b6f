"""설정 로더 단위 테스트"""

import pytest
from pydantic import ValidationError

from simulcast_sdp.config.config_loader import ConfigLoader, load_config
from simulcast_sdp.config.models import Config, LogLevel, VideoCodecConfig
from simulcast_sdp.common.exceptions import ConfigurationError


class TestConfigLoader:
    """ConfigLoader 테스트"""

    def test_load_valid_config(self, temp_config_file):
        """정상 설정 파일 로드 테스트"""
        loader = ConfigLoader(temp_config_file)
        config = loader.load()
        
        assert isinstance(config, Config)
        assert config.logging.level == LogLevel.DEBUG
        assert config.video_codec.name == "VP9"
        assert config.video_codec.required_params == {"profile-id": "0"}
        assert config.video_codec.use_rtx is True

    def test_load_nonexistent_file(self):
        """존재하지 않는 파일 로드 시 에러 테스트"""
        loader = ConfigLoader("/nonexistent/config.yaml")
        
        with pytest.raises(FileNotFoundError) as exc_info:
            loader.load()
        
        assert "설정 파일을 찾을 수 없습니다" in str(exc_info.value)

    def test_load_invalid_config(self, invalid_config_file):
        """잘못된 설정 검증 테스트"""
        loader = ConfigLoader(invalid_config_file)
        
        with pytest.raises(ValidationError):
            loader.load()

    def test_load_non_mapping_root(self, tmp_path):
        """최상위가 리스트인 YAML"""
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        
        with pytest.raises(ConfigurationError):
            ConfigLoader(str(path)).load()

    def test_load_empty_file_uses_defaults(self, tmp_path):
        """빈 YAML은 기본값"""
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        
        config = load_config(str(path))
        
        assert config.video_codec == VideoCodecConfig()
        assert config.logging.level == LogLevel.INFO

    def test_env_override_simple(self, temp_config_file, monkeypatch):
        """환경 변수로 설정 오버라이드 테스트 (단순 값)"""
        monkeypatch.setenv("SIMULCAST_SDP_LOGGING_LEVEL", "WARNING")
        
        config = ConfigLoader(temp_config_file).load()
        
        assert config.logging.level == LogLevel.WARNING

    def test_env_override_section_with_underscore(self, temp_config_file, monkeypatch):
        """section 이름에 '_'가 있는 경우 (video_codec)"""
        monkeypatch.setenv("SIMULCAST_SDP_VIDEO_CODEC_USE_RTX", "false")
        monkeypatch.setenv("SIMULCAST_SDP_VIDEO_CODEC_NAME", "H264")
        
        config = ConfigLoader(temp_config_file).load()
        
        assert config.video_codec.use_rtx is False
        assert config.video_codec.name == "H264"
        # 파일의 다른 값은 유지
        assert config.video_codec.required_params == {"profile-id": "0"}

    def test_env_override_unknown_section_ignored(self, temp_config_file, monkeypatch):
        """알 수 없는 section은 무시"""
        monkeypatch.setenv("SIMULCAST_SDP_UNKNOWN_KEY", "1")
        
        config = ConfigLoader(temp_config_file).load()
        
        assert config.video_codec.name == "VP9"

    def test_default_config_path_from_env(self, temp_config_file, monkeypatch):
        """SIMULCAST_SDP_CONFIG_PATH로 기본 경로 지정"""
        monkeypatch.setenv("SIMULCAST_SDP_CONFIG_PATH", temp_config_file)
        
        loader = ConfigLoader()
        
        assert loader.config_path == temp_config_file
        assert loader.load().video_codec.name == "VP9"

    def test_format_validation_error(self, invalid_config_file):
        """검증 오류 메시지 포맷"""
        with pytest.raises(ValidationError) as exc_info:
            ConfigLoader(invalid_config_file).load()
        
        message = ConfigLoader._format_validation_error(exc_info.value)
        
        assert message.startswith("설정 검증 오류:\n")
        assert "  - " in message


class TestConvertEnvValue:
    """환경 변수 값 변환"""

    @pytest.mark.parametrize("raw,expected", [
        ("true", True),
        ("No", False),
        ("42", 42),
        ("0.5", 0.5),
        ("VP8", "VP8"),
    ])
    def test_convert(self, raw, expected):
        assert ConfigLoader._convert_env_value(raw) == expected
