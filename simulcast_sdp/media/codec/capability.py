"""RTP Codec Capability 선택

지원 코덱 목록에서 대상 코덱 하나와 필요한 보조 코덱(RTX, FEC)을 고른다.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from simulcast_sdp.common.exceptions import UnsupportedCodecError
from simulcast_sdp.common.logger import get_logger
from simulcast_sdp.config.models import VideoCodecConfig
from simulcast_sdp.media.sdp_models import MediaType

logger = get_logger(__name__)

RTX_CODEC_NAME = "rtx"
FLEXFEC_CODEC_NAME = "flexfec-03"
RED_CODEC_NAME = "red"
ULPFEC_CODEC_NAME = "ulpfec"


@dataclass
class RtpCodecCapability:
    """코덱 capability (RTCRtpCodecCapability)"""
    name: str
    kind: MediaType = MediaType.VIDEO
    clock_rate: Optional[int] = 90000
    preferred_payload_type: Optional[int] = None
    num_channels: Optional[int] = None
    parameters: Dict[str, str] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"RtpCodecCapability(name={self.name}, parameters={self.parameters})"


def codec_required_params_to_string(codec_required_params: Mapping[str, str]) -> str:
    """필수 파라미터를 'key=value;' 형태 문자열로 변환 (키 정렬)"""
    return "".join(
        f"{key}={codec_required_params[key]};"
        for key in sorted(codec_required_params)
    )


def _parameters_match(codec: RtpCodecCapability, codec_required_params: Mapping[str, str]) -> bool:
    for key, value in codec_required_params.items():
        if codec.parameters.get(key) != value:
            return False
    return True


def filter_codec_capabilities(
    codec_name: str,
    codec_required_params: Mapping[str, str],
    use_rtx: bool,
    use_ulpfec: bool,
    use_flexfec: bool,
    supported_codecs: Sequence[RtpCodecCapability],
) -> List[RtpCodecCapability]:
    """지원 코덱 중 요청 코덱과 보조 코덱만 남긴 새 리스트 반환
    
    1. 이름이 codec_name이고 required params를 모두 (값까지) 포함하는 코덱
    2. 보조 코덱 (입력 순서 유지):
       - rtx: use_rtx
       - flexfec-03: use_flexfec
       - red, ulpfec: use_flexfec
    
    use_ulpfec는 받기만 하고 사용하지 않는다. red/ulpfec는 use_flexfec에
    묶여 있으며 이 결합은 의도적으로 유지한다.
    
    Args:
        codec_name: 대상 코덱 이름
        codec_required_params: 반드시 일치해야 하는 파라미터
        use_rtx: RTX 포함 여부
        use_ulpfec: (미사용)
        use_flexfec: FlexFEC 및 red/ulpfec 포함 여부
        supported_codecs: 지원 코덱 목록
        
    Returns:
        선택된 코덱 리스트
        
    Raises:
        UnsupportedCodecError: 요청 코덱이 하나도 매칭되지 않음
    """
    output_codecs = [
        codec for codec in supported_codecs
        if codec.name == codec_name and _parameters_match(codec, codec_required_params)
    ]

    if not output_codecs:
        logger.error("codec_unsupported",
                    codec_name=codec_name,
                    required_params=dict(codec_required_params),
                    supported=[codec.name for codec in supported_codecs])
        raise UnsupportedCodecError(
            f"Codec with name={codec_name} and params "
            f"{{{codec_required_params_to_string(codec_required_params)}}} "
            f"is unsupported for this peer connection"
        )

    for codec in supported_codecs:
        if codec.name == RTX_CODEC_NAME and use_rtx:
            output_codecs.append(codec)
        elif codec.name == FLEXFEC_CODEC_NAME and use_flexfec:
            output_codecs.append(codec)
        elif codec.name in (RED_CODEC_NAME, ULPFEC_CODEC_NAME) and use_flexfec:
            # red와 ulpfec는 함께 켜고 끈다
            output_codecs.append(codec)

    logger.debug("codecs_filtered",
                codec_name=codec_name,
                selected=[codec.name for codec in output_codecs])
    return output_codecs


def select_video_codecs(
    config: VideoCodecConfig,
    supported_codecs: Sequence[RtpCodecCapability],
) -> List[RtpCodecCapability]:
    """VideoCodecConfig 기준으로 filter_codec_capabilities 호출"""
    return filter_codec_capabilities(
        config.name,
        config.required_params,
        config.use_rtx,
        config.use_ulpfec,
        config.use_flexfec,
        supported_codecs,
    )
