"""Simulcast SDP 패치 엔진

simulcast 섹션 하나를 rid 별 독립 섹션으로 분리(offer)하고
역으로 병합(answer)하는 SDP 인터셉터
"""

from simulcast_sdp.media.codec.capability import RtpCodecCapability, filter_codec_capabilities
from simulcast_sdp.signaling.interceptor import LocalAndRemoteSdp, SignalingInterceptor

__version__ = "0.1.0"

__all__ = [
    "LocalAndRemoteSdp",
    "RtpCodecCapability",
    "SignalingInterceptor",
    "filter_codec_capabilities",
]
