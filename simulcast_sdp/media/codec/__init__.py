"""Codec 패키지

RTP codec capability 선택
"""

from simulcast_sdp.media.codec.capability import (
    RtpCodecCapability,
    filter_codec_capabilities,
    select_video_codecs,
)

__all__ = [
    "RtpCodecCapability",
    "filter_codec_capabilities",
    "select_video_codecs",
]
