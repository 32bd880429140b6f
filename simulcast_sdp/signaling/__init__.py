"""Simulcast offer/answer 시그널링 패치"""

from simulcast_sdp.signaling.interceptor import LocalAndRemoteSdp, SignalingInterceptor

__all__ = [
    "LocalAndRemoteSdp",
    "SignalingInterceptor",
]
