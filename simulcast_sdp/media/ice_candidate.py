"""ICE Candidate 모델

a=candidate 라인을 특정 섹션(mid, m-line index)에 귀속시키는 값 객체
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class IceCandidate:
    """ICE candidate
    
    candidate 문자열 자체는 해석하지 않는다 (opaque payload).
    
    예: IceCandidate("video", 1, "candidate:1 1 udp 2122260223 10.0.0.1 50000 typ host")
    """
    sdp_mid: str
    sdp_mline_index: int
    candidate: str

    def retarget(self, sdp_mid: str, sdp_mline_index: int) -> "IceCandidate":
        """같은 payload를 다른 섹션에 귀속시킨 새 candidate 반환"""
        return IceCandidate(sdp_mid, sdp_mline_index, self.candidate)
