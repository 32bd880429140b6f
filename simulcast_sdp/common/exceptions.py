"""커스텀 예외 클래스

Simulcast SDP 인터셉터의 모든 커스텀 예외 정의.
모든 예외는 호출자 또는 상위 협상 단계의 결함(precondition 위반)을 의미하며
재시도 대상이 아니다.
"""


class SimulcastSdpError(Exception):
    """Base exception for all simulcast SDP errors"""
    pass


# Codec Exceptions
class UnsupportedCodecError(SimulcastSdpError):
    """요청한 코덱이 지원 코덱 목록에 없음"""
    pass


# Media Exceptions
class MediaError(SimulcastSdpError):
    """SDP 객체 모델 관련 에러"""
    pass


class DuplicateContentError(MediaError):
    """같은 mid의 섹션이 이미 존재"""
    pass


class EmptyLayerGroupError(MediaError):
    """비어 있는 simulcast 대체 레이어 그룹"""
    pass


# Signaling Exceptions
class SignalingError(SimulcastSdpError):
    """Offer/Answer 패치 관련 에러"""
    pass


class InvalidSimulcastSectionError(SignalingError):
    """Simulcast 섹션 구조 오류 (stream 개수, rid 누락)"""
    pass


class HeaderExtensionNotNegotiatedError(SignalingError):
    """mid/rid RTP header extension 미협상 (id == 0)"""
    pass


class TransportInfoNotFoundError(SignalingError):
    """section id에 해당하는 transport description 없음"""
    pass


class DuplicateRegistrationError(SignalingError):
    """mid 또는 rid 중복 등록"""
    pass


class MediaSectionNotFoundError(SignalingError):
    """id로 찾는 media section 없음"""
    pass


class MediaSectionsMismatchError(SignalingError):
    """섹션 순서 복원 시 섹션 집합 불일치"""
    pass


class EmptyCandidateBatchError(SignalingError):
    """ICE candidate 변환 결과가 비어 있음"""
    pass


# Configuration Exceptions
class ConfigurationError(SimulcastSdpError):
    """설정 관련 에러"""
    pass
