"""SDP 데이터 모델

파싱된 Session Description의 구조화 객체 모델.
텍스트 SDP 파싱/직렬화는 외부에서 수행되며, 이 모듈은 offer/answer 패치에
필요한 섹션(mid), header extension, stream(rid), simulcast, bundle group,
transport 정보만을 표현한다.

모든 객체는 clone()으로 깊은 복사된다. local/remote 설명은 어떤 가변 상태도
공유하지 않는다.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from simulcast_sdp.common.exceptions import DuplicateContentError, EmptyLayerGroupError


class MediaType(str, Enum):
    """미디어 타입 (m= line)"""
    AUDIO = "audio"
    VIDEO = "video"
    DATA = "data"


class MediaProtocolType(str, Enum):
    """미디어 섹션 프로토콜 타입"""
    RTP = "rtp"
    SCTP = "sctp"
    OTHER = "other"


class SdpType(str, Enum):
    """JSEP SDP 타입"""
    OFFER = "offer"
    PRANSWER = "pranswer"
    ANSWER = "answer"
    ROLLBACK = "rollback"


class RidDirection(str, Enum):
    """RID 방향 (a=rid:<id> send|recv)"""
    SEND = "send"
    RECEIVE = "recv"


GROUP_TYPE_BUNDLE = "BUNDLE"


@dataclass
class RtpExtension:
    """RTP header extension binding (a=extmap)
    
    id == 0 은 협상되지 않았음을 의미
    """
    uri: str
    id: int = 0
    encrypt: bool = False

    MID_URI = "urn:ietf:params:rtp-hdrext:sdes:mid"
    RID_URI = "urn:ietf:params:rtp-hdrext:sdes:rtp-stream-id"
    REPAIRED_RID_URI = "urn:ietf:params:rtp-hdrext:sdes:repaired-rtp-stream-id"

    def is_negotiated(self) -> bool:
        return self.id != 0


@dataclass
class RidDescription:
    """RID 설명 (a=rid)"""
    rid: str
    direction: RidDirection = RidDirection.SEND


@dataclass
class StreamParams:
    """미디어 섹션 내 단일 스트림"""
    id: str = ""
    cname: str = ""
    ssrcs: List[int] = field(default_factory=list)
    rids: List[RidDescription] = field(default_factory=list)

    def has_rids(self) -> bool:
        return len(self.rids) > 0

    def set_rids(self, rids: List[RidDescription]) -> None:
        self.rids = list(rids)


@dataclass
class SimulcastLayer:
    """Simulcast 레이어 (rid 하나)"""
    rid: str
    is_paused: bool = False


@dataclass
class SimulcastLayerList:
    """Simulcast 레이어 리스트
    
    각 항목은 대체 가능한(alternative) 레이어 그룹.
    예: a=simulcast:send 1;2,3 -> [[1], [2, 3]]
    """
    layers: List[List[SimulcastLayer]] = field(default_factory=list)

    def add_layer(self, layer: SimulcastLayer) -> None:
        self.layers.append([layer])

    def add_layer_with_alternatives(self, layers: List[SimulcastLayer]) -> None:
        if not layers:
            raise EmptyLayerGroupError("Alternative layer group must not be empty")
        self.layers.append(list(layers))

    def all_layers(self) -> List[SimulcastLayer]:
        """대체 그룹을 평탄화한 레이어 리스트"""
        return [layer for group in self.layers for layer in group]

    def empty(self) -> bool:
        return not self.layers

    def __iter__(self) -> Iterator[List[SimulcastLayer]]:
        return iter(self.layers)

    def __len__(self) -> int:
        return len(self.layers)


@dataclass
class SimulcastDescription:
    """Simulcast 설명 (a=simulcast)"""
    send_layers: SimulcastLayerList = field(default_factory=SimulcastLayerList)
    receive_layers: SimulcastLayerList = field(default_factory=SimulcastLayerList)

    def empty(self) -> bool:
        return self.send_layers.empty() and self.receive_layers.empty()

    def clone(self) -> "SimulcastDescription":
        return copy.deepcopy(self)


@dataclass
class MediaContentDescription:
    """미디어 섹션별 설명
    
    codecs는 패치 대상이 아니므로 payload type -> codec 문자열로만 보관
    """
    media_type: MediaType
    codecs: Dict[int, str] = field(default_factory=dict)
    rtp_header_extensions: List[RtpExtension] = field(default_factory=list)
    streams: List[StreamParams] = field(default_factory=list)
    simulcast_description: SimulcastDescription = field(default_factory=SimulcastDescription)
    direction: str = "sendrecv"
    rtcp_mux: bool = True

    def has_simulcast(self) -> bool:
        return not self.simulcast_description.empty()

    def set_simulcast_description(self, simulcast: SimulcastDescription) -> None:
        self.simulcast_description = simulcast

    def set_rtp_header_extensions(self, extensions: List[RtpExtension]) -> None:
        self.rtp_header_extensions = list(extensions)

    def clear_rtp_header_extensions(self) -> None:
        self.rtp_header_extensions = []

    def find_extension(self, uri: str) -> Optional[RtpExtension]:
        """URI로 header extension 검색"""
        for extension in self.rtp_header_extensions:
            if extension.uri == uri:
                return extension
        return None

    def clone(self) -> "MediaContentDescription":
        return copy.deepcopy(self)


@dataclass
class ContentInfo:
    """미디어 섹션 (m= line 하나)"""
    mid: str
    type: MediaProtocolType
    media_description: MediaContentDescription

    def __repr__(self) -> str:
        return (f"ContentInfo(mid={self.mid}, type={self.type.value}, "
                f"media={self.media_description.media_type.value})")


@dataclass
class ContentGroup:
    """섹션 그룹 (a=group:BUNDLE ...)"""
    semantics: str
    content_names: List[str] = field(default_factory=list)

    def add_content_name(self, name: str) -> None:
        if name not in self.content_names:
            self.content_names.append(name)

    def has_content_name(self, name: str) -> bool:
        return name in self.content_names


@dataclass
class TransportDescription:
    """섹션별 transport/보안 파라미터"""
    ice_ufrag: str = ""
    ice_pwd: str = ""
    ice_options: List[str] = field(default_factory=list)
    fingerprint: Optional[str] = None
    connection_role: Optional[str] = None


@dataclass
class TransportInfo:
    """section id에 묶인 transport 설명"""
    content_name: str
    description: TransportDescription


@dataclass
class SessionDescription:
    """SDP 세션 설명
    
    순서가 있는 섹션 리스트, bundle group, section id 별 transport 리스트
    """
    contents: List[ContentInfo] = field(default_factory=list)
    groups: List[ContentGroup] = field(default_factory=list)
    transport_infos: List[TransportInfo] = field(default_factory=list)

    def get_content_by_name(self, mid: str) -> Optional[ContentInfo]:
        for content in self.contents:
            if content.mid == mid:
                return content
        return None

    def add_content(
        self,
        mid: str,
        protocol_type: MediaProtocolType,
        media_description: MediaContentDescription,
    ) -> None:
        """섹션 추가 (마지막 위치)
        
        Raises:
            DuplicateContentError: 이미 존재하는 mid
        """
        if self.get_content_by_name(mid) is not None:
            raise DuplicateContentError(f"Content already exists: {mid}")
        self.contents.append(ContentInfo(mid, protocol_type, media_description))

    def remove_content_by_name(self, mid: str) -> bool:
        """섹션 제거
        
        Returns:
            제거 여부 (없으면 False)
        """
        remaining = [content for content in self.contents if content.mid != mid]
        removed = len(remaining) != len(self.contents)
        self.contents = remaining
        return removed

    def mids(self) -> List[str]:
        return [content.mid for content in self.contents]

    def has_group(self, semantics: str) -> bool:
        return self.get_group_by_name(semantics) is not None

    def get_group_by_name(self, semantics: str) -> Optional[ContentGroup]:
        for group in self.groups:
            if group.semantics == semantics:
                return group
        return None

    def add_group(self, group: ContentGroup) -> None:
        self.groups.append(group)

    def remove_group_by_name(self, semantics: str) -> None:
        """semantics가 같은 첫 번째 그룹 제거"""
        for index, group in enumerate(self.groups):
            if group.semantics == semantics:
                del self.groups[index]
                return

    def get_transport_info_by_name(self, content_name: str) -> Optional[TransportInfo]:
        for transport_info in self.transport_infos:
            if transport_info.content_name == content_name:
                return transport_info
        return None

    def set_transport_infos(self, transport_infos: List[TransportInfo]) -> None:
        self.transport_infos = list(transport_infos)

    def clone(self) -> "SessionDescription":
        return copy.deepcopy(self)


@dataclass
class JsepSessionDescription:
    """타입(offer/answer)과 세션 id/version이 부여된 SDP
    
    o= line의 session id / version을 보존한다
    """
    sdp_type: SdpType
    description: SessionDescription
    session_id: str = "0"
    session_version: str = "0"

    def clone(self) -> "JsepSessionDescription":
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        return (f"JsepSessionDescription(type={self.sdp_type.value}, "
                f"session_id={self.session_id}, mids={self.description.mids()})")
