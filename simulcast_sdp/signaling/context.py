"""Signaling Context

하나의 협상(로컬 peer 하나의 연결 하나)에 대한 simulcast 섹션 상태
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from simulcast_sdp.common.exceptions import DuplicateRegistrationError
from simulcast_sdp.common.logger import get_logger
from simulcast_sdp.media.sdp_models import (
    MediaProtocolType,
    RtpExtension,
    SimulcastDescription,
    TransportDescription,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class SimulcastSectionInfo:
    """simulcast 미디어 섹션 하나의 식별/배선 정보
    
    offer에서 발견된 simulcast 섹션마다 한 번 생성되며 이후 변경되지 않는다.
    """
    mid: str
    media_protocol_type: MediaProtocolType
    rids: Tuple[str, ...]
    mid_extension: RtpExtension
    rid_extension: RtpExtension
    # repaired-rid는 simulcast RTX 미지원으로 복원되지 않는다
    rrid_extension: Optional[RtpExtension]
    simulcast_description: SimulcastDescription
    transport_description: TransportDescription

    @property
    def first_rid(self) -> str:
        return self.rids[0]


@dataclass
class SignalingContext:
    """협상 단위 작업 상태
    
    - mids_order: 최초 offer의 섹션 id 순서
    - simulcast_infos: SimulcastSectionInfo 레코드 저장소
    - simulcast_infos_by_mid / simulcast_infos_by_rid: 같은 레코드를 가리키는 조회 인덱스
    """
    mids_order: List[str] = field(default_factory=list)
    simulcast_infos: List[SimulcastSectionInfo] = field(default_factory=list)
    simulcast_infos_by_mid: Dict[str, SimulcastSectionInfo] = field(default_factory=dict)
    simulcast_infos_by_rid: Dict[str, SimulcastSectionInfo] = field(default_factory=dict)

    def add_simulcast_info(self, info: SimulcastSectionInfo) -> None:
        """레코드 등록
        
        검증을 모두 통과한 뒤에만 저장소와 인덱스를 갱신한다.
        
        Raises:
            DuplicateRegistrationError: mid 또는 rid 중복 (기존 등록 또는 레코드 내부)
        """
        if info.mid in self.simulcast_infos_by_mid:
            raise DuplicateRegistrationError(
                f"Simulcast section already registered: mid={info.mid}"
            )
        
        seen = set()
        for rid in info.rids:
            if rid in self.simulcast_infos_by_rid or rid in seen:
                raise DuplicateRegistrationError(
                    f"Simulcast layer already registered: rid={rid} (mid={info.mid})"
                )
            seen.add(rid)
        
        self.simulcast_infos.append(info)
        self.simulcast_infos_by_mid[info.mid] = info
        for rid in info.rids:
            self.simulcast_infos_by_rid[rid] = info
        
        logger.debug("simulcast_section_registered",
                    mid=info.mid,
                    rids=list(info.rids),
                    total_sections=len(self.simulcast_infos))

    def has_simulcast(self) -> bool:
        return len(self.simulcast_infos) > 0

    def get_by_mid(self, mid: str) -> Optional[SimulcastSectionInfo]:
        return self.simulcast_infos_by_mid.get(mid)

    def get_by_rid(self, rid: str) -> Optional[SimulcastSectionInfo]:
        return self.simulcast_infos_by_rid.get(rid)
