"""Signaling Interceptor

simulcast 섹션 하나를 rid 별 독립 섹션 N개로 쪼개서 offer를 전송하고,
answer 쪽에서는 그 역변환(N개 섹션 -> simulcast 섹션 하나)을 수행한다.
ICE candidate의 섹션 귀속도 같은 context를 기준으로 재매핑한다.

인스턴스 하나는 협상 하나(로컬 peer 하나의 연결 하나)에만 사용한다.
내부 인덱스는 동기화 없이 점진적으로 구성되므로 동시 호출/공유 금지.
"""

import copy
from dataclasses import dataclass
from typing import Dict, Iterable, List

from simulcast_sdp.common.exceptions import (
    DuplicateRegistrationError,
    EmptyCandidateBatchError,
    HeaderExtensionNotNegotiatedError,
    InvalidSimulcastSectionError,
    MediaSectionNotFoundError,
    MediaSectionsMismatchError,
    TransportInfoNotFoundError,
)
from simulcast_sdp.common.logger import get_logger, log_with_context
from simulcast_sdp.media.ice_candidate import IceCandidate
from simulcast_sdp.media.sdp_models import (
    GROUP_TYPE_BUNDLE,
    ContentGroup,
    JsepSessionDescription,
    MediaContentDescription,
    MediaType,
    RidDescription,
    RidDirection,
    RtpExtension,
    SdpType,
    SessionDescription,
    SimulcastDescription,
    SimulcastLayer,
    StreamParams,
    TransportDescription,
    TransportInfo,
)
from simulcast_sdp.signaling.context import SignalingContext, SimulcastSectionInfo

logger = get_logger(__name__)

_SIMULCAST_EXTENSION_URIS = (
    RtpExtension.MID_URI,
    RtpExtension.RID_URI,
    RtpExtension.REPAIRED_RID_URI,
)


@dataclass
class LocalAndRemoteSdp:
    """패치 결과 쌍
    
    local_sdp: 호출자가 로컬 상태로 보관할 설명
    remote_sdp: 상대 peer에게 전송할 설명
    두 객체는 어떤 가변 상태도 공유하지 않는다.
    """
    local_sdp: JsepSessionDescription
    remote_sdp: JsepSessionDescription


def _check_single_stream_with_rids(media_desc: MediaContentDescription, mid: str) -> StreamParams:
    """simulcast 섹션은 rid를 가진 stream 정확히 하나만 허용"""
    if len(media_desc.streams) != 1:
        raise InvalidSimulcastSectionError(
            f"Simulcast section must have exactly one stream: mid={mid}, "
            f"streams={len(media_desc.streams)}"
        )
    stream = media_desc.streams[0]
    if not stream.has_rids():
        raise InvalidSimulcastSectionError(
            f"Simulcast stream must declare rids: mid={mid}"
        )
    return stream


def _update_bundle_group(desc: SessionDescription) -> None:
    """현재 모든 섹션을 포함하는 BUNDLE 그룹으로 교체"""
    bundle_group = ContentGroup(GROUP_TYPE_BUNDLE)
    for content in desc.contents:
        bundle_group.add_content_name(content.mid)
    if desc.has_group(GROUP_TYPE_BUNDLE):
        desc.remove_group_by_name(GROUP_TYPE_BUNDLE)
    desc.add_group(bundle_group)


class SignalingInterceptor:
    """Simulcast offer/answer 인터셉터
    
    흐름:
    1. patch_offer(): offer를 스캔해 context를 채우고 simulcast 섹션을 rid 별로 분리
    2. patch_answer(): 분리된 섹션들에 대한 answer를 simulcast 섹션 하나로 병합
    3. patch_offerer_ice_candidates() / patch_answerer_ice_candidates():
       candidate의 mid를 각 peer가 보고 있는 섹션 구성에 맞게 재매핑
    
    모든 precondition 위반은 SignalingError 하위 예외로 즉시 중단된다.
    """

    def __init__(self):
        self._context = SignalingContext()

    @property
    def context(self) -> SignalingContext:
        return self._context

    def _fill_context(self, offer: JsepSessionDescription) -> None:
        """offer를 스캔해 섹션 순서와 simulcast 섹션 정보를 기록
        
        simulcast 비디오 섹션의 rid 리스트와 simulcast 설명을 send 방향으로
        정규화한다 (offer를 제자리에서 수정).
        
        Raises:
            InvalidSimulcastSectionError: stream 개수 또는 rid 누락
            HeaderExtensionNotNegotiatedError: mid/rid extension id == 0
            TransportInfoNotFoundError: 섹션의 transport 정보 없음
            DuplicateRegistrationError: mid/rid 중복
        """
        description = offer.description
        for content in description.contents:
            self._context.mids_order.append(content.mid)
            media_desc = content.media_description
            if media_desc.media_type != MediaType.VIDEO:
                continue
            if not media_desc.has_simulcast():
                continue

            stream = _check_single_stream_with_rids(media_desc, content.mid)
            rids = [rid_desc.rid for rid_desc in stream.rids]

            simulcast_description = SimulcastDescription()
            for rid in rids:
                simulcast_description.send_layers.add_layer(SimulcastLayer(rid, is_paused=False))
            stream.set_rids([RidDescription(rid, RidDirection.SEND) for rid in rids])
            media_desc.set_simulcast_description(simulcast_description)

            mid_extension = RtpExtension(RtpExtension.MID_URI)
            rid_extension = RtpExtension(RtpExtension.RID_URI)
            rrid_extension = None
            for extension in media_desc.rtp_header_extensions:
                if extension.uri == RtpExtension.MID_URI:
                    mid_extension = extension
                elif extension.uri == RtpExtension.RID_URI:
                    rid_extension = extension
                elif extension.uri == RtpExtension.REPAIRED_RID_URI:
                    rrid_extension = extension

            if not rid_extension.is_negotiated() or not mid_extension.is_negotiated():
                logger.error("simulcast_extension_not_negotiated",
                            mid=content.mid,
                            mid_extension_id=mid_extension.id,
                            rid_extension_id=rid_extension.id)
                raise HeaderExtensionNotNegotiatedError(
                    f"mid and rid header extensions must be negotiated: mid={content.mid}, "
                    f"mid_id={mid_extension.id}, rid_id={rid_extension.id}"
                )

            transport_info = description.get_transport_info_by_name(content.mid)
            if transport_info is None:
                logger.error("transport_info_not_found", mid=content.mid)
                raise TransportInfoNotFoundError(
                    f"No transport description for simulcast section: mid={content.mid}"
                )

            info = SimulcastSectionInfo(
                mid=content.mid,
                media_protocol_type=content.type,
                rids=tuple(rids),
                mid_extension=copy.deepcopy(mid_extension),
                rid_extension=copy.deepcopy(rid_extension),
                rrid_extension=copy.deepcopy(rrid_extension),
                simulcast_description=simulcast_description.clone(),
                transport_description=copy.deepcopy(transport_info.description),
            )
            self._context.add_simulcast_info(info)

    def patch_offer(self, offer: JsepSessionDescription) -> LocalAndRemoteSdp:
        """offer 분리
        
        offer의 소유권을 가져간다. 반환된 local_sdp가 곧 입력 offer이며,
        호출자는 이후 입력 객체 대신 결과 쌍만 사용해야 한다.
        
        Args:
            offer: 로컬에서 생성된 offer
            
        Returns:
            (원본 offer, rid 별 섹션으로 분리된 offer)
        """
        self._fill_context(offer)
        if not self._context.has_simulcast():
            logger.debug("offer_passthrough",
                        sdp_type=offer.sdp_type.value,
                        mids=offer.description.mids())
            return LocalAndRemoteSdp(offer, offer.clone())

        # 이후 원본 offer 설명은 읽지 않는다
        desc = offer.description.clone()

        for info in self._context.simulcast_infos:
            simulcast_content = desc.get_content_by_name(info.mid)
            if simulcast_content is None:
                raise MediaSectionNotFoundError(
                    f"Simulcast section not found in offer: mid={info.mid}"
                )

            # 섹션을 제거하기 전에 분리 섹션들의 공통 prototype을 만든다
            prototype = simulcast_content.media_description.clone()
            desc.remove_content_by_name(info.mid)

            # rid/repaired-rid는 제거하고 mid가 rid의 id 슬롯을 사용하도록 교체
            extensions = []
            for extension in prototype.rtp_header_extensions:
                if extension.uri in (RtpExtension.RID_URI, RtpExtension.REPAIRED_RID_URI):
                    continue
                if extension.uri == RtpExtension.MID_URI:
                    extension = RtpExtension(extension.uri, info.rid_extension.id, extension.encrypt)
                extensions.append(extension)
            prototype.clear_rtp_header_extensions()
            prototype.set_rtp_header_extensions(extensions)

            stream = _check_single_stream_with_rids(prototype, info.mid)
            stream.set_rids([])
            prototype.set_simulcast_description(SimulcastDescription())

            for rid in info.rids:
                if desc.get_content_by_name(rid) is not None:
                    raise DuplicateRegistrationError(
                        f"rid collides with an existing section id: rid={rid}"
                    )
                desc.add_content(rid, info.media_protocol_type, prototype.clone())

        _update_bundle_group(desc)

        transport_infos = [
            transport_info for transport_info in desc.transport_infos
            if self._context.get_by_mid(transport_info.content_name) is None
        ]
        for info in self._context.simulcast_infos:
            for rid in info.rids:
                transport_infos.append(
                    TransportInfo(rid, copy.deepcopy(info.transport_description))
                )
        desc.set_transport_infos(transport_infos)

        patched_offer = JsepSessionDescription(
            SdpType.OFFER, desc, offer.session_id, offer.session_version
        )
        log = log_with_context(session_id=offer.session_id)
        log.info("offer_patched",
                 sdp_type=SdpType.OFFER.value,
                 mids_before=self._context.mids_order,
                 mids_after=desc.mids(),
                 simulcast_sections=len(self._context.simulcast_infos))
        return LocalAndRemoteSdp(offer, patched_offer)

    def restore_media_sections_order(self, source: SessionDescription) -> SessionDescription:
        """섹션 순서를 최초 offer 순서로 복원
        
        source의 섹션 집합은 기록된 mids_order와 정확히 같아야 한다.
        각 섹션의 내용은 source에서 새로 복사한다.
        
        Raises:
            MediaSectionNotFoundError: 기록된 mid가 source에 없음
            MediaSectionsMismatchError: source에 기록되지 않은 섹션이 남음
        """
        out = source.clone()
        for mid in self._context.mids_order:
            if not out.remove_content_by_name(mid):
                raise MediaSectionNotFoundError(
                    f"Media section missing while restoring order: mid={mid}"
                )
        if out.contents:
            raise MediaSectionsMismatchError(
                f"Unexpected media sections while restoring order: {out.mids()}"
            )
        for mid in self._context.mids_order:
            content = source.get_content_by_name(mid)
            if content is None:
                raise MediaSectionNotFoundError(
                    f"Media section missing in source: mid={mid}"
                )
            out.add_content(mid, content.type, content.media_description.clone())
        return out

    def patch_answer(self, answer: JsepSessionDescription) -> LocalAndRemoteSdp:
        """answer 병합
        
        rid 별로 분리된 섹션들에 대한 answer를 simulcast 섹션 하나로 되돌린다.
        answer의 소유권을 가져간다.
        
        Args:
            answer: 분리된 offer에 대해 생성된 answer
            
        Returns:
            (원본 answer, simulcast 섹션으로 병합된 answer)
        """
        if not self._context.has_simulcast():
            logger.debug("answer_passthrough",
                        sdp_type=answer.sdp_type.value,
                        mids=answer.description.mids())
            return LocalAndRemoteSdp(answer, answer.clone())

        desc = answer.description.clone()

        for info in self._context.simulcast_infos:
            simulcast_content = desc.get_content_by_name(info.first_rid)
            if simulcast_content is None:
                raise MediaSectionNotFoundError(
                    f"Layer section not found in answer: rid={info.first_rid} (mid={info.mid})"
                )

            # simulcast answer로 변환될 설명
            media_desc = simulcast_content.media_description.clone()

            for rid in info.rids:
                if not desc.remove_content_by_name(rid):
                    raise MediaSectionNotFoundError(
                        f"Layer section not found in answer: rid={rid} (mid={info.mid})"
                    )

            # 기존 mid/rid extension을 지우고 원래 배선을 복원
            extensions = [
                extension for extension in media_desc.rtp_header_extensions
                if extension.uri not in _SIMULCAST_EXTENSION_URIS
            ]
            extensions.append(copy.deepcopy(info.mid_extension))
            extensions.append(copy.deepcopy(info.rid_extension))
            media_desc.clear_rtp_header_extensions()
            media_desc.set_rtp_header_extensions(extensions)

            if media_desc.streams:
                raise InvalidSimulcastSectionError(
                    f"Layer section in answer must not carry streams: rid={info.first_rid}, "
                    f"streams={len(media_desc.streams)}"
                )
            stream = StreamParams()
            stream.set_rids([RidDescription(rid, RidDirection.RECEIVE) for rid in info.rids])
            media_desc.streams.append(stream)

            # offer의 send 레이어를 answer의 receive 레이어로
            simulcast_description = SimulcastDescription()
            for layer_group in info.simulcast_description.send_layers:
                simulcast_description.receive_layers.add_layer_with_alternatives(
                    copy.deepcopy(layer_group)
                )
            media_desc.set_simulcast_description(simulcast_description)

            if desc.get_content_by_name(info.mid) is not None:
                raise MediaSectionsMismatchError(
                    f"Answer already has a section under simulcast mid: mid={info.mid}"
                )
            desc.add_content(info.mid, info.media_protocol_type, media_desc)

        desc = self.restore_media_sections_order(desc)

        _update_bundle_group(desc)

        # simulcast 섹션마다 transport 정보 하나만 남긴다
        mid_to_transport_description: Dict[str, TransportDescription] = {}
        transport_infos: List[TransportInfo] = []
        for transport_info in desc.transport_infos:
            info = self._context.get_by_rid(transport_info.content_name)
            if info is not None:
                mid_to_transport_description.setdefault(info.mid, transport_info.description)
            else:
                transport_infos.append(transport_info)
        for info in self._context.simulcast_infos:
            transport_description = mid_to_transport_description.get(info.mid)
            if transport_description is None:
                logger.error("transport_info_not_found", mid=info.mid, rids=list(info.rids))
                raise TransportInfoNotFoundError(
                    f"No transport description for layer sections: mid={info.mid}, "
                    f"rids={list(info.rids)}"
                )
            transport_infos.append(TransportInfo(info.mid, transport_description))
        desc.set_transport_infos(transport_infos)

        patched_answer = JsepSessionDescription(
            SdpType.ANSWER, desc, answer.session_id, answer.session_version
        )
        log = log_with_context(session_id=answer.session_id)
        log.info("answer_patched",
                 sdp_type=SdpType.ANSWER.value,
                 mids_before=answer.description.mids(),
                 mids_after=desc.mids(),
                 simulcast_sections=len(self._context.simulcast_infos))
        return LocalAndRemoteSdp(answer, patched_answer)

    def patch_offerer_ice_candidates(self, candidates: Iterable[IceCandidate]) -> List[IceCandidate]:
        """offerer candidate 재매핑
        
        simulcast 섹션 candidate는 첫 번째 rid 섹션(m-line index 0)으로 보낸다.
        
        Raises:
            EmptyCandidateBatchError: 결과가 비어 있음
        """
        out = []
        for candidate in candidates:
            info = self._context.get_by_mid(candidate.sdp_mid)
            if info is not None:
                out.append(candidate.retarget(info.first_rid, 0))
            else:
                out.append(candidate.retarget(candidate.sdp_mid, candidate.sdp_mline_index))
        if not out:
            raise EmptyCandidateBatchError("Offerer ICE candidate batch is empty")
        return out

    def patch_answerer_ice_candidates(self, candidates: Iterable[IceCandidate]) -> List[IceCandidate]:
        """answerer candidate 재매핑
        
        rid 섹션 candidate는 원래 simulcast 섹션(m-line index 0)으로 보낸다.
        
        Raises:
            EmptyCandidateBatchError: 결과가 비어 있음
        """
        out = []
        for candidate in candidates:
            info = self._context.get_by_rid(candidate.sdp_mid)
            if info is not None:
                out.append(candidate.retarget(info.mid, 0))
            else:
                out.append(candidate.retarget(candidate.sdp_mid, candidate.sdp_mline_index))
        if not out:
            raise EmptyCandidateBatchError("Answerer ICE candidate batch is empty")
        return out
