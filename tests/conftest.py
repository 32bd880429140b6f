"""pytest 설정 파일

공통 fixtures 및 테스트 설정
"""

import pytest
import tempfile
import yaml
from pathlib import Path

from simulcast_sdp.media.sdp_models import (
    ContentGroup,
    GROUP_TYPE_BUNDLE,
    JsepSessionDescription,
    MediaContentDescription,
    MediaProtocolType,
    MediaType,
    RidDescription,
    RtpExtension,
    SdpType,
    SessionDescription,
    SimulcastDescription,
    SimulcastLayer,
    StreamParams,
    TransportDescription,
    TransportInfo,
)


@pytest.fixture
def temp_config_file():
    """임시 설정 파일 fixture"""
    config_data = {
        "logging": {
            "level": "DEBUG",
            "format": "text",
        },
        "video_codec": {
            "name": "VP9",
            "required_params": {"profile-id": "0"},
            "use_rtx": True,
            "use_flexfec": False,
        },
    }
    
    with tempfile.NamedTemporaryFile(
        mode='w', 
        suffix='.yaml', 
        delete=False,
        encoding='utf-8'
    ) as f:
        yaml.dump(config_data, f)
        temp_path = f.name
    
    yield temp_path
    
    Path(temp_path).unlink(missing_ok=True)


@pytest.fixture
def invalid_config_file():
    """잘못된 설정 파일 fixture"""
    config_data = {
        "logging": {
            "level": "VERBOSE",  # 존재하지 않는 레벨
        },
        "video_codec": {
            "name": "   ",  # 빈 코덱 이름
        },
    }
    
    with tempfile.NamedTemporaryFile(
        mode='w',
        suffix='.yaml',
        delete=False,
        encoding='utf-8'
    ) as f:
        yaml.dump(config_data, f)
        temp_path = f.name
    
    yield temp_path
    
    Path(temp_path).unlink(missing_ok=True)


def _transport(ufrag: str) -> TransportDescription:
    return TransportDescription(
        ice_ufrag=ufrag,
        ice_pwd=f"{ufrag}-pwd",
        fingerprint="sha-256 AB:CD:EF",
        connection_role="actpass",
    )


def _audio_section() -> MediaContentDescription:
    return MediaContentDescription(
        media_type=MediaType.AUDIO,
        codecs={111: "opus/48000/2"},
        rtp_header_extensions=[RtpExtension(RtpExtension.MID_URI, 4)],
        streams=[StreamParams(id="audio-track", cname="cname", ssrcs=[1111])],
    )


def _simulcast_video_section(rids, mid_id=4, rid_id=10, rrid_id=11) -> MediaContentDescription:
    # offer 생성기가 만든 그대로의 (정규화 전) simulcast 섹션
    simulcast = SimulcastDescription()
    for rid in rids:
        simulcast.send_layers.add_layer(SimulcastLayer(rid, is_paused=True))
    extensions = [
        RtpExtension("urn:ietf:params:rtp-hdrext:toffset", 2),
        RtpExtension(RtpExtension.MID_URI, mid_id),
        RtpExtension(RtpExtension.RID_URI, rid_id),
    ]
    if rrid_id:
        extensions.append(RtpExtension(RtpExtension.REPAIRED_RID_URI, rrid_id))
    return MediaContentDescription(
        media_type=MediaType.VIDEO,
        codecs={96: "VP8/90000", 97: "rtx/90000"},
        rtp_header_extensions=extensions,
        streams=[StreamParams(
            id="video-track",
            cname="cname",
            rids=[RidDescription(rid) for rid in rids],
        )],
        simulcast_description=simulcast,
    )


def build_offer(rids=("1", "2"), video_mid="video", **video_kwargs) -> JsepSessionDescription:
    """audio + (simulcast) video offer

    rids가 비어 있으면 일반 video 섹션
    """
    if rids:
        video = _simulcast_video_section(list(rids), **video_kwargs)
    else:
        video = MediaContentDescription(
            media_type=MediaType.VIDEO,
            codecs={96: "VP8/90000"},
            rtp_header_extensions=[RtpExtension(RtpExtension.MID_URI, 4)],
            streams=[StreamParams(id="video-track", cname="cname", ssrcs=[2222])],
        )
    description = SessionDescription()
    description.add_content("audio", MediaProtocolType.RTP, _audio_section())
    description.add_content(video_mid, MediaProtocolType.RTP, video)
    description.add_group(ContentGroup(GROUP_TYPE_BUNDLE, ["audio", video_mid]))
    description.set_transport_infos([
        TransportInfo("audio", _transport("offer-audio")),
        TransportInfo(video_mid, _transport("offer-video")),
    ])
    return JsepSessionDescription(SdpType.OFFER, description, "4242", "2")


def build_split_answer(rids=("1", "2")) -> JsepSessionDescription:
    """분리된 offer에 대한 answerer의 answer (섹션: audio, rid...)"""
    description = SessionDescription()
    description.add_content("audio", MediaProtocolType.RTP, _audio_section())
    for rid in rids:
        description.add_content(rid, MediaProtocolType.RTP, MediaContentDescription(
            media_type=MediaType.VIDEO,
            codecs={96: "VP8/90000"},
            rtp_header_extensions=[
                RtpExtension("urn:ietf:params:rtp-hdrext:toffset", 2),
                RtpExtension(RtpExtension.MID_URI, 10),
            ],
            direction="recvonly",
        ))
    description.add_group(ContentGroup(GROUP_TYPE_BUNDLE, ["audio", *rids]))
    transport_infos = [TransportInfo("audio", _transport("answer-audio"))]
    for rid in rids:
        transport_infos.append(TransportInfo(rid, _transport(f"answer-{rid}")))
    description.set_transport_infos(transport_infos)
    return JsepSessionDescription(SdpType.ANSWER, description, "7777", "1")


@pytest.fixture
def offer_factory():
    """offer 생성 함수"""
    return build_offer


@pytest.fixture
def answer_factory():
    """분리 섹션 answer 생성 함수"""
    return build_split_answer
