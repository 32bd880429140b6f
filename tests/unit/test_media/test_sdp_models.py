"""SDP 객체 모델 단위 테스트"""

import pytest

from simulcast_sdp.common.exceptions import (
    DuplicateContentError,
    EmptyLayerGroupError,
    SimulcastSdpError,
)
from simulcast_sdp.media.sdp_models import (
    ContentGroup,
    GROUP_TYPE_BUNDLE,
    MediaContentDescription,
    MediaProtocolType,
    MediaType,
    RtpExtension,
    SessionDescription,
    SimulcastDescription,
    SimulcastLayer,
    SimulcastLayerList,
)


class TestSimulcastLayerList:
    """Simulcast 레이어 리스트"""

    def test_add_layer_creates_single_group(self):
        layers = SimulcastLayerList()
        layers.add_layer(SimulcastLayer("1"))
        layers.add_layer(SimulcastLayer("2"))
        
        assert len(layers) == 2
        assert [group[0].rid for group in layers] == ["1", "2"]

    def test_add_layer_with_alternatives(self):
        layers = SimulcastLayerList()
        layers.add_layer_with_alternatives([SimulcastLayer("a"), SimulcastLayer("b")])
        
        assert len(layers) == 1
        assert [layer.rid for layer in layers.all_layers()] == ["a", "b"]

    def test_empty_alternatives_rejected(self):
        with pytest.raises(EmptyLayerGroupError):
            SimulcastLayerList().add_layer_with_alternatives([])

    def test_simulcast_description_empty(self):
        simulcast = SimulcastDescription()
        assert simulcast.empty()
        
        simulcast.receive_layers.add_layer(SimulcastLayer("1"))
        assert not simulcast.empty()


class TestSessionDescription:
    """SessionDescription 조작"""

    def _video(self) -> MediaContentDescription:
        return MediaContentDescription(media_type=MediaType.VIDEO)

    def test_add_get_remove_content(self):
        desc = SessionDescription()
        desc.add_content("v", MediaProtocolType.RTP, self._video())
        
        assert desc.get_content_by_name("v") is not None
        assert desc.remove_content_by_name("v") is True
        assert desc.remove_content_by_name("v") is False
        assert desc.mids() == []

    def test_add_duplicate_content(self):
        desc = SessionDescription()
        desc.add_content("v", MediaProtocolType.RTP, self._video())
        
        with pytest.raises(DuplicateContentError) as exc_info:
            desc.add_content("v", MediaProtocolType.RTP, self._video())
        assert isinstance(exc_info.value, SimulcastSdpError)
        assert desc.mids() == ["v"]

    def test_groups(self):
        desc = SessionDescription()
        desc.add_group(ContentGroup(GROUP_TYPE_BUNDLE, ["a"]))
        
        assert desc.has_group(GROUP_TYPE_BUNDLE)
        desc.remove_group_by_name(GROUP_TYPE_BUNDLE)
        assert not desc.has_group(GROUP_TYPE_BUNDLE)

    def test_clone_is_deep(self):
        desc = SessionDescription()
        video = self._video()
        video.rtp_header_extensions.append(RtpExtension(RtpExtension.MID_URI, 1))
        desc.add_content("v", MediaProtocolType.RTP, video)
        
        clone = desc.clone()
        clone.get_content_by_name("v").media_description.rtp_header_extensions[0].id = 9
        
        assert clone != desc
        assert desc.get_content_by_name("v").media_description.rtp_header_extensions[0].id == 1

    def test_find_extension(self):
        video = self._video()
        video.set_rtp_header_extensions([RtpExtension(RtpExtension.RID_URI, 3)])
        
        assert video.find_extension(RtpExtension.RID_URI).id == 3
        assert video.find_extension(RtpExtension.MID_URI) is None
