"""SDP 객체 모델, ICE candidate, 코덱"""
