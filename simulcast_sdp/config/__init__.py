"""설정 모델 및 로더"""
