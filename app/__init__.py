"""
CSO Office Admin Service

시민사회단체(CSO) 대상 공문 관리 백엔드
- 전체/지정 CSO 레터 발송
- CSO별 열람 추적 (손상된 수신자 JSON 복구)
- 첨부파일 / 뉴스 이미지 수명주기 관리
"""

__version__ = "1.0.0"
__author__ = "CSO Admin Team"
