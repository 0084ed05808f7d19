"""
스키마 패키지
순환 import 방지를 위해 필요한 것만 노출
"""

from .commons_schemas import ApiResponse, ErrorResponse, CamelModel, parse_fields

# 각 모듈별로 필요할 때 직접 import하도록 함
# from .letter_schemas import LetterFields, LetterResponse, RecipientState
# from .news_schemas import NewsFields, NewsResponse, CommentResponse
