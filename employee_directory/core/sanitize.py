SEARCH_TERM_MAX_LENGTH = 100

_CONTROL_CHARS = ("\x00", "\r", "\n", "\t")

# 검색어에서 제거할 SQL 메타문자. 파라미터 바인딩을 대신하지 않는 2차 방어선
_SQL_METACHARS = (";", "--", "/*", "*/", "'", '"', "\\")


def sanitize(text: str) -> str:
    """null 바이트와 CR/LF/TAB을 제거하고 앞뒤 공백을 자른다."""
    for ch in _CONTROL_CHARS:
        text = text.replace(ch, "")
    return text.strip()


def sanitize_search_term(text: str) -> str:
    """검색어 q 전용: null 바이트 및 SQL 메타문자 제거, 소문자화, 100자 제한."""
    text = text.replace("\x00", "").lower()
    for token in _SQL_METACHARS:
        text = text.replace(token, "")
    text = text.strip()
    return text[:SEARCH_TERM_MAX_LENGTH]
