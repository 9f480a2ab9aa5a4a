"""
Employee 필드 검증.

규칙은 (필드, 조건, 메시지) 테이블로 정의하고 순서대로 평가한다.
- 필드마다 처음 실패한 규칙 하나만 메시지로 남긴다.
- 모든 필드를 끝까지 평가하므로 잘못된 필드 수만큼 메시지가 나온다.
"""

import re
from decimal import Decimal
from typing import Any, Callable, List, Mapping, NamedTuple

from employee_directory.core.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")

NAME_MAX_LENGTH = 255
EMAIL_MAX_LENGTH = 255
DEPARTMENT_MAX_LENGTH = 100
POSITION_MAX_LENGTH = 100
# Numeric(10, 2) 컬럼에 들어갈 수 있는 최대값
SALARY_MAX = Decimal("99999999.99")
UTF8_MESSAGE = "must be valid UTF-8 text"


class Rule(NamedTuple):
    field: str
    check: Callable[[Any], bool]
    message: str


def _present(value: Any) -> bool:
    return value is not None and value != ""


def _max_length(limit: int) -> Callable[[Any], bool]:
    return lambda value: value is None or len(value) <= limit


def _utf8_text(value: Any) -> bool:
    # 짝 없는 서로게이트("\ud800")는 인코딩 불가
    if value is None:
        return True
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _email_syntax(value: Any) -> bool:
    return EMAIL_PATTERN.match(value) is not None


RULES: List[Rule] = [
    Rule("name", _present, "is required"),
    Rule("name", _utf8_text, UTF8_MESSAGE),
    Rule("name", _max_length(NAME_MAX_LENGTH), f"must be at most {NAME_MAX_LENGTH} characters"),
    Rule("email", _present, "is required"),
    Rule("email", _utf8_text, UTF8_MESSAGE),
    Rule("email", _email_syntax, "must be a valid email address"),
    Rule("email", _max_length(EMAIL_MAX_LENGTH), f"must be at most {EMAIL_MAX_LENGTH} characters"),
    Rule("department", _utf8_text, UTF8_MESSAGE),
    Rule(
        "department",
        _max_length(DEPARTMENT_MAX_LENGTH),
        f"must be at most {DEPARTMENT_MAX_LENGTH} characters",
    ),
    Rule("position", _utf8_text, UTF8_MESSAGE),
    Rule(
        "position",
        _max_length(POSITION_MAX_LENGTH),
        f"must be at most {POSITION_MAX_LENGTH} characters",
    ),
    Rule("salary", lambda value: value is None or value >= 0, "must be greater than or equal to 0"),
    Rule("salary", lambda value: value is None or value <= SALARY_MAX, f"must be at most {SALARY_MAX}"),
]


def validate_employee(record: Mapping[str, Any]) -> List[str]:
    """위반 메시지 목록을 돌려준다. 빈 리스트면 통과."""
    errors: List[str] = []
    failed = set()

    for rule in RULES:
        if rule.field in failed:
            continue
        if not rule.check(record.get(rule.field)):
            failed.add(rule.field)
            errors.append(f"{rule.field} {rule.message}")

    return errors


def ensure_valid(record: Mapping[str, Any]) -> None:
    """위반이 있으면 모든 메시지를 담은 ValidationError ("; " 로 연결)."""
    errors = validate_employee(record)
    if errors:
        raise ValidationError(errors)
