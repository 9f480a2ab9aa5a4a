import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from employee_directory.core.exceptions import ClientInputError


@dataclass
class RequestContext:
    """
    HTTP 프레임워크와 무관한 요청 정보.
    핸들러는 이것만 받으므로 서버 없이 테스트할 수 있다.
    """
    path_params: Mapping[str, str] = field(default_factory=dict)
    query_params: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def json_object(self) -> Dict[str, Any]:
        """바디를 JSON object로 파싱. 형식이 잘못되면 ClientInputError."""
        try:
            data = json.loads(self.body or b"null")
        except (ValueError, UnicodeDecodeError, RecursionError) as exc:
            # 지나치게 깊은 중첩은 RecursionError
            raise ClientInputError("Invalid request format") from exc
        if not isinstance(data, dict):
            raise ClientInputError("Invalid request format")
        return data

    def employee_id(self) -> int:
        raw = self.path_params.get("employee_id", "")
        # "+1", " 1", "1_000" 같은 값은 int()가 받아주므로 숫자만 허용
        if not raw.isascii() or not raw.isdigit():
            raise ClientInputError("Invalid employee ID")
        value = int(raw)
        if value < 1 or value > 2**63 - 1:
            raise ClientInputError("Invalid employee ID")
        return value


@dataclass
class HandlerResponse:
    status_code: int
    body: Dict[str, Any]


def error_response(status_code: int, message: str) -> HandlerResponse:
    return HandlerResponse(status_code, {"error": message})
