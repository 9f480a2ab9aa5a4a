from typing import List


class EmployeeDirectoryError(Exception):
    """서비스 전체 예외의 부모 클래스"""


class ConfigurationError(EmployeeDirectoryError):
    """필수 설정 누락 등. 시작 단계에서 발생하면 프로세스를 종료한다."""


class ClientInputError(EmployeeDirectoryError):
    """잘못된 JSON, 잘못된 id 등 → 400"""


class ValidationError(ClientInputError):
    """필드 검증 실패. 모든 위반 메시지를 한 번에 담는다."""

    def __init__(self, messages: List[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class StoreError(EmployeeDirectoryError):
    """DB 연결 실패, 드라이버 오류 등 → 500"""


class DuplicateKeyError(StoreError):
    """활성 레코드 중 같은 email이 이미 존재 → 409"""


class NotFoundError(StoreError):
    """해당 id의 활성 레코드가 없음 → 404"""


class HashingError(EmployeeDirectoryError):
    """bcrypt 해싱 실패 → 500"""
