import logging
from typing import Optional

import bcrypt

from employee_directory.core.exceptions import HashingError

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 12


def _prepare_secret(secret: str) -> bytes:
    """
    bcrypt 입력 형식으로 변환.
    bcrypt는 72바이트까지만 사용하므로 UTF-8 인코딩 후 잘라낸다.
    """
    return secret.encode("utf-8")[:72]


def hash_credential(secret: str, rounds: Optional[int] = None) -> str:
    """
    bcrypt(솔트 포함)로 해시를 만든다.

    라이브러리 오류는 HashingError로 감싸서 올린다.
    호출 측은 해시 없이 저장을 진행하면 안 된다.
    """
    try:
        salt = bcrypt.gensalt(rounds or DEFAULT_ROUNDS)
        hashed = bcrypt.hashpw(_prepare_secret(secret), salt)
    except (ValueError, TypeError, OSError) as exc:
        logger.error("bcrypt hashing failed: %s", exc.__class__.__name__)
        raise HashingError("Failed to hash credential") from exc
    return hashed.decode("utf-8")


def verify_credential(secret: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_prepare_secret(secret), hashed.encode("utf-8"))
    except ValueError:
        # 형식이 잘못된 해시
        return False
