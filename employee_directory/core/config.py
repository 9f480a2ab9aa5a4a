from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

from employee_directory.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    # .env는 로컬 개발용 (커밋하지 않음)
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    SERVICE_NAME: str = "employee-directory"
    ENVIRONMENT: str = "development"

    HOST: str = "0.0.0.0"
    PORT: int = 8080

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # 전체 URL이 주어지면 DB_* 값보다 우선
    DATABASE_URL: str | None = None
    DB_HOST: str | None = None
    DB_PORT: int = 5432
    DB_USER: str | None = None
    DB_PASSWORD: str | None = None
    DB_NAME: str | None = None
    DB_SSLMODE: str = "require"
    SQLALCHEMY_ECHO: bool = False

    BCRYPT_ROUNDS: int = Field(12, ge=4, le=31)

    # JSON 배열 또는 콤마로 구분된 문자열 모두 허용
    ALLOWED_ORIGINS: List[str] | str = Field(
        default_factory=lambda: ["http://localhost:3000"],
    )

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def split_origins(cls, v):
        if isinstance(v, str):
            v = [origin.strip() for origin in v.split(",")]
        return [origin.rstrip("/") for origin in v if origin]

    @field_validator("ALLOWED_ORIGINS")
    @classmethod
    def reject_wildcard(cls, v: List[str]) -> List[str]:
        # credentials를 허용하므로 "*"는 쓸 수 없다
        if "*" in v:
            raise ValueError("ALLOWED_ORIGINS must list explicit origins, not '*'")
        return v

    def database_url(self) -> URL | str:
        """
        SQLAlchemy async 접속 URL을 만든다.

        DATABASE_URL이 없으면 DB_* 환경변수로 postgresql+asyncpg URL을 조립한다.
        필수 값이 빠져 있으면 ConfigurationError (변수 이름만 알려주고 값은 노출하지 않음).
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL

        required = {
            "DB_HOST": self.DB_HOST,
            "DB_USER": self.DB_USER,
            "DB_PASSWORD": self.DB_PASSWORD,
            "DB_NAME": self.DB_NAME,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ConfigurationError(
                "Missing required database environment variables: "
                + ", ".join(missing)
                + " (or DATABASE_URL)"
            )

        return URL.create(
            "postgresql+asyncpg",
            username=self.DB_USER,
            password=self.DB_PASSWORD,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
            query={"ssl": self.DB_SSLMODE},
        )


def get_settings() -> Settings:
    return Settings()
