from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    port: int = Field(default=3000, alias="PORT")

    # JWT Configuration (auth is disabled when no secret is configured)
    jwt_secret: str | None = Field(default=None, alias="JWT_SECRET")
    jwt_public_path: str | None = Field(default=None, alias="JWT_PUBLIC_PATH")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("jwt_secret", "jwt_public_path", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for optional string fields."""
        if v == "":
            return None
        return v

    @property
    def auth_enabled(self) -> bool:
        return self.jwt_secret is not None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )
