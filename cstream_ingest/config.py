from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Annotated

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

RawLanguages = str | Sequence[object] | None


class Settings(BaseSettings):
    """Application configuration settings."""

    store_url: AnyHttpUrl | None = Field(default=None, validation_alias="STORE_URL")
    store_api_key: str | None = Field(default=None, validation_alias="STORE_API_KEY")
    store_table: str = Field(default="readers", validation_alias="STORE_TABLE")
    store_timeout: float = Field(default=30.0, validation_alias="STORE_TIMEOUT")
    insert_chunk_size: int = Field(default=50, validation_alias="INSERT_CHUNK_SIZE")
    insert_max_concurrent_chunks: int = Field(
        default=1, validation_alias="INSERT_MAX_CONCURRENT_CHUNKS"
    )
    delete_chunk_size: int = Field(default=100, validation_alias="DELETE_CHUNK_SIZE")
    delete_max_concurrent_chunks: int = Field(
        default=3, validation_alias="DELETE_MAX_CONCURRENT_CHUNKS"
    )
    failure_sample_limit: int = Field(default=5, validation_alias="FAILURE_SAMPLE_LIMIT")
    default_language: str = Field(default="VOSTFR", validation_alias="DEFAULT_LANGUAGE")
    languages: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(), validation_alias="LANGUAGES"
    )

    @field_validator(
        "insert_chunk_size",
        "insert_max_concurrent_chunks",
        "delete_chunk_size",
        "delete_max_concurrent_chunks",
        "failure_sample_limit",
    )
    @classmethod
    def _require_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("languages", mode="before")
    @classmethod
    def _parse_languages(cls, value: RawLanguages) -> tuple[str, ...]:
        if value in (None, ""):
            return ()
        if isinstance(value, str):
            text = value.strip()
            if text.startswith("["):
                try:
                    value = json.loads(text)
                except json.JSONDecodeError as exc:
                    raise ValueError("LANGUAGES must be valid JSON") from exc
            else:
                value = text.split(",")
        if not isinstance(value, Sequence) or isinstance(value, (bytes, bytearray)):
            raise ValueError("LANGUAGES must be a list or comma separated string")
        normalized: list[str] = []
        for code in value:
            code_str = str(code).strip()
            if code_str and code_str not in normalized:
                normalized.append(code_str)
        return tuple(normalized)

    def accepts_language(self, code: str) -> bool:
        """Return ``True`` when *code* is allowed (any code when unrestricted)."""

        return not self.languages or code in self.languages

    model_config = SettingsConfigDict(case_sensitive=False)
