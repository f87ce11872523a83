"""Runtime configuration read from the environment and an optional .env file."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    graphql_api_url: str = Field(
        default="",
        validation_alias=AliasChoices("NEXT_PUBLIC_GRAPHQL_API", "GRAPHQL_API_URL", "graphql_api_url"),
    )

    # Tried in this order: bearer token, API key, Keycloak client credentials
    api_token: str | None = None
    api_key: str | None = None
    api_secret: str | None = None

    keycloak_url: str = ""
    keycloak_realm: str = ""
    keycloak_client_id: str = ""
    keycloak_client_secret: str = ""

    organization_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ORGANIZATION_ID_PLACEHOLDER", "ORGANIZATION_ID", "organization_id"),
    )

    request_timeout: float = Field(
        default=30.0,
        validation_alias=AliasChoices("GRAPHQL_TIMEOUT", "request_timeout"),
    )


def get_settings() -> Settings:
    return Settings()
