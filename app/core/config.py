from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnkiConnectSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    url: str = Field(default="http://localhost:8765", alias="ANKI_CONNECT_URL")
    batch_size: int = Field(default=50, gt=0, alias="ANKI_BATCH_SIZE")
    timeout_ms: int = Field(default=10000, gt=0, alias="ANKI_TIMEOUT_MS")


class DeckSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    deck_name: str = Field(
        default="III-V::Terceiro-Ventriculo", alias="ANKI_DECK_NAME"
    )
    note_type: str = Field(default="FSRS-3V", alias="ANKI_NOTE_TYPE")
    tag_prefix: str = Field(default="3V", alias="ANKI_TAG_PREFIX")
    export_dir: str = Field(default="docs/planos/anki-export", alias="ANKI_EXPORT_DIR")


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    name: str = Field(default="anki-fsrs-export", alias="APP_NAME")
    version: str = Field(default="v1", alias="API_VERSION")
    port: int = Field(default=9000, alias="APP_PORT")
    mode: str = Field(default="prod", alias="MODE")

    @computed_field
    def is_production(self) -> bool:
        return self.mode != "dev"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=lambda: AppSettings())
    anki: AnkiConnectSettings = Field(default_factory=lambda: AnkiConnectSettings())
    deck: DeckSettings = Field(default_factory=lambda: DeckSettings())


settings = Settings()
