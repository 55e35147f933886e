from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "CigarConsensus"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite:///./cigar_consensus.db"

    rating_min: float = 0.0
    rating_max: float = 100.0

    top_n_default: int = 5
    top_n_flavor_profile: int = 10

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False


settings = Settings()
