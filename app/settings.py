from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Upstream (override via env)
    UPSTREAM_URL: str = "https://rickandmortyapi.com/api/character"
    UPSTREAM_PROBE_URL: str = "https://rickandmortyapi.com/api"
    FETCH_CAP: int = 250  # hard upper bound on loaded characters

    # In-process result cache
    RESULT_CACHE_MAX: int = 256


settings = Settings()
