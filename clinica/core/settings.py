from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict


class Env(str, Enum):
    DEV = "dev"
    HML = "hml"
    PROD = "prod"


class Settings(BaseSettings):
    APP_ENV: Env = Env.DEV
    DEBUG: bool = False

    JWT_SECRET: str = "change-me"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15

    DATABASE_URL: str

    ALLOWED_HOSTS: str = "localhost,127.0.0.1"

    # "hoje" e o mês corrente da clínica são calculados nesta TZ
    CLINIC_TZ: str = "America/Sao_Paulo"

    LOG_JSON: bool = True
    LOG_LEVEL: str = "INFO"

    # carga inicial da agenda do admin (datas mais recentes primeiro)
    AGENDA_LOAD_LIMIT: int = 500

    model_config = SettingsConfigDict(
        env_file=".env.dev",
        env_file_encoding="utf-8",
        ser_json_timedelta="iso8601",
        ser_json_tz="utc",
    )


# cria instância global
settings = Settings()
