from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENV: str = "dev"
    LOG_LEVEL: str = "DEBUG"
    DATA_CENTER_ID: int = 0
    WORKER_ID: int = 0
    REGION_ID: int = 0
    MACHINE_ID: int = 0
    SNOWFLAKE_EPOCH: int = 1288834974657

    class Config:
        env_file = ".env"


settings = Settings()
