# recipe_catalog/core/config.py
# 환경변수 로딩 (.env)
# MONGODB_URI는 필수. 없으면 get_settings()에서 ValidationError → 기동 중단

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    MONGODB_URI: str
    MONGODB_DB: str = "recipedb"
    MONGODB_COLLECTION: str = "recipes"

    # 기동 시 DB ping 재시도 (횟수, 간격 초)
    MONGODB_CONNECT_RETRIES: int = 20
    MONGODB_CONNECT_RETRY_DELAY: float = 1.0

    # find/find_one 1회 왕복 타임아웃(초)
    QUERY_TIMEOUT_SECONDS: float = 10.0

    DATA_DIR: str = "./data"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
