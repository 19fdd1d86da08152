# recipe_catalog/main.py
# FastAPI 앱 초기화 및 라우터 설정
# 실행: uvicorn recipe_catalog.main:app --host 0.0.0.0 --port 8080

from __future__ import annotations

import logging
from asyncio import sleep

from fastapi import FastAPI

from recipe_catalog.api.routes_graphql import router as graphql_router
from recipe_catalog.core.config import get_settings
from recipe_catalog.core.errors import AppError
from recipe_catalog.db.indexes import ensure_indexes
from recipe_catalog.db.init import close_db, get_db, get_recipes_collection, init_db

log = logging.getLogger(__name__)

app = FastAPI(title="Recipe Catalog - API", version="0.1.0")

# 앱 시작/종료 이벤트 핸들러
@app.on_event("startup")
async def on_startup() -> None:
    # MONGODB_URI 없으면 여기서 ValidationError → 서버 기동 중단
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # DB 먼저 붙는다 (MONGODB_CONNECT_RETRIES회, MONGODB_CONNECT_RETRY_DELAY초 간격)
    retries = max(settings.MONGODB_CONNECT_RETRIES, 1)
    for i in range(retries):
        try:
            await init_db()
            log.info("[startup] db ready (%s/%s)", settings.MONGODB_DB, settings.MONGODB_COLLECTION)
            break
        except Exception as e:
            log.warning("[startup] db init retry %d/%d: %s", i + 1, retries, e)
            if i + 1 < retries:
                await sleep(settings.MONGODB_CONNECT_RETRY_DELAY)
    else:
        # 초기 연결 실패는 치명적 → 트래픽 받지 않음
        raise RuntimeError(f"could not connect to MongoDB after {retries} attempts")

    # 인덱스 보장 (실패 시 경고만)
    try:
        await ensure_indexes(get_recipes_collection())
        log.info("[startup] indexes ensured")
    except AppError as e:
        log.warning("[startup] ensure_indexes failed: %s", e.cause)

@app.on_event("shutdown")
async def on_shutdown() -> None:
    # 몽고db 커넥션 정리
    await close_db()

@app.get("/health")
async def health():
    # 헬스체크 + MongoDB ping
    ok = {"status": "ok", "db": "ok"}
    try:
        await get_db().command("ping")
    except Exception as e:
        ok["db"] = f"error: {e}"
    return ok

app.include_router(graphql_router)
