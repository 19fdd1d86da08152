# scripts/load_recipes.py
# 목적: JSON 소스 디렉터리로 레시피 컬렉션을 통째로 다시 채우는 일회성 로더
# 사용: python -m recipe_catalog.scripts.load_recipes [DATA_DIR]   (또는 load-recipes)
# - 기존 문서 전부 삭제 → 파일 경로 사전순으로 파일별 insert_many
# - 파일 간 트랜잭션 없음: 중간 실패 시 그때까지 처리한 파일만 남는다

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from bson.errors import BSONError
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from recipe_catalog.core.config import get_settings
from recipe_catalog.core.errors import AppError, DeserializationError
from recipe_catalog.db.indexes import ensure_indexes
from recipe_catalog.db.models.recipe import decode, encode

log = logging.getLogger(__name__)


def source_files(data_dir: Path) -> List[Path]:
    # *.json 만, 경로 사전순
    try:
        return sorted(p for p in data_dir.iterdir() if p.is_file() and p.suffix == ".json")
    except OSError as e:
        raise AppError.from_io(e) from e


def read_source(path: Path) -> List[Dict[str, Any]]:
    """파일 하나 = 레시피 문서 배열. decode 로 검증만 하고 원본 필드(추가 필드 포함)는 그대로 보존."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as e:
        raise AppError.from_io(e) from e
    if not isinstance(raw, list):
        raise AppError.from_io(ValueError(f"{path}: top-level value must be an array"))

    docs: List[Dict[str, Any]] = []
    for i, rec in enumerate(raw):
        try:
            recipe = decode(rec)
            docs.append({**rec, **encode(recipe)})
        except DeserializationError as e:
            raise AppError.from_decode(DeserializationError(f"{path}[{i}]: {e}")) from e
    return docs


async def load_directory(collection, data_dir: Path) -> int:
    # 파일 목록을 먼저 확인한 뒤에 비운다 (디렉터리 자체가 없으면 아무것도 지우지 않음)
    files = source_files(data_dir)
    try:
        deleted = await collection.delete_many({})
        log.info("dropped %s existing documents", getattr(deleted, "deleted_count", "?"))

        inserted = 0
        for path in files:
            docs = read_source(path)
            if not docs:
                log.info("%s: empty, skipped", path.name)
                continue
            await collection.insert_many(docs)
            inserted += len(docs)
            log.info("%s: inserted %d recipes", path.name, len(docs))
        return inserted
    except (PyMongoError, BSONError) as e:
        raise AppError.from_db(e) from e


async def dump_collection(collection) -> None:
    # 적재 결과 확인용 (debug 레벨)
    try:
        async for doc in collection.find({}):
            log.debug("%s", doc)
    except (PyMongoError, BSONError) as e:
        raise AppError.from_db(e) from e


async def main(data_dir: Optional[str] = None) -> int:
    settings = get_settings()
    client = AsyncIOMotorClient(settings.MONGODB_URI)
    collection = client[settings.MONGODB_DB][settings.MONGODB_COLLECTION]
    try:
        n = await load_directory(collection, Path(data_dir or settings.DATA_DIR))
        await ensure_indexes(collection)
        await dump_collection(collection)
    except AppError as e:
        log.error("load failed [%s]: %s (cause: %s)", e.kind.value, e.resolved_message, e.cause)
        return 1
    finally:
        client.close()

    log.info("[load] done, %d recipes in %s.%s", n, settings.MONGODB_DB, settings.MONGODB_COLLECTION)
    return 0


def run() -> None:
    parser = argparse.ArgumentParser(description="Wipe and reload the recipe collection from JSON files.")
    parser.add_argument("data_dir", nargs="?", default=None, help="directory of *.json files (default: DATA_DIR)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every stored document")
    args = parser.parse_args()

    # MONGODB_URI 없으면 get_settings()에서 ValidationError로 종료
    level = "DEBUG" if args.verbose else get_settings().LOG_LEVEL.upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    sys.exit(asyncio.run(main(args.data_dir)))


if __name__ == "__main__":
    run()
