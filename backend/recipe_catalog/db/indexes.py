# recipe_catalog/db/indexes.py
# 컬렉션 인덱스 생성
# 앱 스타트업/로더에서 ensure_indexes()를 await로 호출한다.

from pymongo.errors import PyMongoError

from recipe_catalog.core.errors import AppError

# recipe(title) 완전 일치 조회용. 제목 유일성은 강제하지 않음 (unique 아님)
TITLE_INDEX = "title_1"

async def ensure_indexes(collection) -> None:
    try:
        await collection.create_index([("title", 1)], name=TITLE_INDEX)
    except PyMongoError as e:
        raise AppError.from_db(e) from e
