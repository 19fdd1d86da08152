# recipe_catalog/services/query_engine.py
# 쿼리 엔진: 고정된 쿼리 집합(apiVersion / recipes / recipe(title))을 스토어에 대해 해석
# - 상태 없음: 컬렉션 핸들은 요청마다 인자로 받는다 (읽기 전용)
# - 드라이버/역직렬화 에러는 전부 AppError로 변환해서 내보낸다

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from bson.errors import BSONError
from pymongo.errors import PyMongoError

from recipe_catalog.core.errors import AppError, DeserializationError
from recipe_catalog.db.models.recipe import Recipe, decode
from recipe_catalog.services.query_parser import (
    Field,
    Operation,
    QuerySyntaxError,
    Variable,
    parse_document,
    select_operation,
)

log = logging.getLogger(__name__)

API_VERSION = "0.1"

# ------------------------------
# 스키마 (닫힌 집합)
# ------------------------------

# 타입명 → {필드명: 하위 객체 타입명 | None(스칼라)}
OBJECT_TYPES: Dict[str, Dict[str, Optional[str]]] = {
    "Recipe": {
        "title": None,
        "ingredients": "Ingredient",
        "instructions": None,
        "tags": None,
        "media": "MediaRef",
    },
    "Ingredient": {"name": None, "qty": None},
    "MediaRef": {"anchor": None, "url": None},
}

# 루트 필드명 → (반환 객체 타입명 | None, 필수 인자)
QUERY_FIELDS: Dict[str, Tuple[Optional[str], Tuple[str, ...]]] = {
    "apiVersion": (None, ()),
    "recipes": ("Recipe", ()),
    "recipe": ("Recipe", ("title",)),
}

TYPENAME = "__typename"

# 인자는 전부 String! 이라 변수 선언도 String 계열만 허용
STRING_TYPES = ("String", "String!")


# ------------------------------
# 리졸버
# ------------------------------

def api_version() -> str:
    # 순수 상수. 스토어 상태와 무관
    return API_VERSION


async def list_recipes(collection, timeout: Optional[float] = None) -> List[Recipe]:
    """
    컬렉션 전체를 스토어의 자연 순서대로 읽어 Recipe 목록으로 반환.
    문서 하나라도 역직렬화에 실패하면 전체 실패 (부분 목록 없음).
    """
    async def _scan() -> List[Recipe]:
        out: List[Recipe] = []
        async for doc in collection.find({}):
            out.append(decode(doc))
        return out

    try:
        return await asyncio.wait_for(_scan(), timeout)
    except DeserializationError as e:
        raise AppError.from_decode(e) from e
    except asyncio.TimeoutError as e:
        raise AppError.from_db(TimeoutError(f"recipes scan timed out after {timeout}s")) from e
    except (PyMongoError, BSONError) as e:
        raise AppError.from_db(e) from e


async def get_recipe(collection, title: str, timeout: Optional[float] = None) -> Recipe:
    """
    title 완전 일치 조회. 같은 제목이 여럿이면 드라이버가 먼저 돌려준 문서(순서 미정).
    """
    log.info("going to search for a recipe titled %s", title)
    try:
        doc = await asyncio.wait_for(collection.find_one({"title": title}), timeout)
    except asyncio.TimeoutError as e:
        raise AppError.from_db(TimeoutError(f"lookup of {title!r} timed out after {timeout}s")) from e
    except (PyMongoError, BSONError) as e:
        raise AppError.from_db(e) from e

    if doc is None:
        raise AppError.not_found(cause=f"no recipe titled {title!r}")

    try:
        return decode(doc)
    except DeserializationError as e:
        raise AppError.from_decode(e) from e


# ------------------------------
# 검증
# ------------------------------

def _check_response_keys(fields: List[Field], parent: str) -> None:
    # 같은 응답 키는 같은 필드(이름/인자/하위 selection 동일)일 때만 허용
    seen: Dict[str, Field] = {}
    for f in fields:
        prev = seen.setdefault(f.response_key, f)
        if prev is f:
            continue
        if (prev.name, prev.arguments, prev.selections) != (f.name, f.arguments, f.selections):
            raise AppError.invalid_field(
                f"Fields '{f.response_key}' on type {parent} conflict; use different aliases"
            )


def _validate_selection(fields: List[Field], type_name: str) -> None:
    known = OBJECT_TYPES[type_name]
    _check_response_keys(fields, type_name)
    for f in fields:
        if f.arguments:
            raise AppError.invalid_field(f"Unknown argument on field {type_name}.{f.name}")
        if f.name == TYPENAME:
            if f.selections:
                raise AppError.invalid_field(f"Field {TYPENAME} must not have a selection")
            continue
        if f.name not in known:
            raise AppError.invalid_field(f"Unknown field '{f.name}' on type {type_name}")
        _validate_subselection(f, type_name, known[f.name])


def _validate_subselection(f: Field, parent: str, child_type: Optional[str]) -> None:
    if child_type is None:
        if f.selections:
            raise AppError.invalid_field(f"Field {parent}.{f.name} is a scalar and must not have a selection")
        return
    if not f.selections:
        raise AppError.invalid_field(f"Field {parent}.{f.name} of type {child_type} must have a selection of subfields")
    _validate_selection(f.selections, child_type)


def _validate_operation(op: Operation) -> None:
    _check_response_keys(op.selections, "Query")
    for f in op.selections:
        if f.name == TYPENAME:
            if f.selections or f.arguments:
                raise AppError.invalid_field(f"Field {TYPENAME} takes no arguments or selection")
            continue
        if f.name not in QUERY_FIELDS:
            raise AppError.invalid_field(f"Unknown field '{f.name}' on type Query")
        child_type, required = QUERY_FIELDS[f.name]
        for arg in f.arguments:
            if arg not in required:
                raise AppError.invalid_field(f"Unknown argument '{arg}' on field Query.{f.name}")
        for arg in required:
            if arg not in f.arguments:
                raise AppError.invalid_field(f"Field Query.{f.name} requires argument '{arg}'")
        _validate_subselection(f, "Query", child_type)


def _bind_arguments(f: Field, op: Operation, variables: Mapping[str, Any]) -> Dict[str, str]:
    bound: Dict[str, str] = {}
    for arg, value in f.arguments.items():
        if isinstance(value, Variable):
            if value.name not in op.variables:
                raise AppError.invalid_field(f"Variable '${value.name}' is not defined")
            declared = op.variable_types.get(value.name)
            if declared not in STRING_TYPES:
                raise AppError.invalid_field(
                    f"Variable '${value.name}' of type {declared} cannot be used where String! is expected"
                )
            resolved = variables.get(value.name, op.variables[value.name])
            if resolved is None:
                raise AppError.invalid_field(f"Variable '${value.name}' of required type was not provided")
            if not isinstance(resolved, str):
                raise AppError.invalid_field(f"Variable '${value.name}' must be a String")
            value = resolved
        bound[arg] = value
    return bound


# ------------------------------
# 실행
# ------------------------------

def _project(obj: Any, fields: List[Field], type_name: str) -> Dict[str, Any]:
    # 요청된 필드만 골라 dict로 (하위 객체 목록은 재귀)
    out: Dict[str, Any] = {}
    for f in fields:
        if f.name == TYPENAME:
            out[f.response_key] = type_name
            continue
        child_type = OBJECT_TYPES[type_name][f.name]
        value = getattr(obj, f.name)
        if child_type is None:
            out[f.response_key] = list(value) if isinstance(value, list) else value
        else:
            out[f.response_key] = [_project(v, f.selections, child_type) for v in value]
    return out


async def _resolve(f: Field, args: Dict[str, str], collection, timeout: Optional[float]) -> Any:
    if f.name == TYPENAME:
        return "Query"
    if f.name == "apiVersion":
        return api_version()
    if f.name == "recipes":
        recipes = await list_recipes(collection, timeout)
        return [_project(r, f.selections, "Recipe") for r in recipes]
    # recipe(title)
    recipe = await get_recipe(collection, args["title"], timeout)
    return _project(recipe, f.selections, "Recipe")


async def _resolve_field(
    f: Field, args: Dict[str, str], collection, timeout: Optional[float]
) -> Tuple[Field, Any, Optional[AppError]]:
    try:
        return f, await _resolve(f, args, collection, timeout), None
    except AppError as e:
        log.warning("%s while resolving %s: %s", e.kind.value, f.response_key, e.cause or e.resolved_message)
        return f, None, e


def _error_response(err: AppError, path: Optional[str] = None) -> Dict[str, Any]:
    body = err.to_dict()
    if path is not None:
        body["path"] = [path]
    return body


async def execute(request: Mapping[str, Any], collection, timeout: Optional[float] = None) -> Dict[str, Any]:
    """
    쿼리 요청 {"query", "variables", "operationName"} 실행.
    - 성공: {"data": {...}}
    - 하나라도 실패: {"data": None, "errors": [...]} (부분 Recipe 데이터 없음)
    """
    try:
        try:
            op = select_operation(parse_document(request.get("query") or ""), request.get("operationName"))
        except QuerySyntaxError as e:
            raise AppError.invalid_field(str(e), cause=str(e)) from e
        _validate_operation(op)
        variables = request.get("variables") or {}
        if not isinstance(variables, Mapping):
            raise AppError.invalid_field("Variables must be an object")
        bound = [_bind_arguments(f, op, variables) for f in op.selections]
    except AppError as e:
        log.warning("rejected query document: %s", e.resolved_message)
        return {"data": None, "errors": [_error_response(e)]}

    # 루트 필드는 서로 독립 → 동시에 해석
    results = await asyncio.gather(
        *(_resolve_field(f, args, collection, timeout) for f, args in zip(op.selections, bound))
    )

    errors = [_error_response(err, f.response_key) for f, _, err in results if err is not None]
    if errors:
        return {"data": None, "errors": errors}
    return {"data": {f.response_key: value for f, value, _ in results}}
