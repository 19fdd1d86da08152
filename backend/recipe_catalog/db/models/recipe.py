# 레시피 표준 스키마 + 문서 <-> 모델 변환
# 스토어 문서의 추가 필드(_id 등)는 무시, 필수 필드 누락/형태 불일치는 DeserializationError
from typing import Any, Dict, List, Mapping

from pydantic import BaseModel, ValidationError

from recipe_catalog.core.errors import DeserializationError


class Ingredient(BaseModel):
    # 재료 하나 (수량은 자유 텍스트, 단위 파싱 없음)
    name: str
    qty: str


class MediaRef(BaseModel):
    # 레시피 내 미디어 참조 (anchor: 단계 라벨 등)
    anchor: str
    url: str


class Recipe(BaseModel):
    title: str
    ingredients: List[Ingredient]
    instructions: List[str]   # 순서 의미 있음
    tags: List[str]
    media: List[MediaRef]


def decode(document: Mapping[str, Any]) -> Recipe:
    try:
        return Recipe.model_validate(dict(document))
    except (ValidationError, TypeError, ValueError) as e:
        raise DeserializationError(str(e)) from e


def encode(recipe: Recipe) -> Dict[str, Any]:
    return recipe.model_dump()
