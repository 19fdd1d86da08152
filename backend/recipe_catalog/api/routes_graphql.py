# recipe_catalog/api/routes_graphql.py
# 쿼리 엔드포인트: 요청 바디 역직렬화 → 쿼리 엔진 실행 → 결과 직렬화
# POST /graphql  : {"query": "...", "variables": {...}, "operationName": "..."}
# GET  /graphiql : 브라우저용 쿼리 콘솔 (정적 HTML)

from __future__ import annotations
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from recipe_catalog.core.config import get_settings
from recipe_catalog.db.init import get_recipes_collection
from recipe_catalog.services.query_engine import execute

router = APIRouter(tags=["graphql"])

GRAPHQL_PATH = "/graphql"


class GraphQLRequest(BaseModel):
    query: str
    variables: Optional[Dict[str, Any]] = None
    operationName: Optional[str] = None


def get_query_timeout() -> float:
    return get_settings().QUERY_TIMEOUT_SECONDS


@router.post(GRAPHQL_PATH)
async def graphql(
    body: GraphQLRequest,
    collection=Depends(get_recipes_collection),
    timeout: float = Depends(get_query_timeout),
) -> Dict[str, Any]:
    # 쿼리 레벨 에러도 200 + errors 배열로 응답
    return await execute(body.model_dump(), collection, timeout=timeout)


GRAPHIQL_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <title>Recipe Catalog - GraphiQL</title>
  <style>body {{ height: 100%; margin: 0; overflow: hidden; }} #graphiql {{ height: 100vh; }}</style>
  <link rel="stylesheet" href="https://unpkg.com/graphiql@3/graphiql.min.css" />
</head>
<body>
  <div id="graphiql">Loading...</div>
  <script crossorigin src="https://unpkg.com/react@18/umd/react.production.min.js"></script>
  <script crossorigin src="https://unpkg.com/react-dom@18/umd/react-dom.production.min.js"></script>
  <script crossorigin src="https://unpkg.com/graphiql@3/graphiql.min.js"></script>
  <script>
    const fetcher = GraphiQL.createFetcher({{ url: "{endpoint}" }});
    const defaultQuery = "{{\\n  apiVersion\\n  recipes {{\\n    title\\n    tags\\n  }}\\n}}\\n";
    ReactDOM.createRoot(document.getElementById("graphiql")).render(
      React.createElement(GraphiQL, {{ fetcher: fetcher, defaultQuery: defaultQuery }})
    );
  </script>
</body>
</html>
"""


@router.get("/graphiql", response_class=HTMLResponse)
async def graphiql() -> HTMLResponse:
    return HTMLResponse(GRAPHIQL_HTML.format(endpoint=GRAPHQL_PATH))
