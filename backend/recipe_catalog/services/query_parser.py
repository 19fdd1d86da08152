# recipe_catalog/services/query_parser.py
# 쿼리 문서 파서: apiVersion / recipes / recipe(title) 에 필요한 최소 문법만 지원
# - query 키워드 + 오퍼레이션 이름(선택), 변수 정의($title: String!)
# - 필드 alias, 문자열 인자(리터럴 또는 $변수), 중첩 selection
# - 주석(#)과 콤마는 무시. fragment/directive 등은 문법 에러

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union


class QuerySyntaxError(ValueError):
    pass


@dataclass(frozen=True)
class Variable:
    name: str


Value = Union[str, Variable]


@dataclass
class Field:
    name: str
    alias: Optional[str] = None
    arguments: Dict[str, Value] = field(default_factory=dict)
    selections: List["Field"] = field(default_factory=list)

    @property
    def response_key(self) -> str:
        return self.alias or self.name


@dataclass
class Operation:
    name: Optional[str]
    selections: List[Field]
    # 변수 이름 → 기본값 (없으면 None)
    variables: Dict[str, Optional[str]] = field(default_factory=dict)
    # 변수 이름 → 선언 타입 (예: "String!")
    variable_types: Dict[str, str] = field(default_factory=dict)


_TOKEN_RE = re.compile(
    r"""
    (?P<skip>[\s,]+|\#[^\n\r]*)
    |(?P<string>"(?:[^"\\\n\r]|\\.)*")
    |(?P<name>[_A-Za-z][_0-9A-Za-z]*)
    |(?P<punct>[{}():!$=\[\]])
    """,
    re.VERBOSE,
)

Token = Tuple[str, str, int]  # (kind, text, offset)


def _tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if not m:
            raise QuerySyntaxError(f"Syntax Error: Unexpected character {text[pos]!r} at offset {pos}")
        kind = m.lastgroup or "skip"
        if kind != "skip":
            tokens.append((kind, m.group(), pos))
        pos = m.end()
    tokens.append(("eof", "", pos))
    return tokens


class _Parser:
    def __init__(self, text: str) -> None:
        self.tokens = _tokenize(text)
        self.i = 0

    # --- 토큰 헬퍼 ---------------------------------------------------------------

    def peek(self) -> Token:
        return self.tokens[self.i]

    def advance(self) -> Token:
        tok = self.tokens[self.i]
        self.i += 1
        return tok

    def at(self, kind: str, text: Optional[str] = None) -> bool:
        k, t, _ = self.peek()
        return k == kind and (text is None or t == text)

    def expect(self, kind: str, text: Optional[str] = None) -> str:
        if not self.at(kind, text):
            k, t, pos = self.peek()
            want = repr(text) if text else kind
            found = "<EOF>" if k == "eof" else repr(t)
            raise QuerySyntaxError(f"Syntax Error: Expected {want}, found {found} at offset {pos}")
        return self.advance()[1]

    # --- 문법 --------------------------------------------------------------------

    def document(self) -> List[Operation]:
        ops: List[Operation] = []
        while not self.at("eof"):
            ops.append(self.operation())
        if not ops:
            raise QuerySyntaxError("Syntax Error: Unexpected <EOF>")
        return ops

    def operation(self) -> Operation:
        if self.at("punct", "{"):
            return Operation(name=None, selections=self.selection_set())

        keyword = self.expect("name")
        if keyword != "query":
            raise QuerySyntaxError(f"Syntax Error: Unsupported operation type {keyword!r}")
        name = self.advance()[1] if self.at("name") else None
        variables, types = self.variable_definitions() if self.at("punct", "(") else ({}, {})
        return Operation(name=name, selections=self.selection_set(), variables=variables, variable_types=types)

    def variable_definitions(self) -> Tuple[Dict[str, Optional[str]], Dict[str, str]]:
        defs: Dict[str, Optional[str]] = {}
        types: Dict[str, str] = {}
        self.expect("punct", "(")
        while not self.at("punct", ")"):
            self.expect("punct", "$")
            var = self.expect("name")
            if var in defs:
                raise QuerySyntaxError(f"Syntax Error: Duplicate variable ${var}")
            self.expect("punct", ":")
            types[var] = self.type_ref()
            default = None
            if self.at("punct", "="):
                self.advance()
                default = self.string()
            defs[var] = default
        self.advance()
        if not defs:
            raise QuerySyntaxError("Syntax Error: Empty variable definition list")
        return defs, types

    def type_ref(self) -> str:
        # 선언된 타입을 문자열로 (예: "String!", "[String]"). 검사는 엔진에서
        if self.at("punct", "["):
            self.advance()
            text = f"[{self.type_ref()}]"
            self.expect("punct", "]")
        else:
            text = self.expect("name")
        if self.at("punct", "!"):
            self.advance()
            text += "!"
        return text

    def selection_set(self) -> List[Field]:
        self.expect("punct", "{")
        fields: List[Field] = []
        while not self.at("punct", "}"):
            fields.append(self.field())
        self.advance()
        if not fields:
            raise QuerySyntaxError("Syntax Error: Empty selection set")
        return fields

    def field(self) -> Field:
        name = self.expect("name")
        alias = None
        if self.at("punct", ":"):
            self.advance()
            alias, name = name, self.expect("name")
        arguments = self.arguments() if self.at("punct", "(") else {}
        selections = self.selection_set() if self.at("punct", "{") else []
        return Field(name=name, alias=alias, arguments=arguments, selections=selections)

    def arguments(self) -> Dict[str, Value]:
        args: Dict[str, Value] = {}
        self.expect("punct", "(")
        while not self.at("punct", ")"):
            arg = self.expect("name")
            if arg in args:
                raise QuerySyntaxError(f"Syntax Error: Duplicate argument {arg!r}")
            self.expect("punct", ":")
            if self.at("punct", "$"):
                self.advance()
                args[arg] = Variable(self.expect("name"))
            else:
                args[arg] = self.string()
        self.advance()
        if not args:
            raise QuerySyntaxError("Syntax Error: Empty argument list")
        return args

    def string(self) -> str:
        raw = self.expect("string")
        try:
            return json.loads(raw)
        except ValueError as e:
            raise QuerySyntaxError(f"Syntax Error: Invalid string literal {raw}") from e


def parse_document(text: str) -> List[Operation]:
    return _Parser(text).document()


def select_operation(ops: List[Operation], operation_name: Optional[str] = None) -> Operation:
    """여러 오퍼레이션이 있으면 operationName으로 하나를 고른다."""
    if operation_name:
        for op in ops:
            if op.name == operation_name:
                return op
        raise QuerySyntaxError(f"Unknown operation named {operation_name!r}")
    if len(ops) > 1:
        raise QuerySyntaxError("Must provide operation name if query contains multiple operations")
    return ops[0]
