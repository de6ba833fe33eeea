from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List


class QueryRequest(BaseModel):
    cypher: Optional[str] = None
    params: Optional[Dict[str, Any]] = None


class DataRow(BaseModel):
    row: List[Any]


class ResultSet(BaseModel):
    columns: List[str] = Field(default_factory=list)
    data: List[DataRow] = Field(default_factory=list)


class QueryError(BaseModel):
    code: str
    message: str


class QueryResponse(BaseModel):
    """Envelope shaped like the Neo4j HTTP transactional API."""
    results: List[ResultSet] = Field(default_factory=list)
    errors: List[QueryError] = Field(default_factory=list)

    @classmethod
    def failure(cls, code: str, message: str) -> "QueryResponse":
        return cls(results=[], errors=[QueryError(code=code, message=message)])

    @property
    def ok(self) -> bool:
        return not self.errors
