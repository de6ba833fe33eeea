import asyncio
import time
from typing import Any, Dict

from neo4j import AsyncDriver, AsyncSession

from bolt_proxy.common.errors import ErrorCode, error_code_for, error_message_for
from bolt_proxy.common.logger import get_logger
from bolt_proxy.common.metrics import record_query
from bolt_proxy.models.query import DataRow, QueryRequest, QueryResponse, ResultSet
from bolt_proxy.serialization import serialize

logger = get_logger("query")


class QueryService:
    def __init__(self, driver: AsyncDriver, database: str, timeout: float = 30.0):
        self.driver = driver
        self.database = database
        self.timeout = timeout

    async def execute_query(self, request: QueryRequest) -> QueryResponse:
        """Runs one Cypher statement in a fresh session and shapes the envelope.

        Never raises: driver failures come back as an error envelope. The
        session is closed on every path.
        """
        if not request.cypher:
            return QueryResponse.failure(ErrorCode.MISSING_CYPHER.value, "Missing 'cypher' in body.")

        started = time.perf_counter()
        session = self.driver.session(database=self.database)
        try:
            result_set = await asyncio.wait_for(
                self._run(session, request.cypher, request.params or {}),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Neo4j run timed out after {self.timeout}s")
            response = QueryResponse.failure(
                ErrorCode.QUERY_TIMEOUT.value, f"Query did not complete within {self.timeout}s"
            )
        except Exception as exc:
            code = error_code_for(exc)
            logger.exception(f"Neo4j run error: {exc}", extra={"error_code": code})
            response = QueryResponse.failure(code, error_message_for(exc))
        else:
            response = QueryResponse(results=[result_set], errors=[])
        finally:
            await self._release(session)

        record_query(time.perf_counter() - started, "ok" if response.ok else "error")
        return response

    async def _run(self, session: AsyncSession, cypher: str, params: Dict[str, Any]) -> ResultSet:
        result = await session.run(cypher, params)
        records = [record async for record in result]

        columns = list(records[0].keys()) if records else []
        data = [
            DataRow(row=[serialize(record.get(key)) for key in columns])
            for record in records
        ]
        return ResultSet(columns=columns, data=data)

    async def _release(self, session: AsyncSession) -> None:
        # A failing close must not replace the response already computed.
        try:
            await session.close()
        except Exception as exc:
            logger.warning(f"Failed to close Neo4j session: {exc}")
