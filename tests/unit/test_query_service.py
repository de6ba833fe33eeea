import asyncio

from bolt_proxy.models.query import QueryRequest
from bolt_proxy.services.query import QueryService


class CypherSyntaxError(Exception):
    code = "Neo.ClientError.Statement.SyntaxError"
    message = "Invalid input 'MATC'"


def _run(service, **payload):
    return asyncio.run(service.execute_query(QueryRequest(**payload)))


def test_missing_cypher_never_opens_a_session(fake_driver):
    # Validates input rejection because invalid requests must not reach the database.
    service = QueryService(fake_driver, database="movies")

    response = _run(service)

    assert response.results == []
    assert response.errors[0].code == "MissingCypher"
    assert fake_driver.sessions == []


def test_empty_cypher_is_rejected(fake_driver):
    service = QueryService(fake_driver, database="movies")

    response = _run(service, cypher="")

    assert not response.ok
    assert fake_driver.sessions == []


def test_zero_records_yield_empty_columns_and_data(fake_driver):
    service = QueryService(fake_driver, database="movies")

    response = _run(service, cypher="MATCH (n:Nothing) RETURN n")

    assert response.errors == []
    assert response.results[0].columns == []
    assert response.results[0].data == []


def test_rows_align_with_first_record_columns(fake_driver):
    fake_driver.records = [
        {"a": 1, "b": "x"},
        {"a": 2 ** 60, "b": None},
        {"a": 3, "b": [1, 2]},
    ]
    service = QueryService(fake_driver, database="movies")

    response = _run(service, cypher="UNWIND $rows AS r RETURN r.a AS a, r.b AS b")

    result = response.results[0]
    assert result.columns == ["a", "b"]
    assert len(result.data) == 3
    assert [len(entry.row) for entry in result.data] == [2, 2, 2]
    assert result.data[1].row == [str(2 ** 60), None]


def test_session_uses_configured_database_and_params(fake_driver):
    service = QueryService(fake_driver, database="movies")

    _run(service, cypher="RETURN $x", params={"x": 1})
    _run(service, cypher="RETURN 1", params=None)

    assert [s.database for s in fake_driver.sessions] == ["movies", "movies"]
    assert fake_driver.sessions[0].calls == [("RETURN $x", {"x": 1})]
    assert fake_driver.sessions[1].calls == [("RETURN 1", {})]


def test_driver_error_code_and_message_are_forwarded(fake_driver):
    fake_driver.run_error = CypherSyntaxError()
    service = QueryService(fake_driver, database="movies")

    response = _run(service, cypher="MATC (n) RETURN n")

    assert response.results == []
    assert response.errors[0].code == "Neo.ClientError.Statement.SyntaxError"
    assert response.errors[0].message == "Invalid input 'MATC'"


def test_errors_without_code_fall_back_to_query_error(fake_driver):
    fake_driver.run_error = RuntimeError("connection reset")
    service = QueryService(fake_driver, database="movies")

    response = _run(service, cypher="RETURN 1")

    assert response.errors[0].code == "QueryError"
    assert response.errors[0].message == "connection reset"


def test_session_closed_on_success_and_failure(fake_driver):
    service = QueryService(fake_driver, database="movies")
    _run(service, cypher="RETURN 1")
    fake_driver.run_error = RuntimeError("boom")
    _run(service, cypher="RETURN 1")

    for session in fake_driver.sessions:
        session.close.assert_awaited_once()


def test_close_failure_does_not_mask_result(fake_driver):
    fake_driver.records = [{"n": 1}]
    fake_driver.close_error = RuntimeError("socket already closed")
    service = QueryService(fake_driver, database="movies")

    response = _run(service, cypher="RETURN 1 AS n")

    assert response.ok
    assert response.results[0].data[0].row == [1]


def test_slow_query_reports_timeout(fake_driver):
    service = QueryService(fake_driver, database="movies", timeout=0.05)

    async def slow_run(cypher, params):
        await asyncio.sleep(30)

    original_session = fake_driver.session

    def session(database=None):
        s = original_session(database)
        s.run = slow_run
        return s

    fake_driver.session = session

    response = _run(service, cypher="CALL apoc.util.sleep(60000)")

    assert response.errors[0].code == "QueryTimeout"
    fake_driver.sessions[0].close.assert_awaited_once()
