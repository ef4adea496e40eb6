"""
End-to-end tests for do_rpc against raw TCP servers
"""

import asyncio

import pytest
from pydantic import ValidationError

from rpc_fetch import do_rpc, NetworkError, ServerError, TimeoutError, UserError, RpcErrorKind
from tests.tcp_fixture import (
    Stopwatch,
    http_response,
    read_socket,
    respond_with,
    with_tcp_server,
    write_socket,
)


@pytest.mark.asyncio
async def test_timeout():
    """Test a server that never answers hits the deadline"""

    async def handler(reader, writer):
        await asyncio.sleep(0.2)

    async with with_tcp_server(handler) as url:
        stopwatch = Stopwatch()
        with pytest.raises(TimeoutError) as exc_info:
            await do_rpc("GET", url, timeout_ms=100)
        elapsed = stopwatch.elapsed_ms()

    assert exc_info.value.kind is RpcErrorKind.TIMEOUT
    assert str(exc_info.value) == "Error talking to server.  Please try again."
    assert elapsed >= 100
    assert elapsed < 500


@pytest.mark.asyncio
async def test_disconnect():
    """Test a connection closed without any response"""

    async def handler(reader, writer):
        pass

    async with with_tcp_server(handler) as url:
        with pytest.raises(NetworkError) as exc_info:
            await do_rpc("GET", url)

    assert str(exc_info.value) == "Error connecting to server.  Please check your connection."


@pytest.mark.asyncio
async def test_connection_refused():
    """Test nothing listening on the port"""
    async with with_tcp_server(respond_with(b"")) as url:
        pass

    with pytest.raises(NetworkError):
        await do_rpc("GET", url)


@pytest.mark.asyncio
async def test_non_http_response():
    async with with_tcp_server(respond_with(b"non-http response")) as url:
        stopwatch = Stopwatch()
        with pytest.raises(NetworkError):
            await do_rpc("GET", url)
        assert stopwatch.elapsed_ms() < 100


@pytest.mark.asyncio
async def test_unterminated_head():
    """Test content-type header but the head never ends"""
    data = http_response("HTTP/1.1 200 OK", "content-type: application/json", "")
    async with with_tcp_server(respond_with(data)) as url:
        with pytest.raises(NetworkError):
            await do_rpc("GET", url)


@pytest.mark.asyncio
async def test_content_type_not_json():
    data = http_response(
        "HTTP/1.1 200 OK",
        "content-type: text/plain",
        "content-length: 1",
        "",
        "a",
    )
    async with with_tcp_server(respond_with(data)) as url:
        with pytest.raises(ServerError) as exc_info:
            await do_rpc("GET", url)

    assert str(exc_info.value) == (
        'Error talking to server: server response content-type is not json: "text/plain"'
    )
    assert exc_info.value.status is None


@pytest.mark.asyncio
async def test_response_truncated():
    data = http_response(
        "HTTP/1.1 200 OK",
        "content-type: application/json",
        "content-length: 10",
        "",
        '{"a',
    )
    async with with_tcp_server(respond_with(data)) as url:
        with pytest.raises(NetworkError):
            await do_rpc("GET", url)


@pytest.mark.asyncio
async def test_invalid_json():
    data = http_response(
        "HTTP/1.1 200 OK",
        "content-type: application/json",
        "content-length: 1",
        "",
        "$",
    )
    async with with_tcp_server(respond_with(data)) as url:
        with pytest.raises(ServerError) as exc_info:
            await do_rpc("GET", url)

    assert str(exc_info.value) == "Error talking to server: server returned malformed json data"


@pytest.mark.asyncio
async def test_json_but_not_object():
    data = http_response(
        "HTTP/1.1 200 OK",
        "content-type: application/json",
        "content-length: 1",
        "",
        "1",
    )
    async with with_tcp_server(respond_with(data)) as url:
        with pytest.raises(ServerError) as exc_info:
            await do_rpc("GET", url)

    assert str(exc_info.value) == "Error talking to server: server response is not a JSON object: 1"


@pytest.mark.asyncio
async def test_get():
    data = http_response(
        "HTTP/1.1 200 OK",
        "content-type: application/json; charset=utf-8",
        "content-length: 7",
        "",
        '{"a":1}',
    )
    async with with_tcp_server(respond_with(data)) as url:
        stopwatch = Stopwatch()
        assert await do_rpc("GET", url) == {"a": 1}
        assert stopwatch.elapsed_ms() < 100


@pytest.mark.asyncio
async def test_post_200_with_no_body():
    data = http_response("HTTP/1.1 200 OK", "content-length: 0", "", "")
    async with with_tcp_server(respond_with(data)) as url:
        assert await do_rpc("POST", url, {"a": 1}) == {}


@pytest.mark.asyncio
async def test_post_json():
    received = {}

    async def handler(reader, writer):
        received["request"] = await read_socket(reader, read_ms=100)
        await write_socket(
            writer,
            http_response(
                "HTTP/1.1 200 OK",
                "content-type: application/json",
                "content-length: 7",
                "",
                '{"a":1}',
            ),
        )

    async with with_tcp_server(handler) as url:
        assert await do_rpc("POST", url, {"a": 1}) == {"a": 1}

    request = received["request"]
    assert request.startswith("POST / HTTP/1.1\r\n")
    assert request.endswith('\r\n\r\n{"a":1}')
    assert "content-type: application/json" in request.lower()


@pytest.mark.asyncio
async def test_post_binary():
    received = {}

    async def handler(reader, writer):
        received["request"] = await read_socket(reader, read_ms=100)
        await write_socket(
            writer,
            http_response(
                "HTTP/1.1 200 OK",
                "content-type: application/json",
                "content-length: 2",
                "",
                "{}",
            ),
        )

    async with with_tcp_server(handler) as url:
        assert await do_rpc("POST", url, b"a1") == {}

    request = received["request"]
    assert request.endswith("\r\n\r\na1")
    assert "content-type" not in request.lower()


@pytest.mark.asyncio
async def test_caller_headers_are_sent():
    received = {}

    async def handler(reader, writer):
        received["request"] = await read_socket(reader, read_ms=100)
        await write_socket(writer, http_response("HTTP/1.1 204 No Content", "", ""))

    async with with_tcp_server(handler) as url:
        result = await do_rpc(
            "put",
            url,
            {"a": 1},
            headers={"X-Trace": "abc", "Content-Type": "application/merge-patch+json"},
        )

    assert result == {}
    request = received["request"]
    assert request.startswith("PUT / HTTP/1.1\r\n")
    assert "X-Trace: abc" in request
    assert "Content-Type: application/merge-patch+json" in request
    assert "application/json" not in request.lower()


@pytest.mark.asyncio
async def test_redirect_is_not_followed():
    data = http_response(
        "HTTP/1.1 302 Found",
        "location: http://127.0.0.1:9/elsewhere",
        "content-length: 0",
        "",
        "",
    )
    async with with_tcp_server(respond_with(data)) as url:
        with pytest.raises(NetworkError):
            await do_rpc("GET", url)


@pytest.mark.asyncio
async def test_error():
    async with with_tcp_server(respond_with(b"HTTP/1.1 400 Bad Request\r\n\r\n")) as url:
        with pytest.raises(ServerError) as exc_info:
            await do_rpc("GET", url)

    assert str(exc_info.value) == "Error talking to server: 400 Bad Request"
    assert exc_info.value.status == 400
    assert exc_info.value.is_400()


@pytest.mark.asyncio
async def test_error_with_truncated_text():
    data = http_response(
        "HTTP/1.1 400 Bad Request",
        "content-type: text/plain",
        "content-length: 4",
        "",
        "e",
    )
    async with with_tcp_server(respond_with(data)) as url:
        with pytest.raises(ServerError) as exc_info:
            await do_rpc("GET", url)

    assert str(exc_info.value) == "Error talking to server: 400 Bad Request"
    assert exc_info.value.status == 400


@pytest.mark.asyncio
async def test_error_with_text():
    data = http_response(
        "HTTP/1.1 400 Bad Request",
        "content-type: text/plain",
        "content-length: 4",
        "",
        "err1",
    )
    async with with_tcp_server(respond_with(data)) as url:
        with pytest.raises(ServerError) as exc_info:
            await do_rpc("GET", url)

    assert str(exc_info.value) == "Error talking to server: 400 Bad Request, err1"
    assert exc_info.value.status == 400


@pytest.mark.asyncio
async def test_error_with_malformed_json():
    data = http_response(
        "HTTP/1.1 400 Bad Request",
        "content-type: application/json",
        "content-length: 1",
        "",
        "{",
    )
    async with with_tcp_server(respond_with(data)) as url:
        with pytest.raises(ServerError) as exc_info:
            await do_rpc("GET", url)

    assert str(exc_info.value) == "Error talking to server: 400 Bad Request"


@pytest.mark.asyncio
async def test_error_with_non_object():
    data = http_response(
        "HTTP/1.1 500 Internal Server Error",
        "content-type: application/json",
        "content-length: 1",
        "",
        "1",
    )
    async with with_tcp_server(respond_with(data)) as url:
        with pytest.raises(ServerError) as exc_info:
            await do_rpc("GET", url)

    assert str(exc_info.value) == "Error talking to server: 500 Internal Server Error"
    assert exc_info.value.is_500()


@pytest.mark.asyncio
async def test_user_error_message():
    data = http_response(
        "HTTP/1.1 400 Bad Request",
        "content-type: application/json",
        "content-length: 29",
        "",
        '{"user_error_message":"err1"}',
    )
    async with with_tcp_server(respond_with(data)) as url:
        with pytest.raises(UserError) as exc_info:
            await do_rpc("GET", url)

    assert str(exc_info.value) == "err1"
    assert exc_info.value.status == 400
    assert exc_info.value.kind is RpcErrorKind.USER


@pytest.mark.asyncio
async def test_invalid_timeout_is_rejected_before_io():
    with pytest.raises(ValidationError):
        await do_rpc("GET", "http://127.0.0.1:9", timeout_ms=0)
