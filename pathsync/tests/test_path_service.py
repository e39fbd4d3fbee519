"""
Test the path service client: query encoding, response decoding and
failure mapping. The service is replaced by httpx.MockTransport.
"""

import asyncio
from urllib.parse import unquote

import httpx

from ..clients.path_service import PathServiceClient, decode_response, encode_query, format_number
from ..errors import MalformedResponse, PathServiceUnavailable
from ..models.geometry import Coordinate, Path, PathRequest

REQUEST = PathRequest(
    source=Coordinate.of(48.012653, 7.835194),
    target=Coordinate.of(48.011, 7.82),
    sequence=1,
)


def make_client(handler) -> PathServiceClient:
    return PathServiceClient(
        base_url="http://paths.test/",
        timeout=2.0,
        transport=httpx.MockTransport(handler),
    )


def test_format_number():
    """Test shortest positional number formatting."""
    print("\n=== Testing Number Formatting ===")

    assert format_number(48.011000) == "48.011"
    assert format_number(7.820000) == "7.82"
    assert format_number(48.012653) == "48.012653"
    assert format_number(48.0) == "48"
    assert format_number(-7.5) == "-7.5"
    assert format_number(0.00001) == "0.00001"

    print("✓ Numbers formatted without padding or exponents")


def test_encode_query():
    """Test the srcLat,srcLng,tgtLat,tgtLng query order."""
    print("\n=== Testing Query Encoding ===")

    assert encode_query(REQUEST) == "48.012653,7.835194,48.011,7.82"

    swapped = PathRequest(source=REQUEST.target, target=REQUEST.source)
    assert encode_query(swapped) == "48.011,7.82,48.012653,7.835194"

    client = make_client(lambda request: httpx.Response(200))
    assert client.build_url(REQUEST) == "http://paths.test/?48.012653,7.835194,48.011,7.82"

    print("✓ Query encodes both endpoints in order")


def test_decode_json_response():
    """Test decoding a plain JSON path object."""
    print("\n=== Testing JSON Decoding ===")

    response = decode_response('{"path": [48.012653, 7.835194, 48.011, 7.82]}')
    assert response.path == Path.from_flat([48.012653, 7.835194, 48.011, 7.82])

    # Longer paths keep their order
    response = decode_response('{"path": [1, 2, 3, 4, 5, 6]}')
    assert [p.as_tuple() for p in response.path.points] == [(1, 2), (3, 4), (5, 6)]

    print("✓ JSON responses decoded")


def test_decode_callback_response():
    """Test decoding the script-callback form used by older servers."""
    print("\n=== Testing Callback Decoding ===")

    legacy = "redrawLineServerCallback({ path: [48.012653, 7.835194, 48.010683, 7.81776] })"
    response = decode_response(legacy)
    assert response.path.start == Coordinate.of(48.012653, 7.835194)
    assert response.path.end == Coordinate.of(48.010683, 7.81776)

    quoted = 'cb({"path": [1.5, 2.5, 3.5, 4.5]});'
    assert decode_response(quoted).path.to_flat() == [1.5, 2.5, 3.5, 4.5]

    print("✓ Callback-wrapped responses decoded")


def test_decode_malformed_responses():
    """Test that unusable bodies raise MalformedResponse."""
    print("\n=== Testing Malformed Responses ===")

    bad_bodies = [
        "",
        "not json at all",
        "[48.0, 7.8, 48.1, 7.9]",
        '{"route": [48.0, 7.8, 48.1, 7.9]}',
        '{"path": "48.0,7.8,48.1,7.9"}',
        '{"path": [48.0, 7.8, 48.1]}',
        '{"path": [48.0, 7.8]}',
        '{"path": [48.0, "7.8", 48.1, 7.9]}',
        '{"path": [48.0, true, 48.1, 7.9]}',
        '{"path": [48.0, 7.8, null, 7.9]}',
        '{"path": [95.0, 7.8, 48.1, 7.9]}',
        "callback({ path: [48.0, 7.8, 48.1, ] }",
    ]
    for body in bad_bodies:
        try:
            decode_response(body)
        except MalformedResponse:
            pass
        else:
            raise AssertionError(f"{body!r} should be malformed")

    print("✓ Malformed responses rejected")


def test_decode_oversized_numbers():
    """Test that numbers a float cannot hold are malformed, not a crash."""
    print("\n=== Testing Oversized Numbers ===")

    huge = "9" * 400
    for body in (
        '{"path": [48, 7, 48, ' + huge + "]}",
        '{"path": [48, 7, -' + huge + ", 7]}",
        '{"path": [48, 7, NaN, 7.8]}',
        '{"path": [48, 7, 48.1, Infinity]}',
    ):
        try:
            decode_response(body)
        except MalformedResponse:
            pass
        else:
            raise AssertionError(f"{body[:40]!r}... should be malformed")

    print("✓ Oversized and non-finite numbers rejected")


def test_request_path_success():
    """Test a full request against a mocked service."""
    print("\n=== Testing request_path ===")

    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(unquote(request.url.query.decode()))
        return httpx.Response(200, json={"path": [48.012653, 7.835194, 48.011, 7.82]})

    async def run():
        async with make_client(handler) as client:
            return await client.request_path(REQUEST)

    response = asyncio.run(run())

    assert seen == ["48.012653,7.835194,48.011,7.82"]
    assert response.path == Path.from_flat([48.012653, 7.835194, 48.011, 7.82])

    print("✓ request_path returns the decoded path")


def test_request_path_transport_failures():
    """Test that connection errors, timeouts and error statuses map to PathServiceUnavailable."""
    print("\n=== Testing Transport Failures ===")

    def refused(request):
        raise httpx.ConnectError("Connection refused", request=request)

    def timeout(request):
        raise httpx.ReadTimeout("timed out", request=request)

    def server_error(request):
        return httpx.Response(500, text="internal error")

    async def run(handler):
        async with make_client(handler) as client:
            await client.request_path(REQUEST)

    for handler in (refused, timeout, server_error):
        try:
            asyncio.run(run(handler))
        except PathServiceUnavailable as e:
            assert "paths.test" in str(e)
        else:
            raise AssertionError(f"{handler.__name__} should raise PathServiceUnavailable")

    print("✓ Transport failures surfaced as PathServiceUnavailable")


def test_request_path_malformed_body():
    """Test that a 200 with a bad body raises MalformedResponse."""
    print("\n=== Testing Malformed Body ===")

    def handler(request):
        return httpx.Response(200, json={"status": "ok"})

    async def run():
        async with make_client(handler) as client:
            await client.request_path(REQUEST)

    try:
        asyncio.run(run())
    except MalformedResponse:
        pass
    else:
        raise AssertionError("Missing path field should raise MalformedResponse")

    print("✓ Malformed body surfaced as MalformedResponse")


def test_request_path_no_retry():
    """Test that a failed request is attempted exactly once."""
    print("\n=== Testing No Retry ===")

    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503)

    async def run():
        async with make_client(handler) as client:
            await client.request_path(REQUEST)

    try:
        asyncio.run(run())
    except PathServiceUnavailable:
        pass

    assert len(calls) == 1

    print("✓ Failed requests are not retried")


def test_connection_check():
    """Test the connectivity check."""
    print("\n=== Testing test_connection ===")

    def echo(request):
        values = [float(v) for v in unquote(request.url.query.decode()).split(",")]
        return httpx.Response(200, json={"path": values})

    def down(request):
        raise httpx.ConnectError("Connection refused", request=request)

    async def run(handler):
        async with make_client(handler) as client:
            return await client.test_connection()

    assert asyncio.run(run(echo)) is True
    assert asyncio.run(run(down)) is False

    print("✓ Connectivity check reports service state")


def run_all_tests():
    """Run all path service client tests."""
    print("\n" + "=" * 60)
    print("PATH SERVICE CLIENT - TEST SUITE")
    print("=" * 60)

    test_format_number()
    test_encode_query()
    test_decode_json_response()
    test_decode_callback_response()
    test_decode_malformed_responses()
    test_decode_oversized_numbers()
    test_request_path_success()
    test_request_path_transport_failures()
    test_request_path_malformed_body()
    test_request_path_no_retry()
    test_connection_check()

    print("\n" + "=" * 60)
    print("✅ ALL PATH SERVICE CLIENT TESTS PASSED!")
    print("=" * 60)


if __name__ == "__main__":
    run_all_tests()
