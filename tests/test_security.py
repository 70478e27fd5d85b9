from starlette.applications import Starlette
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from jot_search.security import HEALTH_PATH, SECRET_HEADER, build_security_middleware


async def _ok(request):
    return PlainTextResponse("ok")


def _client(secret):
    app = Starlette(
        routes=[Route("/mcp", _ok, methods=["GET", "POST"]), Route(HEALTH_PATH, _ok)],
        middleware=build_security_middleware(secret),
    )
    return TestClient(app)


def test_secret_required_when_configured():
    client = _client("super-secret")
    assert client.post("/mcp").status_code == 401
    assert client.post("/mcp", headers={SECRET_HEADER: "wrong"}).status_code == 401
    assert client.post("/mcp", headers={SECRET_HEADER: "super-secret"}).status_code == 200


def test_health_is_open():
    assert _client("super-secret").get(HEALTH_PATH).status_code == 200


def test_no_secret_means_open_access():
    assert len(build_security_middleware(None)) == 1
    assert _client(None).post("/mcp").status_code == 200
