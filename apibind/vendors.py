from starlette.requests import Request as Request
from starlette.responses import Response as Response
from starlette.routing import Route as Route

try:
    from starlette.testclient import TestClient as TestClient
except (ImportError, RuntimeError):
    pass
