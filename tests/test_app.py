import logging

from werkzeug.middleware.proxy_fix import ProxyFix

from expense_backend import SERVICE_NAME, create_app
from expense_backend.config import TestingConfig


class TestAppRoutes:

    def test_root_banner(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.get_json() == {"message": "Welcome to the Expense Tracker API"}

    def test_health(self, client):
        body = client.get("/api/health").get_json()
        assert body["status"] == "ok"
        assert body["time"].endswith("Z")

    def test_unknown_route_is_json(self, client):
        resp = client.get("/api/nope")
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "Not Found"

    def test_wrong_method_is_json(self, client):
        resp = client.patch("/api/expenses")
        assert resp.status_code == 405
        assert resp.get_json() == {"message": "Method Not Allowed"}


class TestCors:

    def test_allowed_origin(self, client):
        resp = client.get("/api/health", headers={"Origin": "http://localhost:5173"})
        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"

    def test_unlisted_origin(self, client):
        resp = client.get("/api/health", headers={"Origin": "https://evil.example.com"})
        assert "Access-Control-Allow-Origin" not in resp.headers

    def test_preflight_allows_authorization_header(self, client):
        resp = client.options(
            "/api/expenses",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Authorization",
            },
        )
        assert resp.status_code == 200
        assert "authorization" in resp.headers["Access-Control-Allow-Headers"].lower()

    def test_extra_origins_from_config(self):
        class ExtraOrigins(TestingConfig):
            CORS_ALLOWED_ORIGINS = "https://expenses.example.com, https://m.example.com"

        client = create_app(ExtraOrigins).test_client()
        resp = client.get("/api/health", headers={"Origin": "https://m.example.com"})
        assert resp.headers["Access-Control-Allow-Origin"] == "https://m.example.com"


class TestLogging:

    def _handlers(self):
        return [h for h in logging.getLogger().handlers if getattr(h, "_expense_backend", False)]

    def test_handler_added_once(self, app):
        create_app(TestingConfig)
        assert len(self._handlers()) == 1

    def test_lines_are_tagged_with_service(self, app):
        record = logging.LogRecord("expense_backend", logging.INFO, __file__, 1, "Stored image %s", ("k",), None)
        line = self._handlers()[0].formatter.format(record)
        assert f'"service":"{SERVICE_NAME}"' in line
        assert '"level":"INFO"' in line
        assert '"msg":"Stored image k"' in line


class TestProxyFix:

    def test_enabled_by_default(self, app):
        assert isinstance(app.wsgi_app, ProxyFix)
        assert app.wsgi_app.x_proto == 1

    def test_zero_hops_disables(self):
        class NoProxy(TestingConfig):
            PROXY_FIX_HOPS = 0

        assert not isinstance(create_app(NoProxy).wsgi_app, ProxyFix)
