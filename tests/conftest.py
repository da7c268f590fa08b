import json
import sys
from pathlib import Path
from urllib.parse import urlsplit

import pytest

# `src` importable depuis la racine du dépôt
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text
        self.content = text.encode("utf-8")

    def json(self):
        return json.loads(self.text)


class FakeHttp:
    """
    Remplace requests.Session : routes (méthode, chemin[?query]) -> réponse ou exception.
    Les appels sont enregistrés dans .calls.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, payload=None, status=200, text=None, exc=None):
        self.routes[(method, path)] = exc if exc is not None else FakeResponse(status, payload, text)
        return self

    def request(self, method, url, json=None, data=None, headers=None, timeout=None):
        parts = urlsplit(url)
        path = parts.path + (f"?{parts.query}" if parts.query else "")
        self.calls.append({"method": method, "path": path, "url": url, "json": json,
                           "data": data, "headers": headers or {}, "timeout": timeout})
        route = self.routes.get((method, path))
        if route is None:
            return FakeResponse(404, {"error": "not found"})
        if isinstance(route, Exception):
            raise route
        return route

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)

    def last(self, method, path):
        matches = [c for c in self.calls if c["method"] == method and c["path"] == path]
        return matches[-1] if matches else None


@pytest.fixture
def fake_http():
    return FakeHttp()


@pytest.fixture
def settings(tmp_path):
    from facturier.config import Settings

    return Settings(
        api_url="http://api.test",
        auth_url="http://auth.test",
        auth_key="anon-key",
        storage_url="http://storage.test",
        request_timeout=5,
        log_file="",
        output_dir=tmp_path / "out",
        preferences_path=tmp_path / "preferences.json",
        session_path=tmp_path / "session.json",
    )


@pytest.fixture
def ctx(settings, fake_http):
    from facturier.services.app_context import AppContext

    return AppContext(settings, http=fake_http)


@pytest.fixture
def signed_in_ctx(ctx):
    ctx.auth.session.start_session("tok-123", user_id="auth-1", email="marie@example.com")
    return ctx


@pytest.fixture
def sample_invoice():
    from facturier.models.invoice import Invoice

    return Invoice.from_dict({
        "id": "inv-1",
        "organization_id": "org-1",
        "type": "proforma",
        "vat_rate": 18,
        "invoice_number": "P-2024-001",
        "client_name": "Boulangerie Diallo",
        "client_address": "12 rue des Palmiers, Dakar",
        "items": [
            {"designation": "Pain de mie", "quantity": 3, "unit_price": 1000},
            {"designation": "Croissants", "quantity": 10, "unit_price": 250},
        ],
        "total_ht": 5500,
        "total_vat": 990,
        "total_ttc": 6490,
        "created_at": "2024-03-05T10:15:00",
    })


@pytest.fixture
def png_file(tmp_path):
    from PIL import Image

    path = tmp_path / "entete.png"
    Image.new("RGB", (200, 50), (41, 128, 185)).save(path, format="PNG")
    return path
