import pytest
import requests

from facturier.api.admin_api import AdminApi, clean_organization_data
from facturier.api.auth_client import SIGNED_IN, SIGNED_OUT, AuthClient
from facturier.api.http_client import ApiClient
from facturier.api.invoices_api import InvoicesApi
from facturier.api.organizations_api import OrganizationsApi
from facturier.api.storage_client import StorageClient, header_object_path
from facturier.models.errors import AuthError, NetworkError, ValidationError
from facturier.models.invoice import Invoice, InvoiceItem
from facturier.models.session import AuthSession


@pytest.fixture
def client(fake_http):
    return ApiClient("http://api.test/", token_provider=lambda: "tok-123", timeout=5, http=fake_http)


def test_bearer_token_sent_on_every_call(client, fake_http):
    fake_http.add("GET", "/invoices", payload=[])
    assert InvoicesApi(client).list_invoices() == []
    call = fake_http.last("GET", "/invoices")
    assert call["headers"]["Authorization"] == "Bearer tok-123"
    assert call["timeout"] == 5


@pytest.mark.parametrize("status", [401, 403])
def test_unauthorized_maps_to_auth_error(client, fake_http, status):
    fake_http.add("GET", "/invoices", status=status, payload={"error": "no"})
    with pytest.raises(AuthError):
        client.get("/invoices")


def test_server_error_keeps_status(client, fake_http):
    fake_http.add("DELETE", "/invoices/inv-9", status=500, payload={"error": "boom"})
    with pytest.raises(NetworkError) as exc:
        InvoicesApi(client).delete_invoice("inv-9")
    assert exc.value.status_code == 500
    assert exc.value.message == "Erreur lors de la suppression de la facture"


def test_connection_errors_and_bad_json(client, fake_http):
    fake_http.add("GET", "/organizations", exc=requests.exceptions.ConnectionError("refused"))
    with pytest.raises(NetworkError):
        OrganizationsApi(client).get_user_organizations()

    fake_http.add("GET", "/organizations", text="<html>oops</html>")
    with pytest.raises(NetworkError):
        OrganizationsApi(client).get_user_organizations()


def test_create_invoice_payload(client, fake_http):
    fake_http.add("POST", "/invoices", status=201, payload={
        "id": "inv-1", "organization_id": "org-1", "type": "definitive", "vat_rate": 18,
        "invoice_number": "F-0001", "items": [{"designation": "Widget", "quantity": 3, "unit_price": 1000}],
        "total_ht": 3000, "total_vat": 540, "total_ttc": 3540,
    })
    invoice = Invoice(organization_id="org-1", vat_rate=18, items=[InvoiceItem("Widget", 3, 1000)])
    created = InvoicesApi(client).create_invoice(invoice)

    body = fake_http.last("POST", "/invoices")["json"]
    assert body["items"] == [{"designation": "Widget", "quantity": 3, "unit_price": 1000}]
    assert "labor_cost" not in body
    assert created.invoice_number == "F-0001"
    assert created.total_ttc == 3540


def test_organization_settings_and_current_user(client, fake_http):
    fake_http.add("GET", "/organizations/org-1/settings", payload={
        "organization_id": "org-1", "logo_url": "https://cdn.test/h.png",
        "header_height": "80", "header_width": 50, "header_position": "right", "unknown": 1,
    })
    fake_http.add("GET", "/auth/me", payload={"id": "u1", "email": "a@b.c", "is_admin": True})
    api = OrganizationsApi(client)

    settings = api.get_organization_settings("org-1")
    assert settings.header_height == 80
    assert settings.header_position == "right"
    assert api.get_current_user().is_admin is True


def test_clean_organization_data_strips_empty_fields():
    data = {"name": "  Hôtel du Lac ", "email": " ", "city": "Thiès", "phone": None, "extra": "x"}
    assert clean_organization_data(data) == {"name": "Hôtel du Lac", "city": "Thiès"}
    with pytest.raises(ValidationError):
        clean_organization_data({"name": "  "}, require_name=True)


def test_admin_endpoints(client, fake_http):
    fake_http.add("POST", "/admin/organizations", payload={"id": "org-2", "name": "Lac"})
    fake_http.add("PUT", "/admin/assignments/u1/org-2", payload={
        "id": "a1", "user_id": "u1", "organization_id": "org-2", "role": "owner",
    })
    fake_http.add("GET", "/admin/organizations/org-2/users", payload=[{
        "id": "a1", "user_id": "u1", "organization_id": "org-2", "role": "user",
        "user": {"id": "u1", "email": "a@b.c"},
    }])
    admin = AdminApi(client)

    assert admin.create_organization({"name": "Lac", "country": ""}).id == "org-2"
    assert fake_http.last("POST", "/admin/organizations")["json"] == {"name": "Lac"}

    assert admin.update_user_role("u1", "org-2", "owner").role == "owner"
    assert fake_http.last("PUT", "/admin/assignments/u1/org-2")["json"] == {"role": "owner"}

    members = admin.get_organization_users("org-2")
    assert members[0].user.email == "a@b.c"

    with pytest.raises(ValidationError):
        admin.assign_user("u1", "org-2", role="superviseur")


def test_storage_upload(fake_http, png_file):
    path = header_object_path("org-1", png_file.name, now_ms=1700000000000)
    assert path == "invoice-headers/org-1-header-1700000000000.png"

    fake_http.add("POST", f"/storage/v1/object/organization-assets/{path}", payload={"Key": path})
    storage = StorageClient("http://storage.test/storage/v1", api_key="anon", token_provider=lambda: "tok",
                            http=fake_http)
    url = storage.upload_header_image("org-1", png_file, now_ms=1700000000000)

    assert url == f"http://storage.test/storage/v1/object/public/organization-assets/{path}"
    call = fake_http.calls[-1]
    assert call["headers"]["x-upsert"] == "true"
    assert call["headers"]["Content-Type"] == "image/png"


def test_storage_rejects_non_images_and_large_files(fake_http, tmp_path, monkeypatch):
    storage = StorageClient("http://storage.test", http=fake_http)
    doc = tmp_path / "notes.txt"
    doc.write_text("x")
    with pytest.raises(ValidationError, match="Veuillez sélectionner une image"):
        storage.upload_header_image("org-1", doc)

    big = tmp_path / "big.png"
    big.write_bytes(b"\0" * (5 * 1024 * 1024 + 1))
    with pytest.raises(ValidationError, match="5MB"):
        storage.upload_header_image("org-1", big)
    assert fake_http.calls == []


def test_auth_sign_in_out_and_listeners(fake_http, tmp_path):
    fake_http.add("POST", "/token?grant_type=password", payload={
        "access_token": "jwt-1", "refresh_token": "r-1", "expires_in": 3600,
        "user": {"id": "auth-1", "email": "marie@example.com"},
    })
    fake_http.add("POST", "/logout", status=204)
    auth = AuthClient("http://auth.test", api_key="anon", session=AuthSession(tmp_path / "s.json"), http=fake_http)
    events = []
    unsubscribe = auth.on_auth_state_change(lambda event, session: events.append(event))

    auth.sign_in("marie@example.com", "secret")
    assert auth.access_token() == "jwt-1"
    assert fake_http.last("POST", "/token?grant_type=password")["headers"]["apikey"] == "anon"

    restored = AuthClient("http://auth.test", session=AuthSession(tmp_path / "s.json"), http=fake_http)
    assert restored.restore_session().email == "marie@example.com"

    auth.sign_out()
    assert auth.get_session() is None
    assert events == [SIGNED_IN, SIGNED_OUT]

    unsubscribe()
    auth.sign_out()
    assert events == [SIGNED_IN, SIGNED_OUT]


def test_auth_bad_credentials(fake_http):
    fake_http.add("POST", "/token?grant_type=password", status=400,
                  payload={"error": "invalid_grant", "error_description": "Invalid login credentials"})
    auth = AuthClient("http://auth.test", http=fake_http)
    with pytest.raises(AuthError, match="Invalid login credentials"):
        auth.sign_in("x@y.z", "bad")
    assert auth.get_session() is None


def test_auth_logout_network_failure_still_clears_local_session(fake_http):
    fake_http.add("POST", "/logout", exc=requests.exceptions.ConnectionError("down"))
    auth = AuthClient("http://auth.test", http=fake_http)
    auth.session.start_session("jwt-2")
    auth.sign_out()
    assert auth.get_session() is None


def test_auth_logout_without_auth_url_clears_local_session(fake_http, tmp_path):
    auth = AuthClient(None, session=AuthSession(tmp_path / "s.json"), http=fake_http)
    events = []
    auth.on_auth_state_change(lambda event, session: events.append(event))
    auth.session.start_session("jwt-3", user_id="auth-1")

    auth.sign_out()
    assert auth.get_session() is None
    assert auth.access_token() is None
    assert events == [SIGNED_OUT]
    assert fake_http.calls == []

    reloaded = AuthSession(tmp_path / "s.json")
    reloaded.load_session()
    assert reloaded.get_token() is None


def test_auth_logout_rejected_token_still_clears_local_session(fake_http):
    fake_http.add("POST", "/logout", status=401, payload={"msg": "expired"})
    auth = AuthClient("http://auth.test", http=fake_http)
    auth.session.start_session("jwt-4")
    auth.sign_out()
    assert auth.get_session() is None


def test_auth_sign_up(fake_http):
    fake_http.add("POST", "/signup", payload={"id": "auth-9", "email": "awa@example.com"})
    auth = AuthClient("http://auth.test", api_key="anon", http=fake_http)
    auth.sign_up("awa@example.com", "secret123")
    call = fake_http.last("POST", "/signup")
    assert call["json"] == {"email": "awa@example.com", "password": "secret123"}
    assert auth.get_session() is None


def test_auth_sign_up_refused(fake_http):
    fake_http.add("POST", "/signup", status=422, payload={"msg": "Password should be at least 6 characters"})
    auth = AuthClient("http://auth.test", http=fake_http)
    with pytest.raises(AuthError, match="at least 6 characters"):
        auth.sign_up("awa@example.com", "123")
