import pytest

from facturier import app


@pytest.fixture(autouse=True)
def _settings(monkeypatch, settings):
    monkeypatch.setattr(app, "load_settings", lambda: settings)


def test_status_without_session(capsys):
    assert app.main(["status"]) == 1
    assert "Session invalide" in capsys.readouterr().out


def test_logout_without_session(capsys):
    assert app.main(["logout"]) == 0
    assert "Déconnecté" in capsys.readouterr().out


def test_unknown_command_exits():
    with pytest.raises(SystemExit):
        app.main(["inconnu"])


def test_invalid_session_is_logged(caplog):
    with caplog.at_level("WARNING", logger="facturier"):
        assert app.main(["invoices"]) == 1
    assert any("Session invalide" in r.getMessage() for r in caplog.records)
