from facturier import config


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in ("FACTURIER_API_URL", "FACTURIER_AUTH_URL", "FACTURIER_STORAGE_URL",
                 "FACTURIER_REQUEST_TIMEOUT", "FACTURIER_LOG_FILE", "FACTURIER_OUTPUT_DIR"):
        monkeypatch.delenv(name, raising=False)

    settings = config.load_settings(load_env_files=False)
    assert settings.api_url == "http://localhost:3001"
    assert settings.auth_url is None
    assert settings.request_timeout == 30
    assert settings.log_file == "facturier.log"
    assert settings.preferences_path.name == "preferences.json"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("FACTURIER_API_URL", "https://api.example.com/")
    monkeypatch.setenv("FACTURIER_AUTH_URL", " https://auth.example.com/auth/v1/ ")
    monkeypatch.setenv("FACTURIER_REQUEST_TIMEOUT", "abc")
    monkeypatch.setenv("FACTURIER_OUTPUT_DIR", str(tmp_path / "pdf"))

    settings = config.load_settings(load_env_files=False)
    assert settings.api_url == "https://api.example.com"
    assert settings.auth_url == "https://auth.example.com/auth/v1"
    assert settings.request_timeout == 30
    assert settings.output_dir == tmp_path / "pdf"


def test_user_env_copied_from_example(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "get_user_data_dir", lambda app_name=config.APP_NAME: tmp_path / "user")
    monkeypatch.setattr(config, "_PROJECT_ROOT", tmp_path)
    (tmp_path / ".env.example").write_text("FACTURIER_LOG_FILE=depuis-exemple.log\n", encoding="utf-8")
    # valeur restaurée par monkeypatch après le chargement du .env
    monkeypatch.setenv("FACTURIER_LOG_FILE", "avant.log")

    env_path = config.load_user_env()
    assert env_path.read_text(encoding="utf-8").startswith("FACTURIER_LOG_FILE")
    assert config.load_settings(load_env_files=False).log_file == "depuis-exemple.log"
