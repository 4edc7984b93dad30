import pytest
import yaml

from teamcomm.core.config import DatabaseSettings, load_settings
from teamcomm.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the developer's environment and .env out of these tests."""
    for name in ("DATABASE_URL", "DATABASE__URL", "DATABASE__USERNAME", "DATABASE__PASSWORD", "OPENTEAM_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestLoadSettings:
    def test_creates_default_file(self, tmp_path):
        path = tmp_path / "openteam" / "config.yml"

        settings = load_settings(path)

        assert path.exists()
        document = yaml.safe_load(path.read_text())
        assert document["application"]["refreshInterval"] == 10
        assert settings.database.username == "openteam_user"
        assert settings.application.refresh_interval == 10
        assert settings.application.session_duration_hours == 8

    def test_reads_existing_file(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text(
            "database:\n"
            "  url: jdbc:postgresql://db.internal:5432/openteam\n"
            "  username: team\n"
            "  password: s3cret\n"
            "  driver: org.postgresql.Driver\n"
            "application:\n"
            "  refreshInterval: 30\n"
        )

        settings = load_settings(path)

        url = settings.database_url()
        assert url.drivername == "postgresql"
        assert url.host == "db.internal"
        assert url.database == "openteam"
        assert url.username == "team"
        assert url.password == "s3cret"
        assert settings.application.refresh_interval == 30

    def test_path_from_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yml"
        monkeypatch.setenv("OPENTEAM_CONFIG", str(path))

        load_settings()

        assert path.exists()

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yml"
        load_settings(path)
        monkeypatch.setenv("DATABASE__USERNAME", "from_env")

        settings = load_settings(path)

        assert settings.database.username == "from_env"
        assert settings.database.password == "your_secure_password"

    def test_database_url_env_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///local.db")

        settings = load_settings(tmp_path / "config.yml")

        assert settings.database_url().get_backend_name() == "sqlite"

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError):
            load_settings(path)

    def test_broken_yaml(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("database: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_settings(path)


class TestDatabaseUrl:
    def test_sqlalchemy_driver_is_used(self):
        url = DatabaseSettings(
            url="postgresql://localhost/openteam", driver="postgresql+psycopg2"
        ).sqlalchemy_url()
        assert url.drivername == "postgresql+psycopg2"

    def test_credentials_in_url_are_kept(self):
        url = DatabaseSettings(
            url="postgresql://alice:pw@localhost/openteam", username="bob", password="other"
        ).sqlalchemy_url()
        assert url.username == "alice"
        assert url.password == "pw"

    def test_invalid_url(self):
        with pytest.raises(ConfigurationError):
            DatabaseSettings(url="not a url").sqlalchemy_url()
