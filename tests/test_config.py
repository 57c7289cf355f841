from chatterbox import config


class TestDatabaseUrl:
    def test_postgres_url_uses_psycopg(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db/chatterbox")
        assert config._build_database_url() == "postgresql+psycopg://u:p@db/chatterbox"

    def test_legacy_variable_is_read(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("CHATTERBOX_POSTGRES_URL", "postgres://u:p@db/c")
        assert config._build_database_url() == "postgresql+psycopg://u:p@db/c"

    def test_sqlite_url_untouched(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///local.db")
        assert config._build_database_url() == "sqlite:///local.db"


class TestEnvHelpers:
    def test_env_bool(self, monkeypatch):
        monkeypatch.setenv("FLAG", " Yes ")
        assert config._env_bool("FLAG") is True
        monkeypatch.setenv("FLAG", "off")
        assert config._env_bool("FLAG") is False
        monkeypatch.delenv("FLAG")
        assert config._env_bool("FLAG", True) is True

    def test_env_list(self, monkeypatch):
        monkeypatch.setenv("ORIGINS", "http://a, ,http://b")
        assert config._env_list("ORIGINS") == ("http://a", "http://b")
