import pytest

from demoapi.config import ConfigurationError, JwtSettings, load_settings


@pytest.fixture
def environ():
    return {
        "JWT_PRIVATE_KEY": "private",
        "JWT_PUBLIC_KEY": "public",
        "JWT_ISSUER": "https://issuer",
        "JWT_AUDIENCE": "audience",
    }


class TestLoadSettings:
    def test_defaults(self, environ):
        assert load_settings(environ) == JwtSettings("private", "public", "https://issuer", "audience", 3600)

    def test_expires(self, environ):
        environ["JWT_EXPIRES"] = "60"
        assert load_settings(environ).expires == 60

    def test_missing(self, environ):
        del environ["JWT_ISSUER"]
        environ["JWT_AUDIENCE"] = ""

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(environ)
        assert "JWT_ISSUER" in str(exc_info.value)
        assert "JWT_AUDIENCE" in str(exc_info.value)

    def test_malformed(self, environ):
        environ["JWT_EXPIRES"] = "soon"
        with pytest.raises(ConfigurationError):
            load_settings(environ)
