import os


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Configuration for the certificate service.

    - ``APP_ENV``: deployment mode, ``production`` or anything else.  ``NODE_ENV``
      is honoured as a fallback so existing deployment settings keep working.
    - ``HOST`` / ``PORT``: where the development server binds.
    - ``PUBLIC_BASE_URL``: the externally visible base URL embedded in every
      certificate's QR code.  When unset it is derived from the deployment mode
      by :func:`resolve_base_url`.
    - ``UPLOAD_FOLDER``: flat directory holding the generated PDFs.
    - ``SQLALCHEMY_DATABASE_URI``: certificate register; defaults to a local
      SQLite file and can be overridden via ``DATABASE_URL``.
    - ``CORS_ORIGINS``: comma separated list of browser origins allowed to call
      the API.
    - ``RENDER_TIMEOUT``: seconds allowed for encoding plus layout of one
      certificate before the request is aborted.
    """

    APP_ENV = os.getenv("APP_ENV", os.getenv("NODE_ENV", "development"))
    PRODUCTION = APP_ENV == "production"
    PORT = int(os.getenv("PORT", "5000"))
    HOST = os.getenv("HOST", "0.0.0.0" if PRODUCTION else "127.0.0.1")
    PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "")
    RENDER_EXTERNAL_HOSTNAME = os.getenv("RENDER_EXTERNAL_HOSTNAME", "raildash.onrender.com")

    UPLOAD_FOLDER = os.getenv(
        "UPLOAD_FOLDER",
        os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "uploads"),
    )
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///railtrack.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")

    CORS_ORIGINS = [
        o.strip()
        for o in os.getenv(
            "CORS_ORIGINS",
            "http://localhost:8080,http://10.3.104.75:8080,http://127.0.0.1:8080",
        ).split(",")
        if o.strip()
    ]

    RENDER_TIMEOUT = float(os.getenv("RENDER_TIMEOUT", "30"))
    DATE_FORMAT = os.getenv("DATE_FORMAT", "%m/%d/%Y")
    TIMESTAMP_FORMAT = os.getenv("TIMESTAMP_FORMAT", "%m/%d/%Y, %I:%M:%S %p")
    PDF_COMPRESSION = _env_flag("PDF_COMPRESSION", True)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class TestingConfig(Config):
    TESTING = True
    APP_ENV = "development"
    PRODUCTION = False
    HOST = "127.0.0.1"
    PORT = 5000
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    PUBLIC_BASE_URL = "http://localhost:5000"
    PDF_COMPRESSION = False


def resolve_base_url(config) -> str:
    """Pick the external base URL once, at startup.

    An explicit ``PUBLIC_BASE_URL`` always wins.  Otherwise production uses the
    hosting provider's external hostname over https and everything else the
    local bind address.
    """

    explicit = (config.get("PUBLIC_BASE_URL") or "").strip()
    if explicit:
        return explicit.rstrip("/")
    if config.get("APP_ENV") == "production":
        return f"https://{config['RENDER_EXTERNAL_HOSTNAME']}"
    return f"http://{config['HOST']}:{config['PORT']}"
