"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from academy.core.config import BaseConfig, get_config
from academy.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :param config: Config class, import string or object; defaults to the
        class selected by ``APP_ENV``.
    :returns: Configured application with the auth API mounted under
        ``/api/v1``.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)
    _check_signing_key(app)

    from academy.api.deps import refresh_bytes_from_config

    refresh_bytes_from_config(app.config)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Trust X-Forwarded-* only when deployed behind a reverse proxy
    if app.config.get("USE_PROXYFIX", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)  # type: ignore[method-assign]

    from academy.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from academy.core import cors

    cors.init_app(app)

    from academy.api import init_app as init_api

    init_api(app)

    from academy.core import errors

    errors.init_app(app)

    from academy import cli as app_cli

    app_cli.init_app(app)

    return app


PLACEHOLDER_SECRETS = frozenset({"", "CHANGE_ME", "CHANGE_ME_JWT"})


def _check_signing_key(app: Flask) -> None:
    """Refuse to boot in production with a missing or placeholder signing key.

    :raises RuntimeError: When ``APP_ENV`` is ``production`` and
        ``JWT_SECRET_KEY`` is unset or still a placeholder.
    """
    if str(app.config.get("APP_ENV", "")).lower() != "production":
        return
    if str(app.config.get("JWT_SECRET_KEY") or "") in PLACEHOLDER_SECRETS:
        raise RuntimeError("JWT_SECRET (JWT_SECRET_KEY) must be set in production")
