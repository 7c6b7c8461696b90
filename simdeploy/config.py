"""Deployment configuration — env-driven.

Centralized config using pydantic-settings.  Reads from a .env file and
SIMDEPLOY_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class DeployConfig(BaseSettings):
    """Deployment configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export SIMDEPLOY_WORKSPACE_ROOT=/home/me/phet
        export SIMDEPLOY_DEV_DEPLOY_USER=me
        export SIMDEPLOY_BUILD_SERVER_AUTHORIZATION_CODE=...

    Or via .env file::

        SIMDEPLOY_LOG_LEVEL=DEBUG
        SIMDEPLOY_DEV_DEPLOY_SERVER=bayes.colorado.edu
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SIMDEPLOY_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"

    # Directory holding the sibling repository checkouts (repo, chipper, ...)
    workspace_root: Path = Path("..")

    # Dev server (ssh/scp target)
    dev_deploy_server: str = "bayes.colorado.edu"
    dev_deploy_user: str = ""
    dev_deploy_path: str = "/data/web/htdocs/dev/html/"
    dev_site_url: str = "https://phet-dev.colorado.edu/html"

    # Production build server
    production_server_url: str = "https://phet-server2.int.colorado.edu"
    production_site_url: str = "https://phet.colorado.edu/sims/html"
    phetio_site_url: str = "https://phet-io.colorado.edu/sims"
    build_server_authorization_code: str = ""
    build_server_email: str | None = None

    # Host that only resolves on the internal network (VPN check)
    vpn_check_host: str = "phet-server2.int.colorado.edu"

    # Toolchain repos re-installed before every build
    toolchain_repos: list[str] = ["chipper", "perennial-alias"]
    grunt_command: str = "grunt"
    npm_command: str = "npm"

    # Timeouts
    request_timeout_seconds: float = 30.0
    command_timeout_seconds: int = 1800


# Module-level singleton: import as `from simdeploy.config import config`
config = DeployConfig()
