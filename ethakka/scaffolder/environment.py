"""Environment files written into every new project.

Each variant has a fixed key set.  ``.env`` holds real secrets once a
developer edits it, so it is listed in ``PRESERVED_ENV_FILES`` and is never
overwritten by a later run.
"""

from __future__ import annotations

from ethakka.config import GeneratedAppConfig

from .models import RenderedArtifact
from .renderer import TemplateRenderer

# (file name, template name) in render order
ENV_FILES: tuple[tuple[str, str], ...] = (
    (".env", "env.j2"),
    (".env.example", "env.example.j2"),
    (".env.development", "env.development.j2"),
    (".env.production", "env.production.j2"),
    (".env.test", "env.test.j2"),
)

PRESERVED_ENV_FILES = frozenset({".env"})

_FULL_KEYS = (
    "NODE_ENV",
    "PORT",
    "API_PREFIX",
    "APP_NAME",
    "APP_DESCRIPTION",
    "APP_VERSION",
    "DATABASE_URL",
    "JWT_SECRET",
    "JWT_REFRESH_SECRET",
    "JWT_EXPIRATION",
    "JWT_REFRESH_EXPIRATION",
    "LOG_LEVEL",
    "CORS_ENABLED",
    "ALLOWED_ORIGINS",
    "RATE_LIMIT_WINDOW_MS",
    "RATE_LIMIT_MAX",
    "SWAGGER_ENABLED",
    "SWAGGER_TITLE",
    "SWAGGER_DESCRIPTION",
    "SWAGGER_VERSION",
    "SWAGGER_PATH",
    "CACHE_TTL",
    "UPLOAD_DESTINATION",
    "MAX_FILE_SIZE",
)

ENV_KEYS: dict[str, tuple[str, ...]] = {
    ".env": _FULL_KEYS,
    ".env.example": _FULL_KEYS,
    ".env.development": (
        "NODE_ENV",
        "PORT",
        "API_PREFIX",
        "DATABASE_URL",
        "LOG_LEVEL",
        "SWAGGER_ENABLED",
    ),
    ".env.production": (
        "NODE_ENV",
        "PORT",
        "API_PREFIX",
        "LOG_LEVEL",
        "CORS_ENABLED",
        "ALLOWED_ORIGINS",
        "SWAGGER_ENABLED",
        "CACHE_TTL",
    ),
    ".env.test": (
        "NODE_ENV",
        "PORT",
        "API_PREFIX",
        "DATABASE_URL",
        "LOG_LEVEL",
        "SWAGGER_ENABLED",
    ),
}


def parse_env_keys(text: str) -> list[str]:
    """Return the keys assigned in a dotenv file, in order."""
    keys = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        keys.append(stripped.split("=", 1)[0].strip())
    return keys


def render_environment(
    renderer: TemplateRenderer,
    template_root: str,
    project_name: str,
    app: GeneratedAppConfig,
) -> list[RenderedArtifact]:
    """Render every environment variant for *project_name*."""
    context = {"project_name": project_name, "app": app}
    return [
        RenderedArtifact(filename, renderer.render(f"{template_root}/env/{template}", context))
        for filename, template in ENV_FILES
    ]
