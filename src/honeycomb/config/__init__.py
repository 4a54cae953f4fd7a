"""Configuration: TOML discovery, pydantic-settings models, structlog setup."""
