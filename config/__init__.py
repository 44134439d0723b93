"""Configuration: pydantic settings backed by config/server.toml."""
