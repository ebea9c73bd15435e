"""Allow ``python -m aesthetic_progression``."""

from .cli.main import app

app(prog_name="aesthetic-progression")
