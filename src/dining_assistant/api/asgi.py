"""ASGI entrypoint for the dining assistant API."""

from dining_assistant.api.app import create_app
from dining_assistant.containers import build_container

app = create_app(build_container())
