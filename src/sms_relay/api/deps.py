"""FastAPI dependency injection helpers.

Components are built once in the application lifespan and kept on
``app.state``; tests swap them through ``app.dependency_overrides``.
"""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from sms_relay.application.ports.delivery import DeliverySink
from sms_relay.application.repositories.message import MessageStore


def get_store(request: Request) -> MessageStore:
    return request.app.state.store


def get_sink(request: Request) -> DeliverySink:
    return request.app.state.sink


StoreDep = Annotated[MessageStore, Depends(get_store)]
SinkDep = Annotated[DeliverySink, Depends(get_sink)]
