"""Observability package bootstrap."""

from __future__ import annotations

from fastapi import FastAPI

from sevalink.obs import logging as obs_logging
from sevalink.obs import middleware
from sevalink.settings import settings


def init(app: FastAPI) -> None:
	if getattr(app.state, "obs_initialised", False):
		return
	if settings.obs_enabled:
		obs_logging.configure_logging()
	middleware.install(app, enabled=settings.obs_enabled)
	app.state.obs_initialised = True


__all__ = ["init"]
