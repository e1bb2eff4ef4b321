# app/core/dependencies.py
from fastapi import Request

from app.config.settings import Settings
from app.shared.storage.base import Storage


def get_storage(request: Request) -> Storage:
    """Storage opened by the application lifespan"""
    return request.app.state.storage


def get_acceptance_policy(request: Request):
    """AcceptancePolicy built from settings at startup"""
    return request.app.state.acceptance_policy


def get_settings(request: Request) -> Settings:
    """Settings the application was created with"""
    return request.app.state.settings
