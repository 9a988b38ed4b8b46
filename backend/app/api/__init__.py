"""
API模块统一入口
backend/app/api/__init__.py
上次更新：2026/3/2
"""
from fastapi import APIRouter

from app.api.v1.endpoints import alerts, dicts, email_templates, login, menus, monitor, notifications, permissions, roles, users

api_router = APIRouter()
api_router.include_router(login.router)
api_router.include_router(users.router)
api_router.include_router(roles.router)
api_router.include_router(permissions.router)
api_router.include_router(menus.router)
api_router.include_router(notifications.router)
api_router.include_router(dicts.router)
api_router.include_router(monitor.router)
api_router.include_router(alerts.router)
api_router.include_router(email_templates.router)
