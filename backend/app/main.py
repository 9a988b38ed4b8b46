"""
项目主入口文件
backend/app/main.py
上次更新：2026/3/2
# 1. 日志统一由config.init_global_logger初始化，所有记录携带request_id
# 2. request_id中间件：优先使用请求头X-Request-ID，否则生成UUID，并回写到响应头
# 3. 全局异常处理器：业务异常/完整性冲突/参数校验/未知异常统一转换为ErrorResponse
"""
import logging
import uuid
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError
from starlette.middleware.cors import CORSMiddleware

from app.api import api_router
from app.core.config import init_global_logger, request_id_ctx, settings
from app.core.exceptions import AppException
from app.di.container import Container
from app.models import Base
from app.schemas.responses import ErrorResponse, ResponseCode

# 初始化全局日志
init_global_logger()
logger = logging.getLogger(__name__)


def custom_generate_unique_id(route: APIRoute) -> str:
    """路由ID生成函数，处理无tags情况"""
    if not route.tags:
        return f"untagged-{route.name}"
    return f"{route.tags[0]}-{route.name}"


# Sentry初始化（本地环境不上报）
if settings.SENTRY_DSN and settings.ENVIRONMENT != "local":
    sentry_sdk.init(
        dsn=str(settings.SENTRY_DSN),
        enable_tracing=True,
        environment=settings.ENVIRONMENT
    )


def _error_response(status_code: int, code: str, msg: str, details=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(ErrorResponse(
            code=code,
            msg=msg,
            details=details,
            request_id=request_id_ctx.get(),
        )),
        headers=headers,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: Container = app.state.container
    await container.init_resources()

    # sqlite仅用于本地调试，启动时自动建表
    if make_url(settings.SQLALCHEMY_DATABASE_URI).get_backend_name() == "sqlite":
        async with container.async_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    logger.info(f"{settings.PROJECT_NAME} 启动完成 | 环境：{settings.ENVIRONMENT} | API前缀：{settings.API_V1_STR}")
    try:
        yield
    finally:
        await container.shutdown_resources()
        await container.async_engine().dispose()


def create_app() -> FastAPI:
    # 1. 初始化DI容器（模块扫描见Container.wiring_config）
    container = Container()

    # 2. 创建FastAPI应用
    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,
    )

    # 3. request_id中间件
    @app.middleware("http")
    async def add_request_id_middleware(request: Request, call_next):
        """
        注入请求ID到上下文，日志与错误响应共用
        响应头添加X-Request-ID，便于前端/运维排查
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = request_id_ctx.set(request_id)
        try:
            logger.debug(f"开始处理请求 | 路径：{request.url.path} | 方法：{request.method}")
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            logger.debug(f"请求处理完成 | 状态码：{response.status_code}")
            return response
        finally:
            request_id_ctx.reset(token)

    # 4. 配置CORS
    if settings.all_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.all_cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID"],
        )

    # 5. 全局异常处理
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        logger.warning(
            f"业务异常 | 路径：{request.url.path} | 状态码：{exc.status_code} | 错误码：{exc.error_code} | 详情：{exc.detail}"
        )
        return _error_response(exc.status_code, exc.error_code, exc.detail, headers=exc.headers)

    @app.exception_handler(IntegrityError)
    async def integrity_exception_handler(request: Request, exc: IntegrityError):
        # 并发下绕过了Service层唯一性校验的写入
        logger.error(f"数据库完整性异常 | 路径：{request.url.path} | 详情：{exc.orig}")
        return _error_response(409, ResponseCode.CONFLICT, "数据已存在或违反约束")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"请求参数校验失败 | 路径：{request.url.path} | 错误详情：{exc.errors()}")
        return _error_response(
            422, ResponseCode.VALIDATION_ERROR, "请求参数校验失败", details={"errors": jsonable_encoder(exc.errors())}
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"未处理异常 | 路径：{request.url.path}")
        return _error_response(500, ResponseCode.INTERNAL_ERROR, "服务器内部错误")

    # 6. 挂载API路由
    app.include_router(api_router, prefix=settings.API_V1_STR)

    # 7. 附加容器到app.state（测试中用于覆盖Provider）
    app.state.container = container

    return app


# 创建应用实例
app = create_app()
