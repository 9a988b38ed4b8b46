"""
核心异常处理配置文件
backend/app/core/exceptions.py
上次更新：2026/3/2
说明：Service层只抛出以下业务异常，由main.py统一转换为ErrorResponse
"""

from fastapi import HTTPException, status


class AppException(HTTPException):
    """基础异常类"""
    error_code: str = "50000"

    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)


class BadRequest(AppException):
    """参数错误/业务错误（400）"""
    error_code = "10000"

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Unauthorized(AppException):
    """未认证或令牌无效（401）"""
    error_code = "20001"

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
        self.headers = {"WWW-Authenticate": "Bearer"}


class PermissionDenied(AppException):
    """权限不足（403）"""
    error_code = "20003"

    def __init__(self, detail: str = "Not enough privileges"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class ResourceNotFound(AppException):
    """资源不存在异常（404）"""
    error_code = "30001"

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Conflict(AppException):
    """唯一性冲突/菜单成环/存在依赖无法删除（409）"""
    error_code = "30009"

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ValidationFailed(AppException):
    """业务校验失败：枚举值非法、关联ID不存在等（422）"""
    error_code = "10001"

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)
