"""
状态/类型枚举
backend/app/enums/sys_status.py
"""
from enum import Enum


class UserStatus(str, Enum):
    ACTIVE = "active"
    DISABLED = "disabled"


class RoleStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class MenuStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class MenuType(str, Enum):
    CATALOG = "catalog"
    MENU = "menu"
    BUTTON = "button"
    LINK = "link"


class NotificationType(str, Enum):
    INFO = "info"
    SYSTEM = "system"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class MetricType(str, Enum):
    SYSTEM = "system"
    APPLICATION = "application"
    DATABASE = "database"
    CACHE = "cache"


class AlertCondition(str, Enum):
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    EQ = "=="
    NE = "!="


class AlertLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AlertStatus(str, Enum):
    FIRING = "firing"
    RESOLVED = "resolved"


class EmailTemplateType(str, Enum):
    API_MONITOR_ALERT = "API_MONITOR_ALERT"
    SYSTEM_ALERT = "SYSTEM_ALERT"
    GENERAL_NOTIFICATION = "GENERAL_NOTIFICATION"


class TemplateVariableType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    DATETIME = "datetime"
    HTML = "html"
