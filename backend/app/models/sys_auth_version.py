"""
授权版本号模型（单行计数器）
backend/app/models/sys_auth_version.py
授权相关写操作在同一事务内递增version，Redis缓存键携带该版本号
"""
from sqlalchemy import BigInteger, Column, DateTime, Integer

from app.core.config import get_now
from app.models.base import Base

AUTH_VERSION_ROW_ID = 1


class SysAuthVersion(Base):
    __tablename__ = 'sys_auth_version'
    __table_args__ = {'comment': '授权版本号表'}

    id = Column(Integer, primary_key=True, autoincrement=False, comment='固定为1')
    version = Column(BigInteger, nullable=False, default=0, comment='授权版本号')
    update_time = Column(DateTime, nullable=False, default=get_now, onupdate=get_now, comment='更新时间')

    def __repr__(self):
        return f"<SysAuthVersion(version={self.version})>"
