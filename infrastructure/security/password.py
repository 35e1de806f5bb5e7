"""
密码工具

使用 Argon2（pwdlib 推荐算法）生成带随机盐的密码哈希，
哈希串中自带算法参数与盐值，因此同一明文每次哈希结果不同。
"""
from typing import Optional

from pwdlib import PasswordHash
from pwdlib.exceptions import UnknownHashError

from app.core.exceptions import BusinessException

password_hash = PasswordHash.recommended()


def hash_password(password: Optional[str]) -> str:
    """
    加密密码

    Args:
        password: 原始密码

    Returns:
        加密后的密码

    Raises:
        BusinessException: 密码为空（INVALID_ARGUMENT）
    """
    if not password:
        raise BusinessException.invalid_argument("密码不能为空")
    return password_hash.hash(password)


def verify_password(raw_password: Optional[str], hashed_password: Optional[str]) -> bool:
    """
    验证密码

    Args:
        raw_password: 原始密码
        hashed_password: 加密密码

    Returns:
        是否匹配
    """
    if raw_password is None or hashed_password is None:
        return False
    try:
        return password_hash.verify(raw_password, hashed_password)
    except UnknownHashError:
        return False
