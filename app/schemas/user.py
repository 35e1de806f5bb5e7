"""
用户接口的请求和响应模型
"""
from typing import Optional
from datetime import datetime
from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel

from infrastructure.database.models.user import User, UserStatus

STATUS_TEXTS = {
    UserStatus.ENABLED: "enabled",
    UserStatus.DISABLED: "disabled",
}


def status_text(status: Optional[int]) -> str:
    """根据状态码生成状态描述：1-enabled，0-disabled，其它-unknown"""
    if status is None:
        return "unknown"
    return STATUS_TEXTS.get(status, "unknown")


_email_adapter = TypeAdapter(EmailStr)


def normalize_email(email: str) -> str:
    """按 EmailStr 的规则规范化邮箱（域名小写），不是合法邮箱时原样返回"""
    try:
        return _email_adapter.validate_python(email)
    except ValidationError:
        return email


class CamelModel(BaseModel):
    """请求/响应统一使用驼峰命名，同时接受字段名"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserCreateRequest(CamelModel):
    """创建用户请求模型"""
    username: str = Field(..., min_length=3, max_length=50, description="用户名（3-50个字符）")
    email: EmailStr = Field(..., description="邮箱")
    password: str = Field(..., min_length=6, description="密码（不少于6位）")
    real_name: Optional[str] = Field(default=None, max_length=50, description="真实姓名")
    phone: Optional[str] = Field(default=None, max_length=20, description="手机号")

    @field_validator("username", "password")
    @classmethod
    def _validate_not_blank(cls, v: str, info: ValidationInfo) -> str:
        """用户名和密码不能为空白"""
        if not v.strip():
            raise ValueError("用户名不能为空" if info.field_name == "username" else "密码不能为空")
        return v


class UserUpdateRequest(CamelModel):
    """更新用户请求模型（只更新提供的字段）"""
    email: Optional[EmailStr] = Field(default=None, description="邮箱")
    real_name: Optional[str] = Field(default=None, max_length=50, description="真实姓名")
    phone: Optional[str] = Field(default=None, max_length=20, description="手机号")
    status: Optional[int] = Field(default=None, ge=0, le=1, description="状态：0-禁用，1-启用")


class UserResponse(CamelModel):
    """用户响应模型（不包含密码）"""
    id: int = Field(..., description="用户ID")
    username: str = Field(..., description="用户名")
    email: str = Field(..., description="邮箱")
    real_name: Optional[str] = Field(default=None, description="真实姓名")
    phone: Optional[str] = Field(default=None, description="手机号")
    status: Optional[int] = Field(default=None, description="状态")
    status_text: str = Field(..., description="状态描述")
    created_at: datetime = Field(..., description="创建时间")
    updated_at: datetime = Field(..., description="更新时间")

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        """从ORM对象创建响应对象，不复制密码字段"""
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            real_name=user.real_name,
            phone=user.phone,
            status=user.status,
            status_text=status_text(user.status),
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
