"""
用户管理接口
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Path, Query, status

from app.api.dependencies import get_user_service
from app.schemas.response import ApiResponse, PageResponse
from app.schemas.user import UserCreateRequest, UserResponse, UserUpdateRequest
from domain.services.user_service import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["用户管理"])


@router.post(
    "",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    request: UserCreateRequest,
    service: UserService = Depends(get_user_service),
):
    """
    创建用户

    Returns:
        201 + 创建的用户（不含密码）
    """
    user = await service.create_user(request)
    return ApiResponse.success(user, "用户创建成功")


@router.get("/all", response_model=ApiResponse[List[UserResponse]])
async def get_all_users(service: UserService = Depends(get_user_service)):
    """获取所有用户"""
    return ApiResponse.success(await service.get_all_users())


@router.get("/search", response_model=ApiResponse[PageResponse[UserResponse]])
async def search_users(
    keyword: str = Query(..., description="关键字，匹配用户名、邮箱或真实姓名"),
    page: int = Query(0, ge=0, description="页码（从0开始）"),
    size: int = Query(10, ge=1, description="每页大小"),
    service: UserService = Depends(get_user_service),
):
    """搜索用户"""
    return ApiResponse.success(await service.search_users(keyword, page, size))


@router.get("/check/username", response_model=ApiResponse[bool])
async def check_username(
    username: str = Query(..., description="用户名"),
    service: UserService = Depends(get_user_service),
):
    """检查用户名是否已存在"""
    return ApiResponse.success(await service.exists_by_username(username))


@router.get("/check/email", response_model=ApiResponse[bool])
async def check_email(
    email: str = Query(..., description="邮箱"),
    service: UserService = Depends(get_user_service),
):
    """检查邮箱是否已存在"""
    return ApiResponse.success(await service.exists_by_email(email))


@router.get("/username/{username}", response_model=ApiResponse[UserResponse])
async def get_user_by_username(
    username: str,
    service: UserService = Depends(get_user_service),
):
    """根据用户名获取用户"""
    return ApiResponse.success(await service.get_user_by_username(username))


@router.get("/status/{user_status}", response_model=ApiResponse[PageResponse[UserResponse]])
async def get_users_by_status(
    user_status: int = Path(..., description="用户状态：0-禁用，1-启用，其它值返回空页"),
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1),
    service: UserService = Depends(get_user_service),
):
    """根据状态分页查询用户"""
    return ApiResponse.success(await service.get_users_by_status(user_status, page, size))


@router.get("", response_model=ApiResponse[PageResponse[UserResponse]])
async def get_users(
    page: int = Query(0, ge=0, description="页码（从0开始）"),
    size: int = Query(10, ge=1, description="每页大小"),
    sort: str = Query("id", description="排序字段"),
    direction: str = Query("asc", description="排序方向：asc 或 desc"),
    service: UserService = Depends(get_user_service),
):
    """分页查询用户"""
    return ApiResponse.success(await service.get_users(page, size, sort, direction))


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
async def get_user(
    user_id: int = Path(..., ge=1, description="用户ID"),
    service: UserService = Depends(get_user_service),
):
    """根据ID获取用户"""
    return ApiResponse.success(await service.get_user_by_id(user_id))


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
async def update_user(
    request: UserUpdateRequest,
    user_id: int = Path(..., ge=1, description="用户ID"),
    service: UserService = Depends(get_user_service),
):
    """
    更新用户

    只更新请求中提供的非空字段。
    """
    user = await service.update_user(user_id, request)
    return ApiResponse.success(user, "用户更新成功")


@router.delete("/{user_id}", response_model=ApiResponse[None])
async def delete_user(
    user_id: int = Path(..., ge=1, description="用户ID"),
    service: UserService = Depends(get_user_service),
):
    """删除用户"""
    await service.delete_user(user_id)
    return ApiResponse.success(message="用户删除成功")


@router.post("/{user_id}/enable", response_model=ApiResponse[UserResponse])
async def enable_user(
    user_id: int = Path(..., ge=1, description="用户ID"),
    service: UserService = Depends(get_user_service),
):
    """启用用户"""
    return ApiResponse.success(await service.enable_user(user_id), "用户启用成功")


@router.post("/{user_id}/disable", response_model=ApiResponse[UserResponse])
async def disable_user(
    user_id: int = Path(..., ge=1, description="用户ID"),
    service: UserService = Depends(get_user_service),
):
    """禁用用户"""
    return ApiResponse.success(await service.disable_user(user_id), "用户禁用成功")
