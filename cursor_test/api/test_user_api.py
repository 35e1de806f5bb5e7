"""
用户管理接口测试

Pytest 命令示例：
================

pytest cursor_test/api/test_user_api.py -v
"""
import uuid


def user_payload(**overrides):
    suffix = uuid.uuid4().hex[:8]
    payload = {
        "username": f"api_{suffix}",
        "email": f"api_{suffix}@example.com",
        "password": "secret123",
        "realName": "接口用户",
        "phone": "13900000000",
    }
    payload.update(overrides)
    return payload


def create_user(client, api_prefix, **overrides):
    response = client.post(f"{api_prefix}/users", json=user_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestCreateUser:
    """创建用户接口测试类"""

    def test_create_user(self, client, api_prefix):
        """
        测试用例：创建用户

        验证：
        - 返回 201 与统一响应格式
        - 响应使用驼峰字段，不包含密码
        - 默认启用
        """
        # Arrange（准备）
        payload = user_payload()

        # Act（执行）
        response = client.post(f"{api_prefix}/users", json=payload)

        # Assert（断言）
        assert response.status_code == 201
        body = response.json()
        assert body["code"] == 200
        assert body["message"] == "用户创建成功"
        assert isinstance(body["timestamp"], int)
        data = body["data"]
        assert data["username"] == payload["username"]
        assert data["realName"] == "接口用户"
        assert data["status"] == 1
        assert data["statusText"] == "enabled"
        assert "createdAt" in data and "updatedAt" in data
        assert "password" not in data

    def test_duplicate_username(self, client, api_prefix):
        """用户名重复返回 409"""
        existing = create_user(client, api_prefix)

        response = client.post(f"{api_prefix}/users", json=user_payload(username=existing["username"]))

        assert response.status_code == 409
        body = response.json()
        assert body["code"] == 409
        assert body["message"] == f"用户已存在，用户名: {existing['username']}"
        assert body["data"] is None

    def test_duplicate_email(self, client, api_prefix):
        existing = create_user(client, api_prefix)

        response = client.post(f"{api_prefix}/users", json=user_payload(email=existing["email"]))

        assert response.status_code == 409
        assert "邮箱" in response.json()["message"]

    def test_validation_errors(self, client, api_prefix):
        """
        测试用例：请求体校验失败

        验证：
        - 返回 400，message 为参数校验失败
        - data 为字段到错误信息的映射
        """
        response = client.post(
            f"{api_prefix}/users",
            json={"username": "ab", "email": "not-an-email", "password": "123"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == 400
        assert body["message"] == "参数校验失败"
        assert set(body["data"]) == {"username", "email", "password"}

    def test_blank_username_and_password(self, client, api_prefix):
        """满足长度但只有空白的用户名、密码返回 400，且不落库"""
        response = client.post(
            f"{api_prefix}/users",
            json={"username": "   ", "email": "blank@example.com", "password": "      "},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "参数校验失败"
        assert "用户名不能为空" in body["data"]["username"]
        assert "密码不能为空" in body["data"]["password"]
        assert client.get(f"{api_prefix}/users/all").json()["data"] == []


class TestQueryUsers:
    """查询用户接口测试类"""

    def test_get_user(self, client, api_prefix):
        created = create_user(client, api_prefix)

        response = client.get(f"{api_prefix}/users/{created['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["username"] == created["username"]

    def test_get_user_not_found(self, client, api_prefix):
        response = client.get(f"{api_prefix}/users/9999")

        assert response.status_code == 404
        body = response.json()
        assert body["code"] == 404
        assert body["message"] == "用户未找到，ID: 9999"

    def test_get_user_invalid_id(self, client, api_prefix):
        """ID 必须为正整数"""
        response = client.get(f"{api_prefix}/users/0")

        assert response.status_code == 400
        assert "user_id" in response.json()["data"]

    def test_get_by_username(self, client, api_prefix):
        created = create_user(client, api_prefix)

        response = client.get(f"{api_prefix}/users/username/{created['username']}")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == created["id"]

    def test_get_all(self, client, api_prefix):
        for _ in range(3):
            create_user(client, api_prefix)

        response = client.get(f"{api_prefix}/users/all")

        assert response.status_code == 200
        assert len(response.json()["data"]) == 3

    def test_paging(self, client, api_prefix):
        """
        测试用例：分页查询

        验证：
        - 分页元数据使用驼峰字段
        - 降序排序
        """
        ids = [create_user(client, api_prefix)["id"] for _ in range(5)]

        response = client.get(
            f"{api_prefix}/users",
            params={"page": 1, "size": 2, "sort": "id", "direction": "desc"},
        )

        assert response.status_code == 200
        page = response.json()["data"]
        assert [user["id"] for user in page["content"]] == sorted(ids, reverse=True)[2:4]
        assert page["page"] == 1
        assert page["size"] == 2
        assert page["totalElements"] == 5
        assert page["totalPages"] == 3
        assert page["first"] is False
        assert page["last"] is False
        assert page["hasNext"] is True
        assert page["hasPrevious"] is True

    def test_unknown_sort_field(self, client, api_prefix):
        response = client.get(f"{api_prefix}/users", params={"sort": "password"})

        assert response.status_code == 400
        assert response.json()["message"] == "不支持的排序字段: password"

    def test_invalid_page_size(self, client, api_prefix):
        response = client.get(f"{api_prefix}/users", params={"size": 0})

        assert response.status_code == 400
        assert "size" in response.json()["data"]

    def test_search(self, client, api_prefix):
        target = create_user(client, api_prefix, realName="搜索目标")
        create_user(client, api_prefix)

        response = client.get(f"{api_prefix}/users/search", params={"keyword": "搜索"})

        assert response.status_code == 200
        page = response.json()["data"]
        assert page["totalElements"] == 1
        assert page["content"][0]["id"] == target["id"]

    def test_by_status(self, client, api_prefix):
        created = create_user(client, api_prefix)
        create_user(client, api_prefix)
        client.post(f"{api_prefix}/users/{created['id']}/disable")

        response = client.get(f"{api_prefix}/users/status/0")

        assert response.status_code == 200
        page = response.json()["data"]
        assert [user["id"] for user in page["content"]] == [created["id"]]

    def test_by_unknown_status(self, client, api_prefix):
        """未定义的状态值返回空页"""
        create_user(client, api_prefix)

        response = client.get(f"{api_prefix}/users/status/5")

        assert response.status_code == 200
        page = response.json()["data"]
        assert page["content"] == []
        assert page["totalElements"] == 0
        assert page["totalPages"] == 0
        assert page["first"] is True and page["last"] is True

    def test_by_non_numeric_status(self, client, api_prefix):
        response = client.get(f"{api_prefix}/users/status/abc")

        assert response.status_code == 400

    def test_check_username_and_email(self, client, api_prefix):
        created = create_user(client, api_prefix)

        taken = client.get(f"{api_prefix}/users/check/username", params={"username": created["username"]})
        free = client.get(f"{api_prefix}/users/check/email", params={"email": "free@example.com"})

        assert taken.json()["data"] is True
        assert free.json()["data"] is False

    def test_check_email_uses_normalized_domain(self, client, api_prefix):
        """
        测试用例：邮箱域名大小写

        验证：
        - 创建时域名被规范化为小写
        - 用原始大小写查询仍判定为已存在，与创建时的冲突判断一致
        """
        # Arrange（准备）
        created = create_user(client, api_prefix, email="Case@EXAMPLE.com")

        # Act（执行）
        response = client.get(f"{api_prefix}/users/check/email", params={"email": "Case@EXAMPLE.com"})
        duplicate = client.post(f"{api_prefix}/users", json=user_payload(email="Case@EXAMPLE.com"))

        # Assert（断言）
        assert created["email"] == "Case@example.com"
        assert response.json()["data"] is True
        assert duplicate.status_code == 409

    def test_check_invalid_email(self, client, api_prefix):
        response = client.get(f"{api_prefix}/users/check/email", params={"email": "not-an-email"})

        assert response.status_code == 200
        assert response.json()["data"] is False


class TestModifyUsers:
    """修改用户接口测试类"""

    def test_partial_update(self, client, api_prefix):
        """只更新提供的字段"""
        created = create_user(client, api_prefix)

        response = client.put(f"{api_prefix}/users/{created['id']}", json={"phone": "13700000000"})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "用户更新成功"
        assert body["data"]["phone"] == "13700000000"
        assert body["data"]["realName"] == created["realName"]
        assert body["data"]["email"] == created["email"]

    def test_update_email_conflict(self, client, api_prefix):
        first = create_user(client, api_prefix)
        second = create_user(client, api_prefix)

        response = client.put(f"{api_prefix}/users/{second['id']}", json={"email": first["email"]})

        assert response.status_code == 409

    def test_update_not_found(self, client, api_prefix):
        response = client.put(f"{api_prefix}/users/9999", json={"phone": "13700000000"})

        assert response.status_code == 404

    def test_enable_disable(self, client, api_prefix):
        created = create_user(client, api_prefix)

        disabled = client.post(f"{api_prefix}/users/{created['id']}/disable")
        enabled = client.post(f"{api_prefix}/users/{created['id']}/enable")

        assert disabled.json()["message"] == "用户禁用成功"
        assert disabled.json()["data"]["statusText"] == "disabled"
        assert enabled.json()["message"] == "用户启用成功"
        assert enabled.json()["data"]["status"] == 1

    def test_delete(self, client, api_prefix):
        created = create_user(client, api_prefix)

        response = client.delete(f"{api_prefix}/users/{created['id']}")

        assert response.status_code == 200
        assert response.json()["message"] == "用户删除成功"
        assert response.json()["data"] is None
        assert client.get(f"{api_prefix}/users/{created['id']}").status_code == 404

    def test_delete_not_found(self, client, api_prefix):
        response = client.delete(f"{api_prefix}/users/9999")

        assert response.status_code == 404
