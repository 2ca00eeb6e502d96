# ==============================================================================
# 模块加载相关常量
# ==============================================================================

# 模块入口文件名：目录中存在该文件即视为一个模块
AUTOLOAD_FILENAME = "autoload.py"

# 注册到 sys.modules 时使用的名称前缀
MODULE_NAMESPACE_PREFIX = "silmod_modules"


# ==============================================================================
# 错误响应相关常量
# ==============================================================================


class ErrorResponse:
    """结构化错误响应"""

    # Accept 头中包含该子串即视为接受结构化（JSON）响应
    JSON_MARKER = "json"

    # 错误响应中的状态字段取值
    STATUS = "error"

    # 未捕获异常对应的状态码
    INTERNAL_STATUS_CODE = 500
