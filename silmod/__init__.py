"""
SilMod - 可插拔模块宿主

发现并激活自注册的扩展模块，并为 API / 浏览器客户端协商错误响应格式。
"""

__version__ = "0.1.0"
