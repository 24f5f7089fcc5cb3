"""统一异常体系

所有业务异常继承 DelivkitError。
配置类错误在流水线定义组装（合成）阶段即抛出，不做重试。
CLI 层据此输出友好提示。
"""

from __future__ import annotations


class DelivkitError(Exception):
    """框架基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(DelivkitError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(DelivkitError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class InvalidRepositoryIdentifier(ValidationError):
    """托管 Git 仓库标识无法拆分为 owner/repo"""

    code = "INVALID_REPOSITORY_IDENTIFIER"

    def __init__(self, identifier: str) -> None:
        super().__init__(
            f"仓库标识必须为 'owner/repo' 形式: {identifier!r}",
            details=[identifier],
        )
        self.identifier = identifier


class PipelineDefinitionError(DelivkitError):
    """流水线定义本身拒绝的操作（如重复的阶段名）"""

    code = "PIPELINE_DEFINITION_ERROR"
