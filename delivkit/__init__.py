"""delivkit - 交付流水线代码仓来源抽象"""

__version__ = "0.3.0"
