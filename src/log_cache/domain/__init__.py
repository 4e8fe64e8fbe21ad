"""
日志缓存域模型

- errors: 错误体系
- models: LogEntry 与 SerializableRecord 协议
"""
