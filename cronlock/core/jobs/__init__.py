"""Job definition components."""

from cronlock.core.jobs.codec import decode_config, encode_config
from cronlock.core.jobs.config import JobConfig
from cronlock.core.jobs.definition import JobDefinition
from cronlock.core.jobs.work_items import (
    ClassMethodCall,
    FunctionCall,
    ShellCommand,
    WorkItem,
    build_work_item,
)

__all__ = [
    "JobDefinition",
    "JobConfig",
    "WorkItem",
    "ShellCommand",
    "FunctionCall",
    "ClassMethodCall",
    "build_work_item",
    "encode_config",
    "decode_config",
]
