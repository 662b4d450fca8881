# events.py
# =============================================================================
# 向导会话事件: 供展示层实时获取阶段与后台计算状态。
# / Wizard session events for the presentation layer.
# =============================================================================

"""Wizard session events for external integration."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class WizardEvent:
    """向导会话中的结构化事件。

    展示层通过注册 on_event 回调接收此类事件，用于刷新界面、
    显示 "AI unavailable" 提示或丢弃过期结果后的提示。

    Attributes:
        type: 事件类型。
            - "stage_entered": 进入新阶段
            - "transition_rejected": 阶段迁移校验失败
            - "forecast_applied": 模拟结果已写入记录
            - "forecast_discarded": 模拟结果已过期被丢弃
            - "advisor_failed": 顾问服务调用失败
            - "advisor_discarded": 顾问结果到达时阶段已变化，被丢弃
            - "reset": 会话重置
        stage: 事件发生时所在阶段（Stage 的字符串值）。
        session_id: 会话唯一标识。
        timestamp: 单调时钟（秒）。
        detail: 附加数据，结构因 type 而异。
    """

    type: str
    stage: str
    session_id: str
    timestamp: float = field(default_factory=time.monotonic)
    detail: Optional[Dict[str, Any]] = None
