"""webhook 过滤组推导

push 过滤匹配被推送的分支；PR 过滤匹配 PR 的目标（base）分支，而非来源分支。
两者是事件上的不同字段，不可混用。
"""

from __future__ import annotations

from delivkit.core.models import EventAction, FilterGroup


def create_webhook_filters(branch: str | None = None) -> list[FilterGroup]:
    """根据可选的分支约束生成 webhook 过滤组

    参数:
        branch: 限定分支；为空时任意分支的活动都触发构建

    返回:
        指定分支时两个过滤组（push 目标分支 / PR base 分支），否则一个无约束过滤组
    """
    if branch:
        return [
            FilterGroup.in_event_of(EventAction.PUSH).and_branch_is(branch),
            FilterGroup.in_event_of(
                EventAction.PULL_REQUEST_CREATED,
                EventAction.PULL_REQUEST_UPDATED,
            ).and_base_branch_is(branch),
        ]
    return [
        FilterGroup.in_event_of(
            EventAction.PUSH,
            EventAction.PULL_REQUEST_CREATED,
            EventAction.PULL_REQUEST_UPDATED,
        ),
    ]
