# styles.py
from dataclasses import dataclass
from typing import Any

PRIMARY = "#007AFF"
SUCCESS = "#34C759"
WARNING = "#FF9500"
ERROR = "#FF3B30"


@dataclass(frozen=True)
class ClusterStyle:
    color: str
    size: int       # 直径 [px]
    font_size: int
    bold: bool


def cluster_style(count: int) -> ClusterStyle:
    """台数で3段階（10台以上 / 5台以上 / それ未満）"""
    if count >= 10:
        return ClusterStyle(ERROR, 50, 16, True)
    if count >= 5:
        return ClusterStyle(WARNING, 45, 14, False)
    return ClusterStyle(PRIMARY, 40, 12, False)


def _field(payload: Any, name: str):
    if isinstance(payload, dict):
        return payload.get(name)
    return getattr(payload, name, None)


def vehicle_marker_color(payload: Any) -> str:
    # 貸出不可 > 即時予約 > 通常 の優先順
    if _field(payload, "available") is False:
        return ERROR
    if _field(payload, "instant_booking"):
        return SUCCESS
    return PRIMARY
