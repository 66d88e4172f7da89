"""
===============================================================================
LOTTERY USE CASES PACKAGE (Public API / Exports)
===============================================================================

Responsibilities:
    - Re-exportar los casos de uso de sorteo (cron y admin) y sus resultados.
===============================================================================
"""

from __future__ import annotations

from .draw_activity import DrawActivityUseCase
from .lottery_results import (
    ActivityDrawResult,
    LotteryError,
    LotteryErrorCode,
    LotteryRunResult,
    PublishActivityResult,
)
from .publish_activity import PublishActivityUseCase
from .run_scheduled_lottery import RunScheduledLotteryUseCase

__all__ = [
    "DrawActivityUseCase",
    "PublishActivityUseCase",
    "RunScheduledLotteryUseCase",
    "ActivityDrawResult",
    "LotteryError",
    "LotteryErrorCode",
    "LotteryRunResult",
    "PublishActivityResult",
]
