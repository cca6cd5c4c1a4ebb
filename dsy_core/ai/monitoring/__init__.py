"""
AI Monitoring Module - structured logging of orchestration attempts.
"""

from dsy_core.ai.monitoring.logger import AILogger, ai_logger

__all__ = ["AILogger", "ai_logger"]
