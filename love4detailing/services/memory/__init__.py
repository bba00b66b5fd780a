"""
Memory service module.
"""

from .state_manager import FlowStateManager

__all__ = ["FlowStateManager"]
