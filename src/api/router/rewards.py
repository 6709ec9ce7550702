"""
Rewards API router - delegates to the rewards controller.
"""

from src.api.controller.rewards.rewards_controller import router as rewards_controller_router

# Re-export the controller router
router = rewards_controller_router

__all__ = ['router']
