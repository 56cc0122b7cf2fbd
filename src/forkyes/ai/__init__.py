"""
ForkYes - AI pipeline.

preferences -> prompt (prompts.py) -> completion (client.py) -> parse (parsing.py),
orchestrated by service.AIService.
"""

from forkyes.ai.service import AIService

__all__ = ["AIService"]
