"""
HAL Assistant - Voice-driven conversations with chat models.

Utterances are routed either to local hooks (session management commands)
or to the current chat session, whose streamed reply is spoken one
sentence at a time.
"""

__version__ = "1.0.0"
