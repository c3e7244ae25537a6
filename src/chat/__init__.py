"""Platform-neutral chat layer.

Trigger extraction, reply building, per-message response sessions and interactive control
handling. Nothing here imports aiogram; `src.bot` adapts Telegram updates to these types.
"""
