"""
Telegram bot front end.
"""
