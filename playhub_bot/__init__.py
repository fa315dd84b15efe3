"""
PlayHub leaderboard bot.

Discord bot and async client library over the PlayHub tournament API:
event and store search, event standings, and cross-event player leaderboards.
"""

__version__ = '1.0.0'
