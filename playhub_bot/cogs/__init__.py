"""
Cogs - Discord command groups loaded as extensions by the bot.
"""
