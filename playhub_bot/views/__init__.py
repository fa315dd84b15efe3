"""
Views Module - Discord UI Components

Interactive views for the PlayHub bot:
- LeaderboardView: paginates a computed player leaderboard
"""
