"""
Companion client for a server-authoritative Monopoly-style game.
"""
