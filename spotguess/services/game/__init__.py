"""Game domain services: teams, turns, rounds, scoring and timers.

This package holds the game state machine. It knows nothing about
Flask or Socket.IO: commands go in, notifications come out, which keeps
transport concerns in the socket handlers and out of the game rules.
"""
from .session import GameSession

__all__ = ['GameSession']
