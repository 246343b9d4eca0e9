"""Turn processing: submission checks, transcript rendering and the turn engine.

Every mutation of a game flows through `engine.TurnEngine` so that human
submissions and opponent replies show up consistently in server logs.
"""
