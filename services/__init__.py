"""
Collaborators the game loop calls into: ticking, rendering, audio, screens.
"""
