"""
Application entry points for Jukebox.
"""
