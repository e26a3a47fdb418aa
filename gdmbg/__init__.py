"""
gdm-bg-tool

Diagnose and configure the GNOME Display Manager login-screen background.
"""

__version__ = "1.0.0"
