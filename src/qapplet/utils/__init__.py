"""
Utility modules for the applet SDK
"""
