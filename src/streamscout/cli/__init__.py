"""
Command-line interface for streamscout.
"""
