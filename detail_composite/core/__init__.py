"""
Core settings, constants, errors and logging.
"""
