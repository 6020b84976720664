"""
Reference data and position loading.

Static security definitions and position quantities are loaded once, before
the market bus starts, and validated as a whole.
"""
