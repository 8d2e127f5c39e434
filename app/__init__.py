"""
Aides Simulator

Determines which French government aid programs plausibly apply to a user's
situation, estimates a monthly amount for each, and keeps the user's
simulation history and saved aides.
"""

__version__ = "1.0.0"
__description__ = "Eligibility and benefit estimation for French government aid"
