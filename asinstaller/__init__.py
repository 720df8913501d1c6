"""
OpenVPN Access Server installation helper
Detects the host distribution and drives APT or YUM/DNF accordingly
"""

__version__ = "1.0.0"
