"""
Aadhaar-bound account signup and login over one-time passcodes
"""
__version__ = "1.0.0"
