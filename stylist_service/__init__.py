# Stylist Service (v1.0.0)
__version__ = "1.0.0"
