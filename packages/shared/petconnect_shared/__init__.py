"""
Schemas and rules shared by the PetConnect resource store and its client.
"""

__version__ = "0.1.0"
