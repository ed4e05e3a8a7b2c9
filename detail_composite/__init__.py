"""
DetailComposite: resolves declarative text-composition configurations into
composite values built from Dataverse records.
"""

__version__ = "1.0.0"
