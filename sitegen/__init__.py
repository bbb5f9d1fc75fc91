"""SiteGen: intake form to quality-gated multi-page website."""
__version__ = "0.1.0"
