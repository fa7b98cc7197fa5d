# profilehub/__init__.py
# Resume profile hub: master data, per-profile overrides & swappable persistence

__version__ = "0.1.0"
