# linerun/__init__.py
