# api/schemas/__init__.py
