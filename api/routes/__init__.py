# api/routes/__init__.py
from . import authors, books, categories, pages, podcasts, tts, users

ROUTERS = [
    authors.router,
    books.router,
    categories.router,
    podcasts.router,
    pages.router,
    users.router,
    tts.router,
]
