"""
FastAPI routers grouped by audience (public pages, admin).

Each module exposes an APIRouter included by campus.app.create_app. Shared
objects (settings, store, services, templates) live on app.state.
"""
