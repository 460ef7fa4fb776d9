"""
FastAPI routers grouped by domain (auth, properties, interests, credits, etc.).

Each module exposes an APIRouter included by ``vilanow.app.create_app``.
Routers resolve services from ``request.app.state`` and translate service
errors into HTTP responses; they never touch files or database tables directly.
"""
