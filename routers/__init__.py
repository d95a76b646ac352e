import fastapi
from . import auth, pages

def include_routers(app: fastapi.FastAPI) -> fastapi.FastAPI:
    app.include_router(auth.router)
    app.include_router(pages.router)
    return app
