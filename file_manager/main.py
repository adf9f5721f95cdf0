from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .request_context import RequestContextMiddleware
from .routes.files import register as register_files


app = FastAPI(title="file-manager")

# CORS (tighten in prod)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Exposes the current request to url resolvers (see request_context.current_request)
app.add_middleware(RequestContextMiddleware)

# Admin file manager (admin JWT enforced per route)
register_files(app)


@app.get("/healthz")
async def healthz():
    return {"ok": True}
