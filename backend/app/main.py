import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db.documents import get_document_store
from .routers import auth, feedback, health, interviews

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5173"

app = FastAPI(title="HireWise API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.environ.get("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
        if origin.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup() -> None:
    get_document_store()


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(interviews.router)
app.include_router(feedback.router)


@app.get("/")
def root():
    return {"message": "HireWise API", "docs": "/docs"}
