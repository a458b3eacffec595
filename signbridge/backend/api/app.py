from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import lessons, progress, recognition, sessions, signs
from .ws import router as ws_router

app = FastAPI(title="SignBridge API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(signs.router)
app.include_router(lessons.router)
app.include_router(sessions.router)
app.include_router(progress.router)
app.include_router(recognition.router)
app.include_router(ws_router)
