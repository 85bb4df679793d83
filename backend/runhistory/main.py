from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from runhistory.api.routes import run
from runhistory.core.config import get_settings
from runhistory.core.log_setup import configure_logging

configure_logging(get_settings().log_level)

app = FastAPI(title=get_settings().app_name)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(run.router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
