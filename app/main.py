import logging
from fastapi import FastAPI
from dotenv import load_dotenv
load_dotenv()

from app.attendances.router import router as attendances_router
from app.agenda.router import router as agenda_router
from app.treatment_sessions.router import router as treatment_sessions_router

logging.basicConfig(level=logging.INFO)

app = FastAPI()

app.include_router(attendances_router)
app.include_router(agenda_router)
app.include_router(treatment_sessions_router)

@app.get("/health")
def health():
    return {"status": "ok"}
