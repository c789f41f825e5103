from app.agenda.service import AgendaService

__all__ = ["AgendaService"]
